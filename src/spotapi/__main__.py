from spotapi.app import main

main()
