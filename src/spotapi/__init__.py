"""spotapi -- typed async client for the Spotify Web API.

This package turns typed request descriptions into authenticated HTTPS
calls against ``api.spotify.com`` and maps each response into a typed
envelope carrying ETag / max-age cache metadata. Parsing of the JSON
payload is deferred until the caller asks for it.

Typical usage::

    from spotapi.client import SpotifyClient
    from spotapi.models import Artist

    async with SpotifyClient() as client:
        client.update_token(token)
        response = await client.get_artist("0OdUWJ0sBjDrqHygGUXeCF").send()
        artist = response.deserialize()

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for API resources and configuration.
    config: XDG-aware configuration and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
