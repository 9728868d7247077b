"""Bearer-token state for spotapi.

Token acquisition (OAuth flows) happens outside this package: the
application obtains a token and installs it with
:meth:`~spotapi.client.async_client.SpotifyClient.update_token`. This
package only holds the token and lets the CLI resolve one from a
configured source.

- :class:`TokenStore` -- lock-guarded cell for the current token.
- :func:`load_token` -- install the token named by a
  :class:`~spotapi.models.ClientConfig` into a store.
"""

from spotapi.auth.token_store import TokenStore
from spotapi.auth.loader import load_token

__all__ = ["TokenStore", "load_token"]
