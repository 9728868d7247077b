"""Resolve a bearer token from the configured source into a :class:`TokenStore`."""

from __future__ import annotations

from spotapi.auth.token_store import TokenStore
from spotapi.config import resolve_credential
from spotapi.exceptions import CredentialNotFoundError
from spotapi.models import ClientConfig


def load_token(store: TokenStore, config: ClientConfig) -> bool:
    """Install the token named by ``config.token_source`` into *store*.

    A source that cannot be resolved (unset env var, missing file) leaves
    the store untouched so that the first request fails with
    :class:`~spotapi.exceptions.NoTokenError` rather than at startup.

    Returns:
        ``True`` if a token was installed.

    Raises:
        ConfigError: If the source descriptor itself is malformed or the
            file cannot be read.
    """
    try:
        token = resolve_credential(config.token_source).strip()
    except CredentialNotFoundError:
        return False
    if not token:
        return False
    store.update_token(token)
    return True
