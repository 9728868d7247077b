"""Thread-safe holder for the current bearer token.

:class:`TokenStore` is the only shared mutable state of a
:class:`~spotapi.client.async_client.SpotifyClient`. Every request reads
it once in its authentication step; an external auth flow writes it with
:meth:`TokenStore.update_token`; the transport clears it when the API
answers 401 so that later requests fail fast with
:class:`~spotapi.exceptions.NoTokenError` instead of reusing a dead token.

All access goes through one :class:`threading.Lock` acquired with a
``with`` block, so the lock is released even if the critical section
raises and the store never stays locked after a failure.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Lock-guarded cell holding at most one bearer token.

    Example::

        store = TokenStore()
        store.has_token()          # False
        store.update_token("abc")
        store.get_token()          # "abc"
        store.clear_token()
    """

    def __init__(self, token: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        if token is not None:
            self.update_token(token)

    def has_token(self) -> bool:
        with self._lock:
            return self._token is not None

    def get_token(self) -> Optional[str]:
        """Return a snapshot of the current token, or ``None``."""
        with self._lock:
            return self._token

    def update_token(self, new_token: str) -> None:
        """Replace the current token unconditionally.

        Raises:
            ValueError: If *new_token* is empty; the stored token is left
                as it was. Use :meth:`clear_token` to remove it.
        """
        if not new_token:
            raise ValueError("Bearer token must be a non-empty string")
        with self._lock:
            self._token = new_token
        logger.debug("Bearer token updated")

    def clear_token(self) -> None:
        with self._lock:
            had_token = self._token is not None
            self._token = None
        if had_token:
            logger.debug("Bearer token cleared")
