"""
Session-scoped CSP nonces.

One nonce is issued per session and reused for every request of that
session, so all inline tags rendered during a navigation cycle share it.
A nonce is only created when something renders it; peek() reads without
creating. The nonce lives in the session store; this module keeps no
cache of its own.
"""

import base64
import logging
import secrets
from typing import Callable, Optional

from headerguard.domain.security.errors import SecureRandomUnavailableError
from headerguard.domain.security.ports import SessionStore

logger = logging.getLogger(__name__)

NONCE_SESSION_KEY = "csp_nonce"
MIN_NONCE_BYTES = 16


class NonceProvider:
    """Issues and caches one cryptographic nonce per session."""

    def __init__(
        self,
        store: SessionStore,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        num_bytes: int = MIN_NONCE_BYTES,
    ) -> None:
        if num_bytes < MIN_NONCE_BYTES:
            raise ValueError(f"num_bytes must be >= {MIN_NONCE_BYTES}")
        self._store = store
        self._random_bytes = random_bytes
        self._num_bytes = num_bytes

    def nonce(self, session_id: str) -> str:
        """Return the session's nonce, generating it on first use."""
        return self._store.get_or_create(session_id, NONCE_SESSION_KEY, self._generate)

    def peek(self, session_id: str) -> Optional[str]:
        """Return the session's nonce if one was issued, without creating it."""
        return self._store.get(session_id, NONCE_SESSION_KEY)

    def nonce_attribute(self, session_id: str) -> str:
        """Return the nonce as an HTML attribute, e.g. nonce="abc=="."""
        return f'nonce="{self.nonce(session_id)}"'

    def forget(self, session_id: str) -> None:
        """Discard the session's nonce (session ended)."""
        self._store.delete(session_id, NONCE_SESSION_KEY)

    def _generate(self) -> str:
        try:
            raw = self._random_bytes(self._num_bytes)
        except Exception as exc:
            logger.error("Secure random source failed: %s", type(exc).__name__)
            raise SecureRandomUnavailableError(str(exc) or type(exc).__name__) from exc

        if not isinstance(raw, bytes) or len(raw) < self._num_bytes:
            raise SecureRandomUnavailableError(
                f"expected {self._num_bytes} random bytes"
            )
        return base64.b64encode(raw).decode("ascii")
