"""Admin bearer tokens valid for the lifetime of the process."""
from __future__ import annotations

import secrets
from threading import Lock


class AdminTokenStore:
    """Issue, check and revoke admin tokens. Tokens never expire and are not persisted."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tokens: set[str] = set()

    def issue(self) -> str:
        token = f"admin_{secrets.token_urlsafe(32)}"
        with self._lock:
            self._tokens.add(token)
        return token

    def is_valid(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            return token in self._tokens

    def revoke(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            if token in self._tokens:
                self._tokens.discard(token)
                return True
            return False
