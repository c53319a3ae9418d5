"""Token Store - holds the bearer token between requests and restarts.

Invariants:
    - get() returns None when no token is stored (never "")
    - FileTokenStore writes the token with owner-only permissions
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class TokenStore:
    """In-memory token store."""

    def __init__(self, token: str | None = None):
        self._token = token or None

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token or None

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Token persisted to a file so a new process picks up the session."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        token = None
        if self.path.exists():
            token = self.path.read_text(encoding="utf-8").strip() or None
        super().__init__(token)

    def set(self, token: str) -> None:
        super().set(token)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        super().clear()
        if self.path.exists():
            self.path.unlink()
            logger.debug(f"Removed stored token at {self.path}")
