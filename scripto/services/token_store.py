# @TASK P2-T2.1 - 인증 토큰 저장소
# @TEST tests/test_token_store.py

"""Bearer token cache with optional on-disk persistence.

The store has two states: empty, or holding a single token.  When a
``path`` is given the token survives process restarts as a small JSON
file (``{"access_token": "..."}``).  The file is plaintext; it is created
with owner-only permissions but is not encrypted.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _preview(token: str) -> str:
    return f"{token[:8]}..." if len(token) > 8 else token


class TokenStore:
    """Holds the bearer token for the active session.

    Args:
        path: JSON file used to persist the token.  ``None`` keeps the
            token in memory only.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path: Path | None = Path(path).expanduser() if path else None
        self._token: str | None = self._load()

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self) -> str | None:
        """Return the held token, or ``None`` when the store is empty."""
        return self._token

    def save(self, token: str) -> None:
        """Hold *token*, replacing any previous one.

        Raises:
            OSError: The token file could not be written; the previous
                token is still held.
        """
        if not token:
            raise ValueError("token must be a non-empty string")
        self._persist(token)
        self._token = token
        logger.info("Token saved (%s)", _preview(token))

    def clear(self) -> None:
        """Forget the held token (no-op when already empty)."""
        had_token = self._token is not None
        self._token = None
        if self._path is not None:
            with contextlib.suppress(FileNotFoundError):
                self._path.unlink()
        if had_token:
            logger.info("Token cleared")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> str | None:
        if self._path is None or not self._path.exists():
            return None
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", self._path, exc)
            return None

        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            logger.warning("Token file %s has no access_token", self._path)
            return None
        return token

    def _persist(self, token: str) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"access_token": token}, f)
            os.replace(tmp_path, self._path)
        except OSError:
            logger.warning("Failed to write token file %s", self._path)
            with contextlib.suppress(FileNotFoundError):
                tmp_path.unlink()
            raise
