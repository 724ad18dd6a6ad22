"""Persistent session-token cache keyed by ``(username, server)``.

Tokens live in ``~/.local/share/shiftauth/tokens/`` (XDG) or the
platform-equivalent directory, one JSON file per key. The file name is
``token_<sha256>`` where the digest covers the JSON-encoded
``[username, server]`` pair, so every distinct key (including an unset
username) maps to its own file and no character in a login can escape the
directory.

Writes go through :func:`~shiftauth.config.atomic_write` with ``0o600``
permissions so a token is never world-readable, even momentarily.

See Also:
    :class:`~shiftauth.auth.token.TokenAuth` -- reads and saves tokens here.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from shiftauth.config import atomic_write, get_tokens_dir

_PREFIX = "token_"


class TokenEntry(BaseModel):
    """A single cached token as stored on disk."""

    username: Optional[str] = Field(default=None, description="Login the token belongs to")
    server: str = Field(description="Broker host the token was issued by")
    token: str = Field(description="The bearer token")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the token was cached",
    )


class TokenStore:
    """Read/write cached tokens under a single directory.

    A missing directory is treated as an empty store; it is created on the
    first :meth:`put`.

    Args:
        directory: Where token files are kept.

    Example::

        store = TokenStore(tmp_dir)
        store.put("dev@example.com", "broker.example.com", "tok123")
        assert store.get("dev@example.com", "broker.example.com") == "tok123"
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    @classmethod
    def default(cls) -> TokenStore:
        """Return a store rooted at :func:`~shiftauth.config.get_tokens_dir`."""
        return cls(get_tokens_dir())

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, username: Optional[str], server: str) -> Path:
        """Return the file path used for the ``(username, server)`` key."""
        key = json.dumps([username, server])
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._dir / f"{_PREFIX}{digest}"

    def get(self, username: Optional[str], server: str) -> Optional[str]:
        """Return the cached token, or ``None`` if absent or unreadable."""
        path = self.path_for(username, server)
        if not path.is_file():
            return None
        try:
            entry = TokenEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except (ValueError, OSError):
            return None
        return entry.token

    def put(self, username: Optional[str], server: str, token: str) -> None:
        """Cache *token* for the key, replacing any previous value.

        Raises:
            OSError: If the file cannot be written.
        """
        entry = TokenEntry(username=username, server=server, token=token)
        atomic_write(
            self.path_for(username, server),
            entry.model_dump_json(indent=2) + "\n",
            mode=0o600,
        )

    def clear(self) -> bool:
        """Delete every cached token.

        Returns:
            ``True`` once the directory holds no token files.
        """
        if not self._dir.is_dir():
            return True
        for path in self._dir.glob(f"{_PREFIX}*"):
            if path.is_file():
                path.unlink()
        return True
