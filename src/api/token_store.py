"""Bearer token storage.

The store is the single holder of the access token. Storage is pluggable:
``MemoryTokenStorage`` keeps the token for the lifetime of the process (or of
the Streamlit browser session that owns the store) and is the default;
``FileTokenStorage`` persists it to a JSON file and is opt-in, used by the CLI
so that a sign-in survives between invocations.
"""

import json
import os
from pathlib import Path
from typing import Optional, Protocol

from src.logutils import get_logger

logger = get_logger(__name__)


class TokenStorage(Protocol):
    """Backend for a TokenStore."""

    def load(self) -> Optional[str]: ...

    def save(self, token: Optional[str]) -> None: ...


class MemoryTokenStorage:
    """Keeps the token in memory only."""

    def __init__(self) -> None:
        self._token: Optional[str] = None

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: Optional[str]) -> None:
        self._token = token


class FileTokenStorage:
    """Keeps the token in a JSON file readable only by the current user."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(
                "Ignoring unreadable token file",
                extra={"extra_data": {"path": str(self.path), "error": str(e)}},
            )
            return None
        token = data.get("access_token") if isinstance(data, dict) else None
        return token or None

    def save(self, token: Optional[str]) -> None:
        if token is None:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # An existing file keeps its old mode until tightened here
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps({"access_token": token}))


class TokenStore:
    """Process-wide holder of the bearer token.

    ``set`` writes through to the storage strategy, so every later ``get``
    (and therefore every authenticated request) sees the new value at once.
    """

    def __init__(self, storage: Optional[TokenStorage] = None) -> None:
        self._storage = storage or MemoryTokenStorage()

    def get(self) -> Optional[str]:
        return self._storage.load()

    def set(self, token: Optional[str]) -> None:
        self._storage.save(token)
        logger.debug("Token %s", "stored" if token else "cleared")

    def clear(self) -> None:
        self.set(None)


def create_token_store(kind: str = "memory", token_file: Optional[Path] = None) -> TokenStore:
    """Build a TokenStore for a ``TOKEN_STORAGE`` setting."""
    if kind == "memory":
        return TokenStore(MemoryTokenStorage())
    if kind == "file":
        if token_file is None:
            raise ValueError("File token storage requires a token_file path")
        return TokenStore(FileTokenStorage(token_file))
    raise ValueError(f"Unknown token storage: {kind!r}")


_default_store: Optional[TokenStore] = None


def get_token_store() -> TokenStore:
    """Return the process-wide default store, creating an in-memory one on first use."""
    global _default_store
    if _default_store is None:
        _default_store = TokenStore()
    return _default_store


def set_token_store(store: Optional[TokenStore]) -> None:
    """Replace the process-wide default store (``None`` resets it)."""
    global _default_store
    _default_store = store
