"""Configuration for the Owl & Lion Access client."""

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlencode

DEFAULT_API_BASE = "https://customized-training.org"
DEFAULT_APP_BASE_URL = "http://localhost:8501"
DEFAULT_SCOPE = "openid profile email"
DEFAULT_TOKEN_FILE = Path("~/.owl-lion-access/token.json")

TOKEN_STORAGE_KINDS = ("memory", "file")


@dataclass
class ClientConfig:
    """Configuration for the backend API and the identity provider."""

    authorize_url: str
    client_id: str
    api_base: str = DEFAULT_API_BASE
    redirect_uri: str = DEFAULT_APP_BASE_URL
    scope: str = DEFAULT_SCOPE
    timeout: float = 15.0  # seconds
    token_storage: str = "memory"
    token_file: Path = DEFAULT_TOKEN_FILE
    chat_reply_delay: float = 1.0  # seconds

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create configuration from environment variables."""
        authorize_url = os.environ.get("OAUTH_AUTHORIZE_URL")
        client_id = os.environ.get("OAUTH_CLIENT_ID")

        if not authorize_url:
            raise ValueError("OAUTH_AUTHORIZE_URL environment variable is required")
        if not client_id:
            raise ValueError("OAUTH_CLIENT_ID environment variable is required")

        token_storage = os.environ.get("TOKEN_STORAGE", "memory").lower()
        if token_storage not in TOKEN_STORAGE_KINDS:
            raise ValueError(
                f"TOKEN_STORAGE must be one of {', '.join(TOKEN_STORAGE_KINDS)}, got {token_storage!r}"
            )

        return cls(
            authorize_url=authorize_url,
            client_id=client_id,
            api_base=os.environ.get("API_BASE", DEFAULT_API_BASE).rstrip("/"),
            redirect_uri=os.environ.get("APP_BASE_URL", DEFAULT_APP_BASE_URL),
            scope=os.environ.get("OAUTH_SCOPE", DEFAULT_SCOPE),
            timeout=float(os.environ.get("API_TIMEOUT", "15")),
            token_storage=token_storage,
            token_file=Path(os.environ.get("TOKEN_FILE", str(DEFAULT_TOKEN_FILE))),
            chat_reply_delay=float(os.environ.get("CHAT_REPLY_DELAY", "1.0")),
        )

    def api_url(self, path: str) -> str:
        """Absolute URL for a backend path such as ``/api/auth/me``."""
        return f"{self.api_base}/{path.lstrip('/')}"

    def identity_provider_url(self) -> str:
        """Authorization endpoint URL that sends the browser back to this client."""
        query = urlencode(
            {
                "client_id": self.client_id,
                "response_type": "code",
                "scope": self.scope,
                "redirect_uri": self.redirect_uri,
            }
        )
        separator = "&" if "?" in self.authorize_url else "?"
        return f"{self.authorize_url}{separator}{query}"
