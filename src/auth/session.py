"""The signed-in session of one client instance."""

from dataclasses import dataclass, field
from typing import Optional

from src.api.token_store import TokenStore
from src.profile.models import Role


@dataclass
class Session:
    """Role and user id of the signed-in user.

    The bearer token lives in the TokenStore; ``bearer_token`` reads through
    to it so the session and the outgoing requests never disagree.
    """

    token_store: TokenStore = field(default_factory=TokenStore)
    role: Optional[Role] = None
    user_id: Optional[str] = None

    @property
    def bearer_token(self) -> Optional[str]:
        return self.token_store.get()

    @property
    def is_authenticated(self) -> bool:
        return self.role is not None and self.bearer_token is not None

    def sign_in(self, token: str, user_id: str, role: Role) -> None:
        self.token_store.set(token)
        self.user_id = user_id
        self.role = role

    def clear(self) -> None:
        """Forget everything, including the stored token."""
        self.token_store.clear()
        self.role = None
        self.user_id = None
