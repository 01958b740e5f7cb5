r"""Sign-in state machine.

States::

    UNAUTHENTICATED --(code in URL)--> CODE_RECEIVED --advance--> VERIFYING --> AUTHENTICATED
                                                                           \--> FAILED --reset--> UNAUTHENTICATED
    (stored token) -----------------------------------------> VERIFYING --> AUTHENTICATED
                                                                        \--> UNAUTHENTICATED (token cleared)
    AUTHENTICATED --logout--> UNAUTHENTICATED

Sign-in itself is a browser navigation to the identity provider
(``authorize_url``); the provider sends the browser back with ``?code=``.
A code is exchanged at most once per controller; a failed exchange waits for
the user to start over instead of redirecting again.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from src.api.client import ApiClient
from src.api.config import ClientConfig
from src.api.errors import AuthExchangeError, NetworkError
from src.logutils import get_logger, with_context
from src.profile.models import LoginResult

from .session import Session

logger = get_logger(__name__)


class AuthState(str, Enum):
    """Where the controller is in the sign-in flow."""

    UNAUTHENTICATED = "unauthenticated"
    CODE_RECEIVED = "code_received"
    VERIFYING = "verifying"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthFlowController:
    """Drives sign-in, session restoration and logout for one Session."""

    def __init__(self, client: ApiClient, session: Session, config: ClientConfig) -> None:
        self.client = client
        self.session = session
        self.config = config
        self.state = AuthState.UNAUTHENTICATED
        self.error: Optional[str] = None
        self._pending_code: Optional[str] = None
        self._used_codes: set[str] = set()

    def start(self, code: Optional[str] = None) -> AuthState:
        """Choose the initial state.

        A code from the callback URL takes precedence over a stored token:
        the user just completed a fresh sign-in.
        """
        if code and self.receive_code(code):
            return self.state
        if self.session.bearer_token:
            self.state = AuthState.VERIFYING
        else:
            self.state = AuthState.UNAUTHENTICATED
        return self.state

    def receive_code(self, code: str) -> bool:
        """Accept an authorization code from the callback URL.

        Returns:
            True if the code was queued for exchange. Codes already used by
            this controller, and codes arriving while the user is signed in or
            a sign-in is in progress, are ignored.
        """
        if not code or code in self._used_codes:
            return False
        if self.state not in (AuthState.UNAUTHENTICATED, AuthState.FAILED):
            logger.debug("Ignoring authorization code", extra={"extra_data": {"state": self.state.value}})
            return False
        self._pending_code = code
        self.error = None
        self.state = AuthState.CODE_RECEIVED
        return True

    def authorize_url(self) -> str:
        """Identity-provider URL to send the browser to for sign-in."""
        return self.config.identity_provider_url()

    def advance(self) -> AuthState:
        """Run the pending network step, if any, and return the new state."""
        if self.state == AuthState.CODE_RECEIVED:
            self._exchange_code()
        elif self.state == AuthState.VERIFYING:
            self._verify_session()
        return self.state

    def _exchange_code(self) -> None:
        code = self._pending_code
        self._pending_code = None
        if code is None:
            self.state = AuthState.UNAUTHENTICATED
            return
        # Marked used before the request so no path can send it twice
        self._used_codes.add(code)
        self.state = AuthState.VERIFYING

        with with_context(operation="code_exchange", component="auth"):
            try:
                result = self.client.login(code, self.config.redirect_uri)
            except (AuthExchangeError, NetworkError) as e:
                logger.warning("Authorization code exchange failed: %s", e)
                self.error = e.user_message
                self.state = AuthState.FAILED
                return

            self.session.sign_in(result.access_token, result.user_id, result.role)
            self.state = AuthState.AUTHENTICATED
            logger.info(
                "Signed in",
                extra={"extra_data": {"user_id": result.user_id, "role": result.role.value}},
            )

    def _verify_session(self) -> None:
        with with_context(operation="verify_session", component="auth"):
            try:
                identity = self.client.me()
            except (AuthExchangeError, NetworkError) as e:
                logger.info("Stored token rejected, signing out: %s", e)
                self.session.clear()
                self.state = AuthState.UNAUTHENTICATED
                return

            self.session.user_id = identity.user_id
            self.session.role = identity.role
            self.state = AuthState.AUTHENTICATED
            logger.info("Session restored", extra={"extra_data": {"role": identity.role.value}})

    def adopt_registration(self, response_body: dict[str, Any]) -> bool:
        """Sign in straight after registration when the backend returned a token.

        Returns:
            True if the response carried a usable token and the user is now
            signed in, False if they still need to sign in.
        """
        if "access_token" not in response_body:
            return False
        try:
            result = LoginResult.model_validate(response_body)
        except PydanticValidationError:
            logger.warning("Registration response carried an unusable token payload")
            return False
        self.session.sign_in(result.access_token, result.user_id, result.role)
        self.error = None
        self.state = AuthState.AUTHENTICATED
        return True

    def reset(self) -> None:
        """Leave FAILED so the user can start a new sign-in."""
        if self.state == AuthState.FAILED:
            self.error = None
            self.state = AuthState.UNAUTHENTICATED

    def logout(self) -> None:
        self.session.clear()
        self._pending_code = None
        self.error = None
        self.state = AuthState.UNAUTHENTICATED
        logger.info("Signed out")
