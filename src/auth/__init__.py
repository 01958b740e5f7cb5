"""Session, sign-in flow and account registration."""

from .flow import AuthFlowController, AuthState
from .registration import AccountRegistrationForm, validate_registration
from .session import Session

__all__ = [
    "AccountRegistrationForm",
    "AuthFlowController",
    "AuthState",
    "Session",
    "validate_registration",
]
