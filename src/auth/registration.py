"""Account registration form.

Client-side checks are deliberately looser than the student profile form:
any all-digit id is accepted here and the backend decides the rest. Backend
422 detail is mapped back onto the fields; any other failure becomes a single
message on the role field.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from src.api.client import ApiClient
from src.api.errors import AccessError, BackendValidationError
from src.logutils import get_logger, with_context
from src.profile.models import AccountRegistration, Role, is_valid_email

logger = get_logger(__name__)

REGISTRATION_FIELDS = ("user_id", "display_name", "email", "role")

GENERIC_REGISTRATION_ERROR = "Registration failed. Please try again."


def validate_registration(
    user_id: str, display_name: str, email: str, role: Optional[str]
) -> dict[str, str]:
    """Client-side validation.

    Returns:
        Field name to message; empty when the form can be submitted
    """
    errors: dict[str, str] = {}
    if not user_id or not user_id.isascii() or not user_id.isdigit():
        errors["user_id"] = "ID must contain digits only."
    if not display_name or not display_name.strip():
        errors["display_name"] = "Please enter your name."
    if not is_valid_email(email):
        errors["email"] = "Please enter a valid email address."
    if role not in (Role.STUDENT.value, Role.TUTOR.value):
        errors["role"] = "Please choose student or tutor."
    return errors


@dataclass
class AccountRegistrationForm:
    """State of the "create account" form."""

    user_id: str = ""
    display_name: str = ""
    email: str = ""
    role: str = ""
    errors: dict[str, str] = field(default_factory=dict)
    completed: bool = False
    response: dict[str, Any] = field(default_factory=dict)

    def set_field(self, name: str, value: str) -> None:
        if name not in REGISTRATION_FIELDS:
            raise KeyError(f"Unknown registration field: {name}")
        setattr(self, name, value)
        self.errors.pop(name, None)

    def validate(self) -> bool:
        self.errors = validate_registration(self.user_id, self.display_name, self.email, self.role)
        return not self.errors

    def submit(self, client: ApiClient) -> bool:
        """Validate and POST the registration.

        Returns:
            True when the backend accepted the account
        """
        if not self.validate():
            return False

        registration = AccountRegistration(
            user_id=self.user_id,
            display_name=self.display_name.strip(),
            email=self.email.strip(),
            role=Role(self.role),
        )

        with with_context(operation="register", component="auth", role=self.role):
            try:
                self.response = client.register(registration)
            except BackendValidationError as e:
                self.errors = self._map_backend_errors(e.field_errors)
                logger.info(
                    "Registration rejected by backend",
                    extra={"extra_data": {"fields": sorted(e.field_errors)}},
                )
                return False
            except AccessError as e:
                logger.warning("Registration failed: %s", e)
                self.errors = {"role": GENERIC_REGISTRATION_ERROR}
                return False

        self.completed = True
        logger.info("Account registered")
        return True

    @staticmethod
    def _map_backend_errors(field_errors: dict[str, str]) -> dict[str, str]:
        mapped = {name: msg for name, msg in field_errors.items() if name in REGISTRATION_FIELDS}
        return mapped or {"role": GENERIC_REGISTRATION_ERROR}
