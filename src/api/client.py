"""HTTP access to the Owl & Lion backend.

``AuthenticatedFetch`` is the only place a request leaves the client: it
attaches the bearer token read from the TokenStore at call time. ``ApiClient``
wraps the backend endpoints and turns responses into models or errors.
Neither retries nor refreshes tokens; every failure reaches the caller.
"""

from typing import Any, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from src.logutils import get_logger
from src.profile.models import (
    AccountRegistration,
    Identity,
    LoginResult,
    StudentProfile,
    UploadedFile,
)

from .config import ClientConfig
from .errors import (
    ApiStatusError,
    AuthExchangeError,
    BackendValidationError,
    NetworkError,
    parse_validation_detail,
)
from .token_store import TokenStore

logger = get_logger(__name__)


class AuthenticatedFetch:
    """Sends requests with ``Authorization: Bearer <token>`` when a token is stored."""

    def __init__(
        self,
        token_store: TokenStore,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ) -> None:
        self.token_store = token_store
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, method: str, url: str, **options: Any) -> requests.Response:
        """Send one request.

        Any caller-supplied Authorization header is replaced. Without a token
        the header is sent empty.

        Raises:
            NetworkError: The request failed before a response arrived
        """
        headers = {
            key: value
            for key, value in (options.pop("headers", None) or {}).items()
            if key.lower() != "authorization"
        }
        token = self.token_store.get()
        headers["Authorization"] = f"Bearer {token}" if token else ""
        options.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, headers=headers, **options)
        except requests.RequestException as e:
            logger.warning(
                "Request failed",
                extra={"extra_data": {"method": method, "url": url, "error": type(e).__name__}},
            )
            raise NetworkError(f"{method} {url} failed: {e}", original_error=e) from e

        logger.debug(
            "Request completed",
            extra={"extra_data": {"method": method, "url": url, "status": response.status_code}},
        )
        return response

    def get(self, url: str, **options: Any) -> requests.Response:
        return self.request("GET", url, **options)

    def post(self, url: str, **options: Any) -> requests.Response:
        return self.request("POST", url, **options)

    def put(self, url: str, **options: Any) -> requests.Response:
        return self.request("PUT", url, **options)


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


class ApiClient:
    """Typed wrappers around the backend endpoints."""

    def __init__(self, config: ClientConfig, fetch: AuthenticatedFetch) -> None:
        self.config = config
        self.fetch = fetch

    # -- auth -------------------------------------------------------------

    def login(self, code: str, redirect_uri: str) -> LoginResult:
        """Exchange an authorization code for a bearer token.

        Raises:
            AuthExchangeError: Non-2xx status or malformed response
            NetworkError: No response
        """
        url = self.config.api_url("/api/auth/login")
        response = self.fetch.post(url, json={"code": code, "redirect_uri": redirect_uri})
        if not _is_success(response):
            raise AuthExchangeError(
                f"Code exchange rejected with status={response.status_code}",
                status_code=response.status_code,
            )
        try:
            return LoginResult.model_validate(_json_or_none(response))
        except PydanticValidationError as e:
            raise AuthExchangeError(f"Malformed login response: {e.error_count()} error(s)") from e

    def me(self) -> Identity:
        """Identify the holder of the stored token.

        Raises:
            AuthExchangeError: Non-2xx status or malformed response
            NetworkError: No response
        """
        response = self.fetch.get(self.config.api_url("/api/auth/me"))
        if not _is_success(response):
            raise AuthExchangeError(
                f"Session verification rejected with status={response.status_code}",
                status_code=response.status_code,
            )
        try:
            return Identity.model_validate(_json_or_none(response))
        except PydanticValidationError as e:
            raise AuthExchangeError(f"Malformed identity response: {e.error_count()} error(s)") from e

    def register(self, registration: AccountRegistration) -> dict[str, Any]:
        """Create an account.

        Returns:
            The response body (may be empty)

        Raises:
            BackendValidationError: 422 with per-field detail
            ApiStatusError: Any other non-2xx status
            NetworkError: No response
        """
        url = self.config.api_url("/api/auth/register")
        response = self.fetch.post(url, json=registration.model_dump(mode="json"))
        self._raise_for_status(response, url)
        body = _json_or_none(response)
        return body if isinstance(body, dict) else {}

    # -- students ---------------------------------------------------------

    def get_student(self, student_id: str) -> Optional[StudentProfile]:
        """Fetch one profile; ``None`` when the backend has none yet (404)."""
        url = self.config.api_url(f"/api/students/{student_id}")
        response = self.fetch.get(url)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, url)
        return self._parse_profile(_json_or_none(response) or {}, response, url)

    def update_student(
        self, profile: StudentProfile, files: Optional[list[UploadedFile]] = None
    ) -> StudentProfile:
        """Store a profile and return the backend's copy.

        File handles are accepted so callers can hand over the whole draft,
        but the profile endpoint only takes JSON and they are not sent.
        """
        url = self.config.api_url(f"/api/students/{profile.student_id}")
        if files:
            logger.info(
                "Profile endpoint does not accept uploads; files not sent",
                extra={"extra_data": {"file_count": len(files)}},
            )
        response = self.fetch.put(url, json=profile.model_dump(mode="json"))
        self._raise_for_status(response, url)
        body = _json_or_none(response)
        if not isinstance(body, dict):
            return profile
        return self._parse_profile(body, response, url)

    def list_students(self) -> list[StudentProfile]:
        """The tutor's roster. Entries that fail validation are skipped."""
        url = self.config.api_url("/api/students/")
        response = self.fetch.get(url)
        self._raise_for_status(response, url)
        body = _json_or_none(response)
        if not isinstance(body, list):
            raise ApiStatusError(response.status_code, url)

        students = []
        for entry in body:
            try:
                students.append(StudentProfile.model_validate(entry))
            except PydanticValidationError:
                logger.warning("Skipping malformed roster entry")
        return students

    @staticmethod
    def _parse_profile(body: dict[str, Any], response: requests.Response, url: str) -> StudentProfile:
        try:
            return StudentProfile.model_validate(body)
        except PydanticValidationError as e:
            logger.warning(
                "Malformed profile response",
                extra={"extra_data": {"url": url, "errors": e.error_count()}},
            )
            raise ApiStatusError(response.status_code, url) from e

    @staticmethod
    def _raise_for_status(response: requests.Response, url: str) -> None:
        if _is_success(response):
            return
        if response.status_code == 422:
            body = _json_or_none(response)
            raise BackendValidationError(parse_validation_detail(body), detail=body)
        raise ApiStatusError(response.status_code, url)
