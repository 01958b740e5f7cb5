"""Pytest configuration and fixtures for Owl & Lion Access tests."""

import os
from unittest.mock import MagicMock

# Plain console logging for every logger created while collecting tests
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest  # noqa: E402
import requests  # noqa: E402
from fakes import API_BASE, make_response  # noqa: E402

from src.api.client import ApiClient, AuthenticatedFetch  # noqa: E402
from src.api.config import ClientConfig  # noqa: E402
from src.api.token_store import TokenStore  # noqa: E402
from src.auth.flow import AuthFlowController  # noqa: E402
from src.auth.session import Session  # noqa: E402


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (several components, fake backend)")


@pytest.fixture
def config() -> ClientConfig:
    """Client configuration pointing at a fake backend."""
    return ClientConfig(
        authorize_url="https://idp.test/authorize",
        client_id="owl-lion-client",
        api_base=API_BASE,
        redirect_uri="http://localhost:8501",
        chat_reply_delay=0,
    )


@pytest.fixture
def token_store() -> TokenStore:
    return TokenStore()


@pytest.fixture
def http_session() -> MagicMock:
    """Mocked ``requests.Session``; set ``request.return_value`` per test."""
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(200, {})
    return session


@pytest.fixture
def fetch(token_store: TokenStore, http_session: MagicMock) -> AuthenticatedFetch:
    return AuthenticatedFetch(token_store, session=http_session)


@pytest.fixture
def client(config: ClientConfig, fetch: AuthenticatedFetch) -> ApiClient:
    return ApiClient(config, fetch)


@pytest.fixture
def session(token_store: TokenStore) -> Session:
    return Session(token_store=token_store)


@pytest.fixture
def controller(client: ApiClient, session: Session, config: ClientConfig) -> AuthFlowController:
    return AuthFlowController(client, session, config)


@pytest.fixture
def student_payload() -> dict:
    """A student profile as the backend returns it."""
    return {
        "student_id": "20123456",
        "display_name": "Maya Chen",
        "email": "maya.chen@student.fhda.edu",
        "primary_disability": "Dyslexia",
        "accommodations_needed": ["Extended time for assignments", "Note-taking assistance"],
        "learning_preferences": {"style": "Visual Learning", "format": "1-on-1", "modality": "Online"},
        "preferred_subjects": ["Math", "English", "Science", "History"],
        "availability": [
            {"day": "Monday", "start_time": "14:00", "end_time": "16:00"},
            {"day": "Wednesday", "start_time": "10:00", "end_time": ""},
        ],
        "additional_info": "Prefers written summaries after each session.",
    }
