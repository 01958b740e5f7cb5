"""Per-browser-session wiring for Owl & Lion Access.

Every Streamlit browser session gets its own token store, HTTP session,
API client and sign-in controller, kept in ``st.session_state`` so they
survive reruns. Nothing here is shared between browser sessions.
"""

from dataclasses import dataclass, field
from typing import Optional

import streamlit as st

from src.advisory.chatbot import ChatSession
from src.api.client import ApiClient, AuthenticatedFetch
from src.api.config import ClientConfig
from src.api.token_store import create_token_store
from src.auth.flow import AuthFlowController, AuthState
from src.auth.registration import AccountRegistrationForm
from src.auth.session import Session
from src.logutils import get_logger
from src.profile.form import ProfileForm
from src.tutor.navigator import RosterNavigator

logger = get_logger(__name__)

SERVICES_KEY = "services"


@dataclass
class Services:
    """Everything one browser session needs between reruns."""

    config: ClientConfig
    client: ApiClient
    session: Session
    controller: AuthFlowController
    registration: AccountRegistrationForm = field(default_factory=AccountRegistrationForm)
    profile_form: Optional[ProfileForm] = None
    navigator: Optional[RosterNavigator] = None
    chats: dict[str, ChatSession] = field(default_factory=dict)
    started: bool = False


def build_services(config: ClientConfig) -> Services:
    """Create the client stack for one browser session.

    The browser app always keeps the token in memory; file storage is only
    meant for the command line.
    """
    token_store = create_token_store("memory")
    fetch = AuthenticatedFetch(token_store, timeout=config.timeout)
    client = ApiClient(config, fetch)
    session = Session(token_store=token_store)
    controller = AuthFlowController(client, session, config)
    return Services(config=config, client=client, session=session, controller=controller)


def get_services() -> Services:
    """Return this browser session's services, creating them on first use.

    Raises:
        ValueError: Required configuration is missing from the environment
    """
    if SERVICES_KEY not in st.session_state:
        st.session_state[SERVICES_KEY] = build_services(ClientConfig.from_env())
    return st.session_state[SERVICES_KEY]


def consume_callback_code() -> Optional[str]:
    """Take the ``code`` query parameter the identity provider redirected with.

    The query string is cleared straight away so a rerun or a page refresh
    never hands the same code over twice.
    """
    code = st.query_params.get("code")
    if code:
        st.query_params.clear()
    return code or None


def start_auth(services: Services) -> AuthState:
    """Choose the initial sign-in state once, then react to new callback codes."""
    code = consume_callback_code()
    if not services.started:
        services.started = True
        return services.controller.start(code)
    if code:
        services.controller.receive_code(code)
    return services.controller.state


def get_profile_form(services: Services) -> ProfileForm:
    """The student's profile form, loaded from the backend the first time."""
    if services.profile_form is None:
        form = ProfileForm(services.client.update_student, services.client.get_student)
        form.load_existing(services.session.user_id)
        services.profile_form = form
    return services.profile_form


def get_navigator(services: Services) -> RosterNavigator:
    if services.navigator is None:
        services.navigator = RosterNavigator(services.client.list_students)
    return services.navigator


def get_chat(services: Services, key: str, factory) -> ChatSession:
    """Chat transcript stored under ``key``, created with ``factory`` when new."""
    if key not in services.chats:
        services.chats[key] = factory()
    return services.chats[key]


def handle_logout(services: Services) -> None:
    """Sign out and drop all per-user state, keeping the client stack."""
    services.controller.logout()
    services.registration = AccountRegistrationForm()
    services.profile_form = None
    services.navigator = None
    services.chats = {}
    logger.info("Browser session signed out")
