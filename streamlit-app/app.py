"""Owl & Lion Access - disability-focused student/tutor matching.

Run with ``streamlit run streamlit-app/app.py`` from the repository root.

Flow on every rerun:
1. Load configuration and this browser session's client stack
2. Hand any ``?code=`` from the identity provider to the sign-in controller
3. Finish a pending sign-in step, or show the failure screen
4. Route the signed-in user to the student or tutor pages
"""

import sys
from pathlib import Path

# Repository root, so ``src`` imports resolve under ``streamlit run``
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import streamlit as st  # noqa: E402
from auth import render_auth_failed, render_header, render_login_page, render_verifying  # noqa: E402
from dotenv import load_dotenv  # noqa: E402
from session_manager import Services, get_services, handle_logout, start_auth  # noqa: E402
from student_page import render_student_view  # noqa: E402
from tutor_page import render_tutor_view  # noqa: E402

from src.auth.flow import AuthState  # noqa: E402
from src.logutils import get_logger  # noqa: E402
from src.router import StudentView, TutorDetailView, TutorListingView, route  # noqa: E402

logger = get_logger(__name__)

st.set_page_config(page_title="Owl & Lion Access", page_icon="🦉", layout="wide")


def render_sidebar(services: Services) -> None:
    session = services.session
    with st.sidebar:
        st.markdown(f"**Signed in as:** {session.user_id}")
        st.caption(f"Role: {session.role.value.title()}")
        st.divider()
        if st.button("🚪 Logout", use_container_width=True, key="sidebar_logout"):
            handle_logout(services)
            st.rerun()


def render_signed_in(services: Services) -> None:
    view = route(services.session, services.navigator)
    render_sidebar(services)

    if isinstance(view, StudentView):
        render_header("Student Portal")
        render_student_view(services)
    elif isinstance(view, (TutorListingView, TutorDetailView)):
        render_header("Tutor Dashboard")
        render_tutor_view(services)


def main() -> None:
    """Application entry point."""
    load_dotenv()

    try:
        services = get_services()
    except ValueError as e:
        st.error(f"Configuration error: {e}")
        st.stop()

    state = start_auth(services)

    if state in (AuthState.CODE_RECEIVED, AuthState.VERIFYING):
        render_verifying(services)
        return
    if state == AuthState.FAILED:
        render_auth_failed(services)
        return
    if not services.session.is_authenticated:
        render_login_page(services)
        return

    render_signed_in(services)


if __name__ == "__main__":
    main()
