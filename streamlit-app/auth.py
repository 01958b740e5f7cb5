"""Sign-in and account registration pages for Owl & Lion Access.

Sign-in is delegated to the campus identity provider: the page only offers
a link there. The provider redirects back with ``?code=...`` which
``session_manager.start_auth`` hands to the sign-in controller.
"""

import streamlit as st
from session_manager import Services

from src.auth.flow import AuthState
from src.auth.registration import AccountRegistrationForm
from src.profile.models import Role

SUPPORT_EMAIL = "support@fhda.edu"

ROLE_LABELS = {Role.STUDENT.value: "Student", Role.TUTOR.value: "Tutor"}


def render_header(subtitle: str = "Foothill & De Anza Colleges") -> None:
    st.markdown("## 🦉 Owl & Lion Access")
    st.caption(subtitle)


def render_login_page(services: Services) -> None:
    """Render the sign-in link and the "create account" form.

    Args:
        services: This browser session's client stack
    """
    render_header()
    st.markdown("*Disability-Focused Student-Tutor Platform*")

    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        st.subheader("Welcome Back")
        st.write("Sign in with your campus account to continue.")
        st.link_button(
            "Sign in", services.controller.authorize_url(), type="primary", use_container_width=True
        )

        st.divider()
        with st.expander("New here? Create an account", expanded=services.registration.completed):
            render_registration_form(services)

        st.caption(f"Need help? Contact {SUPPORT_EMAIL}")


def _field_error(form: AccountRegistrationForm, name: str) -> None:
    if name in form.errors:
        st.error(form.errors[name])


def render_registration_form(services: Services) -> None:
    """Render the account registration form and submit it on request."""
    form = services.registration

    if form.completed:
        st.success("Your account has been created. Sign in to continue.")
        return

    with st.form("registration_form"):
        user_id = st.text_input("FHDA ID", value=form.user_id, placeholder="e.g. 20123456")
        _field_error(form, "user_id")
        display_name = st.text_input("Name", value=form.display_name)
        _field_error(form, "display_name")
        email = st.text_input("Email", value=form.email, placeholder="your.email@student.fhda.edu")
        _field_error(form, "email")
        options = list(ROLE_LABELS)
        role = st.radio(
            "I am a:",
            options=options,
            format_func=ROLE_LABELS.get,
            index=options.index(form.role) if form.role in options else None,
            horizontal=True,
        )
        _field_error(form, "role")

        submitted = st.form_submit_button("Create account", use_container_width=True)

    if submitted:
        form.set_field("user_id", user_id.strip())
        form.set_field("display_name", display_name)
        form.set_field("email", email)
        form.set_field("role", role or "")
        with st.spinner("Creating your account..."):
            accepted = form.submit(services.client)
        if accepted:
            services.controller.adopt_registration(form.response)
        st.rerun()


def render_auth_failed(services: Services) -> None:
    """Explain a failed sign-in and offer to start over.

    The controller stays in FAILED until the user asks to go back, so a bad
    code never triggers another redirect on its own.
    """
    render_header()
    st.error(services.controller.error or "Sign-in failed. Please try again.")
    if st.button("Back to sign in", key="auth_reset"):
        services.controller.reset()
        st.rerun()


def render_verifying(services: Services) -> None:
    """Run the pending sign-in step under a spinner, then rerun."""
    render_header()
    with st.spinner("Signing you in..."):
        services.controller.advance()
    if services.controller.state != AuthState.VERIFYING:
        st.rerun()
