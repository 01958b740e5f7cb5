"""Student portal: the profile form, then the completion acknowledgment and chatbot."""

import streamlit as st
from chat_widget import render_chat
from session_manager import Services, get_chat, get_profile_form

from src.advisory.chatbot import ChatSession
from src.profile.form import FIELD_LABELS, ProfileForm, normalize_student_id_input
from src.profile.models import (
    ACCOMMODATIONS,
    DISABILITIES,
    LEARNING_FORMATS,
    LEARNING_STYLES,
    MODALITIES,
    SUBJECTS,
    WEEKDAYS,
    UploadedFile,
)

NEXT_STEPS = (
    "We'll review your learning preferences",
    "Match you with an appropriate tutor",
    "Send you a welcome email with next steps",
    "Schedule your first tutoring session",
)


def _select(label: str, options: tuple[str, ...], current: str, key: str) -> str:
    index = options.index(current) if current in options else None
    return st.selectbox(label, options=options, index=index, key=key, placeholder="Choose...") or ""


def _checkbox_grid(options: tuple[str, ...], selected: list[str], key: str, columns: int = 2) -> list[str]:
    chosen = []
    cols = st.columns(columns)
    for i, option in enumerate(options):
        with cols[i % columns]:
            if st.checkbox(option, value=option in selected, key=f"{key}_{i}"):
                chosen.append(option)
    return chosen


def _apply_set(form: ProfileForm, collection: str, options: tuple[str, ...], chosen: list[str]) -> None:
    for option in options:
        form.toggle_set_member(collection, option, option in chosen)


def render_profile_form(form: ProfileForm) -> None:
    """Render the registration form and push submitted values into ``form``."""
    draft = form.draft
    prefs = draft.learning_preferences

    with st.form("student_profile_form"):
        st.markdown("#### About you")
        col1, col2 = st.columns(2)
        with col1:
            student_id = st.text_input(
                "FHDA ID", value=draft.student_id, max_chars=8, placeholder="8-digit ID"
            )
        with col2:
            display_name = st.text_input("Display name", value=draft.display_name)
        email = st.text_input("Email address", value=draft.email)

        st.markdown("#### Disability & accommodations")
        disability = _select("Primary disability", DISABILITIES, draft.primary_disability, "pf_disability")
        accommodations = _checkbox_grid(ACCOMMODATIONS, draft.accommodations_needed, "pf_acc")

        st.markdown("#### Learning preferences")
        col1, col2, col3 = st.columns(3)
        with col1:
            style = _select("Learning style", LEARNING_STYLES, prefs.style, "pf_style")
        with col2:
            learning_format = _select("Learning format", LEARNING_FORMATS, prefs.format, "pf_format")
        with col3:
            modality = _select("Modality", MODALITIES, prefs.modality, "pf_modality")

        st.markdown("#### Preferred subjects")
        subjects = _checkbox_grid(SUBJECTS, draft.preferred_subjects, "pf_subj", columns=3)

        st.markdown("#### Availability")
        times = {}
        for day in WEEKDAYS:
            slot = draft.availability_for(day)
            col1, col2, col3 = st.columns([2, 2, 2])
            with col1:
                st.write(day)
            with col2:
                start = st.text_input(
                    f"{day} start", value=slot.start_time if slot else "", placeholder="HH:MM",
                    key=f"pf_{day}_start", label_visibility="collapsed",
                )
            with col3:
                end = st.text_input(
                    f"{day} end", value=slot.end_time if slot else "", placeholder="HH:MM",
                    key=f"pf_{day}_end", label_visibility="collapsed",
                )
            times[day] = (start.strip(), end.strip())

        st.markdown("#### Documentation (optional)")
        uploads = st.file_uploader(
            "Accommodation letters or other documents", accept_multiple_files=True, key="pf_files"
        )

        additional_info = st.text_area("Additional information", value=draft.additional_info)

        submitted = st.form_submit_button("Submit registration", type="primary", use_container_width=True)

    if not submitted:
        return

    form.set_field("student_id", normalize_student_id_input(student_id))
    form.set_field("display_name", display_name.strip())
    form.set_field("email", email.strip())
    form.set_field("primary_disability", disability)
    form.set_field("learning_preferences.style", style)
    form.set_field("learning_preferences.format", learning_format)
    form.set_field("learning_preferences.modality", modality)
    form.set_field("additional_info", additional_info)
    _apply_set(form, "accommodations_needed", ACCOMMODATIONS, accommodations)
    _apply_set(form, "preferred_subjects", SUBJECTS, subjects)
    for day, (start, end) in times.items():
        if start or end or draft.availability_for(day) is not None:
            form.set_availability(day, "start", start)
            form.set_availability(day, "end", end)

    form.files = []
    form.add_files(
        UploadedFile(name=f.name, size=f.size, content_type=f.type or "", data=f.getvalue())
        for f in uploads or []
    )

    with st.spinner("Submitting your registration..."):
        form.validate_and_submit()
    st.rerun()


def render_completion(services: Services) -> None:
    st.success("**Registration Complete!**")
    st.write(services.profile_form.message)

    with st.expander("What's next?", expanded=True):
        for step in NEXT_STEPS:
            st.markdown(f"- {step}")

    st.markdown("### Wondering what's next? Let's figure it out together.")
    chat = get_chat(
        services, "student", lambda: ChatSession.for_student(reply_delay=services.config.chat_reply_delay)
    )
    render_chat(chat, key="student", placeholder="Ask about your tutoring experience...")


def render_student_view(services: Services) -> None:
    """Render the student portal for the signed-in student."""
    st.markdown("## Student Registration")
    form = get_profile_form(services)

    if form.finalized:
        render_completion(services)
        return

    st.caption("Help us understand your learning needs and preferences")
    if form.message:
        st.error(form.message)
    for name, msg in form.errors.items():
        st.warning(f"{FIELD_LABELS.get(name, name)}: {msg}")
    render_profile_form(form)
