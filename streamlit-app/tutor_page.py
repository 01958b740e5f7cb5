"""Tutor dashboard: roster of matched students and one student's detail."""

import streamlit as st
from chat_widget import render_chat
from session_manager import Services, get_chat, get_navigator

from src.advisory.chatbot import ChatSession
from src.advisory.study_plan import plan_overview, study_plan, subject_advice
from src.profile.models import StudentProfile
from src.tutor.navigator import EMPTY_ROSTER_MESSAGE, RosterNavigator

MAX_CARD_SUBJECTS = 3


def subject_badges(subjects: list[str], limit: int = MAX_CARD_SUBJECTS) -> list[str]:
    """Subjects shown on a roster card, with a "+N more" badge past ``limit``."""
    badges = list(subjects[:limit])
    if len(subjects) > limit:
        badges.append(f"+{len(subjects) - limit} more")
    return badges


def delivery_line(student: StudentProfile) -> str:
    prefs = student.learning_preferences
    return f"{prefs.modality} • {prefs.format}"


def render_roster(navigator: RosterNavigator) -> None:
    st.markdown("## Your Tutees")
    st.caption("Select a student to view their profile and create study plans")

    if st.button("🔄 Refresh", key="roster_refresh"):
        with st.spinner("Loading students..."):
            navigator.refresh()

    if navigator.error:
        st.error(navigator.error)
        return

    if navigator.is_empty:
        with st.container(border=True):
            st.markdown("#### No Students Yet")
            st.write(EMPTY_ROSTER_MESSAGE)
        return

    cols = st.columns(3)
    for i, student in enumerate(navigator.students):
        with cols[i % 3]:
            with st.container(border=True):
                st.markdown(f"**👤 {student.display_name or student.student_id}**")
                st.write(f"🧠 {student.primary_disability}")
                st.write(f"📖 {student.learning_preferences.style}")
                badges = subject_badges(student.preferred_subjects)
                if badges:
                    st.markdown(" ".join(f"`{badge}`" for badge in badges))
                st.caption(f"🕒 {delivery_line(student)}")
                if st.button("View profile", key=f"select_{student.student_id}", use_container_width=True):
                    navigator.select(student.student_id)
                    st.rerun()


def render_profile_summary(student: StudentProfile) -> None:
    prefs = student.learning_preferences
    with st.container(border=True):
        st.markdown(f"### 👤 Student Profile: {student.display_name}")
        col1, col2, col3 = st.columns(3)
        with col1:
            st.markdown("**Disability & Accommodations**")
            st.write(f"Primary: {student.primary_disability}")
            if student.accommodations_needed:
                st.markdown(" ".join(f"`{acc}`" for acc in student.accommodations_needed))
        with col2:
            st.markdown("**Learning Preferences**")
            st.write(f"Style: {prefs.style}")
            st.write(f"Format: {prefs.format}")
            st.write(f"Modality: {prefs.modality}")
        with col3:
            st.markdown("**Subjects & Availability**")
            if student.preferred_subjects:
                st.markdown(" ".join(f"`{subject}`" for subject in student.preferred_subjects))
            st.write(f"{len(student.availability)} time slots available")

        if student.additional_info:
            st.markdown("**Additional Information**")
            st.write(student.additional_info)


def render_study_plan(student: StudentProfile) -> None:
    plan = study_plan(student.primary_disability)

    st.markdown("#### 🎯 Personalized Learning Plan")
    st.write(plan_overview(student))

    st.markdown("#### 💡 Recommended Strategies")
    for strategy in plan.strategies:
        st.markdown(f"- {strategy}")

    st.markdown("#### 📚 Suggested Activities")
    for activity in plan.activities:
        st.markdown(f"- {activity}")

    if student.preferred_subjects:
        st.markdown("#### 🕒 Subject Focus Areas")
        for subject in student.preferred_subjects:
            st.markdown(f"**{subject}**: {subject_advice(subject, student.primary_disability)}")

    if student.accommodations_needed:
        st.markdown("#### Accommodation Reminders")
        st.markdown(" ".join(f"`{acc}`" for acc in student.accommodations_needed))


def render_detail(services: Services, navigator: RosterNavigator, student: StudentProfile) -> None:
    if st.button("← Back to Students", key="roster_back"):
        navigator.back()
        st.rerun()

    render_profile_summary(student)

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### Study Plan")
        render_study_plan(student)
    with col2:
        st.markdown("### Clarifications & Questions")
        chat = get_chat(
            services,
            f"tutor:{student.student_id}",
            lambda: ChatSession.for_tutor(student, reply_delay=services.config.chat_reply_delay),
        )
        render_chat(chat, key=f"tutor_{student.student_id}", placeholder="Ask about this student...")


def render_tutor_view(services: Services) -> None:
    """Render the roster, or the selected student's detail view."""
    navigator = get_navigator(services)
    if not navigator.loaded and navigator.error is None:
        with st.spinner("Loading students..."):
            navigator.enter()

    student = navigator.selected
    if student is None:
        render_roster(navigator)
    else:
        render_detail(services, navigator, student)
