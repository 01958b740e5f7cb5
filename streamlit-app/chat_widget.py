"""Chat transcript widget shared by the student and tutor pages."""

import streamlit as st

from src.advisory.chatbot import ChatSession

AVATARS = {"user": "🧑", "bot": "🦉"}


def render_chat(chat: ChatSession, key: str, placeholder: str = "Type your question...") -> None:
    """Show the transcript and an input box.

    The reply is awaited inside the rerun that sent the message, so the
    spinner covers the bot's thinking delay.

    Args:
        chat: Transcript to render and append to
        key: Unique widget key for this transcript
        placeholder: Hint shown in the empty input box
    """
    container = st.container(height=320)
    with container:
        for message in chat.messages:
            role = "user" if message.sender == "user" else "assistant"
            with st.chat_message(role, avatar=AVATARS[message.sender]):
                st.markdown(message.text)

    with st.form(f"chat_form_{key}", clear_on_submit=True):
        col1, col2 = st.columns([5, 1])
        with col1:
            text = st.text_input(
                "Message", placeholder=placeholder, key=f"chat_input_{key}", label_visibility="collapsed"
            )
        with col2:
            sent = st.form_submit_button("Send", use_container_width=True)

    if sent and text.strip():
        with st.spinner("Thinking..."):
            chat.send_sync(text)
        st.rerun()
