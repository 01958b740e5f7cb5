"""Static study-plan tables and scripted chatbots."""

from .chatbot import ChatMessage, ChatRule, ChatSession, chatbot_reply
from .study_plan import StudyPlan, disability_tips, plan_overview, study_plan, subject_advice

__all__ = [
    "ChatMessage",
    "ChatRule",
    "ChatSession",
    "StudyPlan",
    "chatbot_reply",
    "disability_tips",
    "plan_overview",
    "study_plan",
    "subject_advice",
]
