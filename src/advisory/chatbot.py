"""Scripted keyword chatbots for students and tutors.

A chatbot is an ordered tuple of ``ChatRule``s. Replies are picked by
lowercase substring matching, first matching rule wins, so the order of the
rule tables is part of their behaviour.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from src.logutils import get_logger
from src.profile.models import StudentProfile

from .study_plan import disability_tips

logger = get_logger(__name__)

Matcher = Callable[[str, Any], bool]
Responder = Callable[[Any], str]


@dataclass(frozen=True)
class ChatRule:
    """``matches(lowered_utterance, context)`` selects ``respond(context)``."""

    name: str
    matches: Matcher
    respond: Responder


def keywords(*words: str) -> Matcher:
    """Matcher for any of ``words`` appearing in the utterance."""
    return lambda text, _context: any(word in text for word in words)


def _reply(text: str) -> Responder:
    return lambda _context: text


# -- student rules ---------------------------------------------------------

STUDENT_GREETING = (
    "Hi! I'm here to help answer any questions about your tutoring experience. "
    "What would you like to know?"
)
STUDENT_DEFAULT_REPLY = (
    "That's a great question! While I work on getting you a more detailed answer, feel free "
    "to contact our support team at support@fhda.edu for immediate assistance."
)

STUDENT_RULES: tuple[ChatRule, ...] = (
    ChatRule(
        "matching",
        keywords("tutor", "match"),
        _reply(
            "Great question! Based on your registration, we'll match you with a tutor who has "
            "experience with your specific disability and learning preferences. This usually "
            "takes 1-2 business days."
        ),
    ),
    ChatRule(
        "schedule",
        keywords("schedule", "time"),
        _reply(
            "Your tutor will work with your availability preferences that you provided. You can "
            "always update your schedule by contacting us or through your tutor directly."
        ),
    ),
    ChatRule(
        "accommodations",
        keywords("accommodation"),
        _reply(
            "All our tutors are trained in disability accommodations. Your specific needs have "
            "been noted and will be shared with your matched tutor to ensure the best learning "
            "experience."
        ),
    ),
    ChatRule(
        "support",
        keywords("help", "support"),
        _reply(
            "I'm here to help! You can also reach out to our support team at support@fhda.edu "
            "or visit the Disability Support Services office on campus."
        ),
    ),
)


# -- tutor rules -----------------------------------------------------------

TUTOR_DEFAULT_REPLY = (
    "That's a great question! Based on the student's profile, I'd recommend focusing on their "
    "preferred learning style and ensuring all accommodations are met. Is there a specific "
    "aspect of their learning needs you'd like me to elaborate on?"
)


def tutor_greeting(student: StudentProfile) -> str:
    return (
        f"Hi! I'm here to help you understand {student.display_name}'s learning needs and answer "
        "any questions about their accommodations or preferences. What would you like to know?"
    )


def _mentions_disability(text: str, student: StudentProfile) -> bool:
    if "disability" in text:
        return True
    # An unset disability must not turn into an always-matching empty keyword
    name = student.primary_disability.lower()
    return bool(name) and name in text


def _accommodations(student: StudentProfile) -> str:
    return (
        f"{student.display_name} needs these accommodations: "
        f"{', '.join(student.accommodations_needed)}. Make sure to implement these consistently "
        "in your tutoring sessions."
    )


def _learning_style(student: StudentProfile) -> str:
    prefs = student.learning_preferences
    return (
        f"This student learns best through {prefs.style.lower()} methods in a "
        f"{prefs.format.lower()} setting. They prefer {prefs.modality.lower()} sessions."
    )


def _disability(student: StudentProfile) -> str:
    return f"For {student.primary_disability}, here are some key tips: {disability_tips(student.primary_disability)}"


def _subjects(student: StudentProfile) -> str:
    return (
        f"The student is interested in: {', '.join(student.preferred_subjects)}. Focus on these "
        "areas and connect new concepts to their interests when possible."
    )


def _availability(student: StudentProfile) -> str:
    slots = student.complete_slots
    if not slots:
        return (
            "The student hasn't specified their availability yet. You may want to discuss "
            "scheduling directly with them."
        )
    listed = ", ".join(f"{slot.day} {slot.start_time}-{slot.end_time}" for slot in slots)
    return f"The student is available on: {listed}."


TUTOR_RULES: tuple[ChatRule, ...] = (
    ChatRule("accommodations", keywords("accommodation", "need"), _accommodations),
    ChatRule("learning_style", keywords("learning style", "prefer"), _learning_style),
    ChatRule("disability", _mentions_disability, _disability),
    ChatRule("subjects", keywords("subject", "topic"), _subjects),
    ChatRule("availability", keywords("time", "schedule"), _availability),
    ChatRule(
        "support",
        keywords("help", "support"),
        _reply(
            "I can help you understand the student's needs, suggest teaching strategies, or "
            "clarify their accommodations. What specific aspect would you like to know more about?"
        ),
    ),
)


def chatbot_reply(
    utterance: str,
    context: Any = None,
    rules: Sequence[ChatRule] = STUDENT_RULES,
    default: str = STUDENT_DEFAULT_REPLY,
) -> str:
    """Reply of the first rule matching ``utterance``, or ``default``."""
    text = utterance.lower()
    for rule in rules:
        if rule.matches(text, context):
            logger.debug("Chat rule matched", extra={"extra_data": {"rule": rule.name}})
            return rule.respond(context)
    return default


# -- transcript ------------------------------------------------------------


@dataclass
class ChatMessage:
    id: int
    text: str
    sender: str  # "user" or "bot"
    timestamp: datetime = field(default_factory=datetime.now)


class ChatSession:
    """Transcript of one chatbot conversation.

    ``send`` records the user's message straight away and appends the bot's
    reply after ``reply_delay`` seconds. Overlapping sends are not ordered:
    each reply lands whenever its own delay finishes.
    """

    def __init__(
        self,
        greeting: str,
        rules: Sequence[ChatRule],
        default_reply: str,
        context: Any = None,
        reply_delay: float = 1.0,
    ) -> None:
        self.rules = tuple(rules)
        self.default_reply = default_reply
        self.context = context
        self.reply_delay = reply_delay
        self._ids = itertools.count(1)
        self.messages: list[ChatMessage] = []
        self._append(greeting, "bot")

    @classmethod
    def for_student(cls, reply_delay: float = 1.0) -> "ChatSession":
        return cls(STUDENT_GREETING, STUDENT_RULES, STUDENT_DEFAULT_REPLY, reply_delay=reply_delay)

    @classmethod
    def for_tutor(cls, student: StudentProfile, reply_delay: float = 1.0) -> "ChatSession":
        return cls(
            tutor_greeting(student),
            TUTOR_RULES,
            TUTOR_DEFAULT_REPLY,
            context=student,
            reply_delay=reply_delay,
        )

    def _append(self, text: str, sender: str) -> ChatMessage:
        message = ChatMessage(id=next(self._ids), text=text, sender=sender)
        self.messages.append(message)
        return message

    def reply_to(self, text: str) -> str:
        return chatbot_reply(text, self.context, self.rules, self.default_reply)

    async def send(self, text: str) -> Optional[ChatMessage]:
        """Record ``text`` and, after the delay, the bot's reply.

        Returns:
            The bot message, or None when ``text`` is blank
        """
        if not text.strip():
            return None

        self._append(text, "user")
        reply = self.reply_to(text)
        await asyncio.sleep(self.reply_delay)
        return self._append(reply, "bot")

    def send_sync(self, text: str) -> Optional[ChatMessage]:
        """Blocking ``send`` for callers without an event loop (Streamlit, CLI)."""
        return asyncio.run(self.send(text))
