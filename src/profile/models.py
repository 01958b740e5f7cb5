"""Pydantic models for student profiles and account data."""

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DISABILITIES = (
    "Dyslexia",
    "ADHD",
    "Autism Spectrum Disorder",
    "Visual Impairment",
    "Hearing Impairment",
    "Physical Disability",
    "Learning Disability",
    "Other",
)

ACCOMMODATIONS = (
    "Extended time for assignments",
    "Alternative assessment formats",
    "Flexible scheduling",
    "Note-taking assistance",
    "Audio recordings of lectures",
    "Large print materials",
    "Sign language interpreter",
    "Assistive technology",
)

LEARNING_STYLES = (
    "Visual Learning",
    "Auditory Learning",
    "Hands-on Learning",
    "Reading/Writing",
    "Combination",
)

LEARNING_FORMATS = ("1-on-1", "Small Group", "Study Group")

MODALITIES = ("In-person", "Online", "Hybrid")

SUBJECTS = ("Math", "English", "Science", "History", "Computer Science")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

STUDENT_ID_PATTERN = re.compile(r"[0-9]{8}")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Role(str, Enum):
    """Account role chosen at registration and returned by the backend."""

    STUDENT = "student"
    TUTOR = "tutor"


def is_valid_student_id(value: Optional[str]) -> bool:
    """True only for strings of exactly eight decimal digits."""
    # ASCII digits only; \d and str.isdigit() also accept other scripts
    return isinstance(value, str) and STUDENT_ID_PATTERN.fullmatch(value) is not None


def is_valid_email(value: Optional[str]) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value.strip()) is not None


class _BlankForNull(BaseModel):
    """Treats JSON nulls from the backend as missing keys so defaults apply."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class LearningPreferences(_BlankForNull):
    """How the student prefers to learn. Empty string means "not chosen"."""

    style: str = ""
    format: str = ""
    modality: str = ""


class AvailabilitySlot(_BlankForNull):
    """Availability for one weekday; times are ``HH:MM`` strings or empty."""

    day: str
    start_time: str = ""
    end_time: str = ""

    @field_validator("day")
    @classmethod
    def _known_weekday(cls, value: str) -> str:
        if value not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {value}")
        return value

    @property
    def is_complete(self) -> bool:
        return bool(self.start_time and self.end_time)


class StudentProfile(_BlankForNull):
    """Student profile as exchanged with ``/api/students``.

    Unknown keys from the backend are ignored and missing ones default to
    blank, so a partially filled record still loads into the form.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    student_id: str = ""
    display_name: str = ""
    email: str = ""
    primary_disability: str = ""
    accommodations_needed: list[str] = Field(default_factory=list)
    learning_preferences: LearningPreferences = Field(default_factory=LearningPreferences)
    availability: list[AvailabilitySlot] = Field(default_factory=list)
    preferred_subjects: list[str] = Field(default_factory=list)
    additional_info: str = ""

    @field_validator("availability")
    @classmethod
    def _one_slot_per_day(cls, slots: list[AvailabilitySlot]) -> list[AvailabilitySlot]:
        """Merge repeated days into the first slot for that day.

        A later entry only fills a bound the first one left blank, so the
        list never holds more than one slot per weekday.
        """
        merged: dict[str, AvailabilitySlot] = {}
        for slot in slots:
            first = merged.get(slot.day)
            if first is None:
                merged[slot.day] = slot
                continue
            merged[slot.day] = first.model_copy(
                update={
                    "start_time": first.start_time or slot.start_time,
                    "end_time": first.end_time or slot.end_time,
                }
            )
        return list(merged.values())

    def availability_for(self, day: str) -> Optional[AvailabilitySlot]:
        for slot in self.availability:
            if slot.day == day:
                return slot
        return None

    @property
    def complete_slots(self) -> list[AvailabilitySlot]:
        """Slots with both a start and an end time."""
        return [slot for slot in self.availability if slot.is_complete]


class Identity(BaseModel):
    """``/api/auth/me`` response."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    user_id: str
    role: Role


class LoginResult(Identity):
    """``/api/auth/login`` response."""

    access_token: str


class AccountRegistration(BaseModel):
    """``/api/auth/register`` request body."""

    user_id: str
    display_name: str
    email: str
    role: Role


class UploadedFile(BaseModel):
    """A file picked in the profile form.

    The bytes travel with the draft to the submit collaborator; they are not
    part of the profile JSON.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = 0
    content_type: Optional[str] = None
    data: bytes = b""
