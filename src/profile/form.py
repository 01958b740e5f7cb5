"""Student profile form state.

``ProfileForm`` holds the draft profile, the picked files and the per-field
errors while the student fills in the registration form. Submission goes to
an injected collaborator (normally ``ApiClient.update_student``) so the form
can be driven without a backend.
"""

from typing import Callable, Iterable, Optional

from src.api.errors import AccessError, BackendValidationError, ProfileFinalizedError
from src.logutils import get_logger, with_context

from .models import (
    WEEKDAYS,
    AvailabilitySlot,
    StudentProfile,
    UploadedFile,
    is_valid_student_id,
)

logger = get_logger(__name__)

SubmitProfile = Callable[[StudentProfile, list[UploadedFile]], StudentProfile]
FetchProfile = Callable[[str], Optional[StudentProfile]]

SCALAR_FIELDS = (
    "student_id",
    "display_name",
    "email",
    "primary_disability",
    "additional_info",
    "learning_preferences.style",
    "learning_preferences.format",
    "learning_preferences.modality",
)
SET_FIELDS = ("accommodations_needed", "preferred_subjects")
TIME_BOUNDS = {"start": "start_time", "end": "end_time"}

FIELD_LABELS = {
    "student_id": "FHDA ID",
    "display_name": "Display name",
    "email": "Email address",
    "primary_disability": "Primary disability",
    "additional_info": "Additional information",
    "learning_preferences.style": "Learning style",
    "learning_preferences.format": "Learning format",
    "learning_preferences.modality": "Modality",
    "accommodations_needed": "Accommodations",
    "preferred_subjects": "Preferred subjects",
}

STUDENT_ID_ERROR = "Please enter a valid 8-digit FHDA ID."
SUBMIT_FAILURE_MESSAGE = "We couldn't submit your registration. Your answers are kept, please try again."
COMPLETION_MESSAGE = (
    "Thank you for registering. Your information has been submitted and you'll be "
    "matched with a suitable tutor soon."
)

# Backend 422 ``loc`` ends with the bare attribute name
_BACKEND_FIELD_ALIASES = {
    "style": "learning_preferences.style",
    "format": "learning_preferences.format",
    "modality": "learning_preferences.modality",
}


def normalize_student_id_input(raw: str) -> str:
    """Keep ASCII digits only and cap at eight, as typed into the ID box."""
    return "".join(ch for ch in raw if "0" <= ch <= "9")[:8]


class ProfileForm:
    """Draft, files and errors of the student registration form."""

    def __init__(self, submit: SubmitProfile, fetch_existing: Optional[FetchProfile] = None) -> None:
        self._submit = submit
        self._fetch_existing = fetch_existing
        self.draft = StudentProfile()
        self.files: list[UploadedFile] = []
        self.errors: dict[str, str] = {}
        self.message: Optional[str] = None
        self.finalized = False
        self.submitted_profile: Optional[StudentProfile] = None

    def _ensure_editable(self) -> None:
        if self.finalized:
            raise ProfileFinalizedError()

    # -- editing ----------------------------------------------------------

    def set_field(self, name: str, value: str) -> None:
        """Set one scalar field and clear its error."""
        self._ensure_editable()
        if name not in SCALAR_FIELDS:
            raise KeyError(f"Unknown profile field: {name}")

        if name.startswith("learning_preferences."):
            setattr(self.draft.learning_preferences, name.split(".", 1)[1], value)
        else:
            setattr(self.draft, name, value)
        self.errors.pop(name, None)

    def toggle_set_member(self, collection: str, value: str, included: bool) -> None:
        """Add or remove ``value``; adding a present or removing an absent value is a no-op."""
        self._ensure_editable()
        if collection not in SET_FIELDS:
            raise KeyError(f"Unknown set field: {collection}")

        members: list[str] = getattr(self.draft, collection)
        if included and value not in members:
            members.append(value)
        elif not included and value in members:
            members.remove(value)
        self.errors.pop(collection, None)

    def set_availability(self, day: str, bound: str, value: str) -> None:
        """Set the start or end time for ``day``, keeping the other bound.

        Args:
            day: Weekday name, e.g. "Monday"
            bound: "start" or "end"
            value: Time string such as "14:30", or "" to clear it
        """
        self._ensure_editable()
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        if bound not in TIME_BOUNDS:
            raise ValueError(f"Availability bound must be 'start' or 'end', got {bound!r}")

        slot = self.draft.availability_for(day)
        if slot is None:
            slot = AvailabilitySlot(day=day)
            self.draft.availability.append(slot)
        setattr(slot, TIME_BOUNDS[bound], value)

    def add_files(self, files: Iterable[UploadedFile]) -> None:
        self._ensure_editable()
        self.files.extend(files)

    def remove_file(self, index: int) -> None:
        """Remove the file at ``index``; out-of-range positions are ignored."""
        self._ensure_editable()
        if 0 <= index < len(self.files):
            del self.files[index]

    # -- loading and submitting -------------------------------------------

    def load_existing(self, user_id: Optional[str]) -> bool:
        """Replace the draft with the backend's stored profile, if there is one.

        Returns:
            True if a stored profile was loaded
        """
        if not user_id or self._fetch_existing is None:
            return False

        with with_context(operation="profile_load", component="profile", user_id=user_id):
            try:
                profile = self._fetch_existing(user_id)
            except AccessError as e:
                logger.warning("Could not load stored profile: %s", e)
                self.message = e.user_message
                return False

        if profile is None:
            logger.debug("No stored profile yet")
            return False

        self.draft = profile
        self.errors = {}
        self.message = None
        return True

    def validate(self) -> dict[str, str]:
        """Recompute ``errors`` for the fields required to submit."""
        errors: dict[str, str] = {}
        if not is_valid_student_id(self.draft.student_id):
            errors["student_id"] = STUDENT_ID_ERROR
        if not self.draft.primary_disability:
            errors["primary_disability"] = "Please select your primary disability."
        if not self.draft.learning_preferences.style:
            errors["learning_preferences.style"] = "Please choose a learning style."
        self.errors = errors
        return errors

    def validate_and_submit(self) -> bool:
        """Validate the draft and hand it to the submit collaborator.

        On a validation or submit failure ``errors``/``message`` explain what
        went wrong and the draft is left as it was. On success the form is
        finalized and no longer editable.

        Returns:
            True when the profile was accepted
        """
        self._ensure_editable()
        self.message = None

        if self.validate():
            labels = ", ".join(FIELD_LABELS[name] for name in self.errors)
            self.message = (
                STUDENT_ID_ERROR
                if list(self.errors) == ["student_id"]
                else f"Please complete the required fields: {labels}."
            )
            return False

        with with_context(operation="profile_submit", component="profile"):
            try:
                saved = self._submit(self.draft.model_copy(deep=True), list(self.files))
            except BackendValidationError as e:
                self.errors = self._map_backend_errors(e.field_errors)
                self.message = SUBMIT_FAILURE_MESSAGE if not self.errors else e.user_message
                logger.info("Profile rejected by backend", extra={"extra_data": {"fields": sorted(e.field_errors)}})
                return False
            except AccessError as e:
                logger.warning("Profile submit failed: %s", e)
                self.message = SUBMIT_FAILURE_MESSAGE
                return False

        self.submitted_profile = saved
        self.finalized = True
        self.message = COMPLETION_MESSAGE
        logger.info(
            "Profile submitted",
            extra={"extra_data": {"file_count": len(self.files), "slots": len(saved.availability)}},
        )
        return True

    @staticmethod
    def _map_backend_errors(field_errors: dict[str, str]) -> dict[str, str]:
        mapped = {}
        for name, msg in field_errors.items():
            name = _BACKEND_FIELD_ALIASES.get(name, name)
            if name in FIELD_LABELS:
                mapped[name] = msg
        return mapped

    @property
    def profile(self) -> StudentProfile:
        """The submitted profile once finalized, the draft before that."""
        return self.submitted_profile or self.draft
