"""Top-level view selection.

The view is a tagged union so the UI can only be in one coherent place: a
tutor detail view always refers to a student on the loaded roster.
"""

from dataclasses import dataclass
from typing import Optional, Union

from src.auth.session import Session
from src.profile.models import Role
from src.tutor.navigator import RosterNavigator


@dataclass(frozen=True)
class UnauthenticatedView:
    """Sign-in link and account registration."""


@dataclass(frozen=True)
class StudentView:
    """Profile form, then the completion acknowledgment and chatbot."""


@dataclass(frozen=True)
class TutorListingView:
    """Roster of matched students."""


@dataclass(frozen=True)
class TutorDetailView:
    """One student's profile, study plan and tutor chatbot."""

    student_id: str


View = Union[UnauthenticatedView, StudentView, TutorListingView, TutorDetailView]


def route(session: Session, navigator: Optional[RosterNavigator] = None) -> View:
    """Pick the view for the current session and roster navigation."""
    if not session.is_authenticated:
        return UnauthenticatedView()
    if session.role == Role.STUDENT:
        return StudentView()
    if navigator is not None and navigator.selected is not None:
        return TutorDetailView(student_id=navigator.selected.student_id)
    return TutorListingView()
