"""Tutor roster and student detail navigation."""

from typing import Callable, Optional

from src.api.errors import AccessError
from src.logutils import get_logger, with_context
from src.profile.models import StudentProfile

logger = get_logger(__name__)

FetchRoster = Callable[[], list[StudentProfile]]

EMPTY_ROSTER_MESSAGE = "Students will appear here once they register and are matched with you."


class RosterNavigator:
    """Listing of matched students, or the detail of one of them.

    The roster is fetched once on ``enter``; going back from a detail view
    only clears the selection.
    """

    def __init__(self, fetch_roster: FetchRoster) -> None:
        self._fetch_roster = fetch_roster
        self.students: list[StudentProfile] = []
        self.loaded = False
        self.error: Optional[str] = None
        self.selected_id: Optional[str] = None

    def enter(self) -> None:
        """Load the roster the first time the tutor view is shown."""
        if not self.loaded:
            self._load()

    def refresh(self) -> None:
        """Refetch the roster on the tutor's request."""
        self._load()
        if self.selected_id is not None and self.selected is None:
            self.selected_id = None

    def _load(self) -> None:
        with with_context(operation="roster_fetch", component="tutor"):
            try:
                students = self._fetch_roster()
            except AccessError as e:
                logger.warning("Roster fetch failed: %s", e)
                self.error = e.user_message
                return

        self.students = students
        self.loaded = True
        self.error = None
        logger.info("Roster loaded", extra={"extra_data": {"count": len(students)}})

    @property
    def is_empty(self) -> bool:
        """Loaded successfully and nobody is matched yet."""
        return self.loaded and not self.students

    @property
    def selected(self) -> Optional[StudentProfile]:
        if self.selected_id is None:
            return None
        for student in self.students:
            if student.student_id == self.selected_id:
                return student
        return None

    def select(self, student_id: str) -> StudentProfile:
        """Open the detail view for a roster entry.

        Raises:
            KeyError: ``student_id`` is not on the loaded roster
        """
        for student in self.students:
            if student.student_id == student_id:
                self.selected_id = student_id
                return student
        raise KeyError(f"Student {student_id} is not on the roster")

    def back(self) -> None:
        self.selected_id = None
