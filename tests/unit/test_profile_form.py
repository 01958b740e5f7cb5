"""Tests for the student profile form."""

from unittest.mock import MagicMock

import pytest
from fakes import make_response

from src.api.errors import ApiStatusError, BackendValidationError, NetworkError, ProfileFinalizedError
from src.profile.form import (
    COMPLETION_MESSAGE,
    STUDENT_ID_ERROR,
    SUBMIT_FAILURE_MESSAGE,
    ProfileForm,
)
from src.profile.models import StudentProfile, UploadedFile

pytestmark = pytest.mark.unit


@pytest.fixture
def submit() -> MagicMock:
    """Submit collaborator echoing back the profile it was given."""
    return MagicMock(side_effect=lambda profile, files: profile)


@pytest.fixture
def form(submit) -> ProfileForm:
    return ProfileForm(submit)


def fill_required(form: ProfileForm) -> None:
    form.set_field("student_id", "20123456")
    form.set_field("primary_disability", "ADHD")
    form.set_field("learning_preferences.style", "Visual Learning")


class TestEditing:
    """Tests for editing the draft."""

    def test_set_scalar_field(self, form):
        form.set_field("display_name", "Maya")
        assert form.draft.display_name == "Maya"

    def test_set_nested_preference(self, form):
        form.set_field("learning_preferences.modality", "Hybrid")
        assert form.draft.learning_preferences.modality == "Hybrid"

    def test_unknown_field(self, form):
        with pytest.raises(KeyError):
            form.set_field("role", "tutor")

    def test_set_field_clears_error(self, form):
        form.validate()
        assert "student_id" in form.errors
        form.set_field("student_id", "20123456")
        assert "student_id" not in form.errors

    def test_toggle_set_member(self, form):
        form.toggle_set_member("preferred_subjects", "Math", True)
        form.toggle_set_member("preferred_subjects", "Math", True)
        form.toggle_set_member("preferred_subjects", "English", True)
        assert form.draft.preferred_subjects == ["Math", "English"]

        form.toggle_set_member("preferred_subjects", "Math", False)
        form.toggle_set_member("preferred_subjects", "History", False)
        assert form.draft.preferred_subjects == ["English"]

    def test_toggle_unknown_collection(self, form):
        with pytest.raises(KeyError):
            form.toggle_set_member("availability", "Monday", True)


class TestAvailability:
    """Tests for per-day availability."""

    def test_start_then_end_is_one_entry(self, form):
        form.set_availability("Monday", "start", "09:00")
        form.set_availability("Monday", "end", "11:00")

        assert len(form.draft.availability) == 1
        slot = form.draft.availability[0]
        assert (slot.day, slot.start_time, slot.end_time) == ("Monday", "09:00", "11:00")

    def test_idempotent_per_day(self, form):
        form.set_availability("Tuesday", "start", "10:00")
        form.set_availability("Tuesday", "start", "10:00")
        form.set_availability("Tuesday", "start", "12:00")
        assert len(form.draft.availability) == 1
        assert form.draft.availability[0].start_time == "12:00"

    def test_other_bound_is_kept(self, form):
        form.set_availability("Friday", "end", "17:00")
        form.set_availability("Friday", "start", "15:00")
        assert form.draft.availability_for("Friday").end_time == "17:00"

    def test_days_are_separate(self, form):
        form.set_availability("Monday", "start", "09:00")
        form.set_availability("Wednesday", "start", "09:00")
        assert [slot.day for slot in form.draft.availability] == ["Monday", "Wednesday"]

    def test_unknown_day(self, form):
        with pytest.raises(ValueError):
            form.set_availability("Funday", "start", "09:00")

    def test_unknown_bound(self, form):
        with pytest.raises(ValueError):
            form.set_availability("Monday", "middle", "09:00")


class TestFiles:
    def test_add_and_remove(self, form):
        form.add_files([UploadedFile(name="a.pdf"), UploadedFile(name="b.pdf")])
        form.remove_file(0)
        assert [f.name for f in form.files] == ["b.pdf"]

    def test_remove_out_of_range_is_noop(self, form):
        form.add_files([UploadedFile(name="a.pdf")])
        form.remove_file(5)
        form.remove_file(-1)
        assert len(form.files) == 1


class TestValidateAndSubmit:
    """Tests for validation and submission."""

    def test_blank_form_is_not_submitted(self, form, submit):
        assert not form.validate_and_submit()
        submit.assert_not_called()
        assert set(form.errors) == {"student_id", "primary_disability", "learning_preferences.style"}
        assert form.message.startswith("Please complete the required fields")

    def test_only_bad_id(self, form, submit):
        fill_required(form)
        form.set_field("student_id", "1234567")

        assert not form.validate_and_submit()
        submit.assert_not_called()
        assert form.message == STUDENT_ID_ERROR

    def test_success(self, form, submit):
        fill_required(form)
        form.set_availability("Monday", "start", "09:00")
        form.add_files([UploadedFile(name="letter.pdf", size=3, data=b"pdf")])

        assert form.validate_and_submit()

        profile, files = submit.call_args.args
        assert profile.student_id == "20123456"
        assert profile.availability[0].day == "Monday"
        assert [f.name for f in files] == ["letter.pdf"]
        assert form.finalized
        assert form.message == COMPLETION_MESSAGE

    def test_collaborator_gets_a_copy(self, form, submit):
        fill_required(form)
        form.validate_and_submit()
        profile, _ = submit.call_args.args
        assert profile is not form.draft

    def test_network_failure_keeps_draft(self, form, submit):
        submit.side_effect = NetworkError("down")
        fill_required(form)
        form.set_field("display_name", "Maya")

        assert not form.validate_and_submit()
        assert not form.finalized
        assert form.message == SUBMIT_FAILURE_MESSAGE
        assert form.draft.display_name == "Maya"

    def test_resubmit_after_failure(self, form, submit):
        submit.side_effect = [ApiStatusError(500, "/api/students/20123456"), StudentProfile(student_id="20123456")]
        fill_required(form)

        assert not form.validate_and_submit()
        assert form.validate_and_submit()
        assert submit.call_count == 2

    def test_backend_field_errors(self, form, submit):
        submit.side_effect = BackendValidationError({"style": "Unknown learning style"})
        fill_required(form)

        assert not form.validate_and_submit()
        assert form.errors == {"learning_preferences.style": "Unknown learning style"}

    def test_backend_errors_on_unknown_fields(self, form, submit):
        submit.side_effect = BackendValidationError({"tenant": "bad"})
        fill_required(form)

        assert not form.validate_and_submit()
        assert form.errors == {}
        assert form.message == SUBMIT_FAILURE_MESSAGE

    def test_submitted_profile_is_the_backend_copy(self, form, submit):
        submit.side_effect = lambda profile, files: profile.model_copy(update={"display_name": "Stored"})
        fill_required(form)
        form.validate_and_submit()
        assert form.profile.display_name == "Stored"


class TestFinalized:
    """Once submitted the form cannot change."""

    @pytest.fixture
    def finalized(self, form) -> ProfileForm:
        fill_required(form)
        form.validate_and_submit()
        return form

    def test_set_field_rejected(self, finalized):
        with pytest.raises(ProfileFinalizedError):
            finalized.set_field("display_name", "x")

    def test_availability_rejected(self, finalized):
        with pytest.raises(ProfileFinalizedError):
            finalized.set_availability("Monday", "start", "09:00")

    def test_files_rejected(self, finalized):
        with pytest.raises(ProfileFinalizedError):
            finalized.add_files([UploadedFile(name="x.pdf")])

    def test_resubmit_rejected(self, finalized, submit):
        with pytest.raises(ProfileFinalizedError):
            finalized.validate_and_submit()
        assert submit.call_count == 1


class TestLoadExisting:
    """Tests for prefilling from the stored profile."""

    def test_loads_profile(self, submit, student_payload):
        fetch = MagicMock(return_value=StudentProfile.model_validate(student_payload))
        form = ProfileForm(submit, fetch)

        assert form.load_existing("20123456")
        assert form.draft.display_name == "Maya Chen"
        fetch.assert_called_once_with("20123456")

    def test_not_found_keeps_blank_draft(self, submit):
        form = ProfileForm(submit, MagicMock(return_value=None))
        assert not form.load_existing("20123456")
        assert form.draft == StudentProfile()

    def test_fetch_failure(self, submit):
        form = ProfileForm(submit, MagicMock(side_effect=NetworkError("down")))
        assert not form.load_existing("20123456")
        assert form.message
        assert form.draft == StudentProfile()

    def test_repeated_days_are_merged_on_load(self, submit, client, http_session, student_payload):
        student_payload["availability"] = [
            {"day": "Monday", "start_time": "14:00", "end_time": "16:00"},
            {"day": "Monday", "start_time": "09:00", "end_time": "10:00"},
            *[{"day": "Tuesday", "start_time": "10:00"} for _ in range(6)],
        ]
        http_session.request.return_value = make_response(200, student_payload)
        form = ProfileForm(submit, client.get_student)

        assert form.load_existing("20123456")
        form.set_availability("Monday", "start", "08:00")
        assert form.validate_and_submit()

        profile, _ = submit.call_args.args
        days = [slot.day for slot in profile.availability]
        assert days == ["Monday", "Tuesday"]
        assert profile.availability_for("Monday").start_time == "08:00"

    def test_unknown_day_on_load_keeps_blank_draft(self, submit, client, http_session, student_payload):
        student_payload["availability"] = [{"day": "Funday", "start_time": "10:00"}]
        http_session.request.return_value = make_response(200, student_payload)
        form = ProfileForm(submit, client.get_student)

        assert not form.load_existing("20123456")
        assert form.message
        assert form.draft == StudentProfile()

    def test_without_user_id(self, submit):
        fetch = MagicMock()
        form = ProfileForm(submit, fetch)
        assert not form.load_existing(None)
        fetch.assert_not_called()
