"""Tests for account registration."""

import pytest
import requests
from fakes import make_response

from src.auth.registration import (
    GENERIC_REGISTRATION_ERROR,
    AccountRegistrationForm,
    validate_registration,
)

pytestmark = pytest.mark.unit


def filled_form(**overrides) -> AccountRegistrationForm:
    values = {
        "user_id": "20123456",
        "display_name": "Maya Chen",
        "email": "maya@student.fhda.edu",
        "role": "student",
    }
    values.update(overrides)
    return AccountRegistrationForm(**values)


class TestValidateRegistration:
    """Client-side checks."""

    def test_valid(self):
        assert validate_registration("20123456", "Maya", "maya@fhda.edu", "tutor") == {}

    def test_any_length_of_digits_is_accepted(self):
        assert "user_id" not in validate_registration("42", "Maya", "maya@fhda.edu", "student")

    @pytest.mark.parametrize("user_id", ["", "12ab", "12 34", "²³"])
    def test_id_must_be_digits(self, user_id):
        assert "user_id" in validate_registration(user_id, "Maya", "maya@fhda.edu", "student")

    def test_blank_name(self):
        assert "display_name" in validate_registration("1", "   ", "maya@fhda.edu", "student")

    def test_bad_email(self):
        assert "email" in validate_registration("1", "Maya", "not-an-email", "student")

    @pytest.mark.parametrize("role", [None, "", "admin"])
    def test_role_must_be_student_or_tutor(self, role):
        assert "role" in validate_registration("1", "Maya", "maya@fhda.edu", role)


class TestAccountRegistrationForm:
    """Tests for submitting the form."""

    def test_invalid_form_is_not_sent(self, client, http_session):
        form = filled_form(email="nope")
        assert not form.submit(client)
        assert "email" in form.errors
        http_session.request.assert_not_called()

    def test_success(self, client, http_session):
        http_session.request.return_value = make_response(201, {"user_id": "20123456"})
        form = filled_form(display_name="  Maya Chen  ")

        assert form.submit(client)
        assert form.completed
        assert form.errors == {}
        body = http_session.request.call_args.kwargs["json"]
        assert body == {
            "user_id": "20123456",
            "display_name": "Maya Chen",
            "email": "maya@student.fhda.edu",
            "role": "student",
        }

    def test_backend_field_errors(self, client, http_session):
        http_session.request.return_value = make_response(
            422, {"detail": [{"loc": ["body", "email"], "msg": "Email already registered"}]}
        )
        form = filled_form()

        assert not form.submit(client)
        assert form.errors == {"email": "Email already registered"}
        assert not form.completed

    def test_short_id_with_backend_email_error(self, client, http_session):
        http_session.request.return_value = make_response(
            422, {"detail": [{"loc": ["body", "email"], "msg": "invalid"}]}
        )
        form = filled_form(user_id="12")

        assert not form.submit(client)

        assert form.errors == {"email": "invalid"}
        assert (form.user_id, form.display_name, form.email, form.role) == (
            "12",
            "Maya Chen",
            "maya@student.fhda.edu",
            "student",
        )
        assert http_session.request.call_args.kwargs["json"]["user_id"] == "12"

    def test_backend_errors_on_unknown_fields(self, client, http_session):
        http_session.request.return_value = make_response(
            422, {"detail": [{"loc": ["body", "tenant"], "msg": "unknown tenant"}]}
        )
        form = filled_form()
        assert not form.submit(client)
        assert form.errors == {"role": GENERIC_REGISTRATION_ERROR}

    def test_server_error(self, client, http_session):
        http_session.request.return_value = make_response(500)
        form = filled_form()
        assert not form.submit(client)
        assert form.errors == {"role": GENERIC_REGISTRATION_ERROR}

    def test_network_error(self, client, http_session):
        http_session.request.side_effect = requests.ConnectionError("down")
        form = filled_form()
        assert not form.submit(client)
        assert form.errors == {"role": GENERIC_REGISTRATION_ERROR}

    def test_set_field_clears_its_error(self):
        form = filled_form()
        form.errors = {"email": "bad", "role": "bad"}
        form.set_field("email", "maya@fhda.edu")
        assert form.errors == {"role": "bad"}

    def test_set_unknown_field(self):
        with pytest.raises(KeyError):
            filled_form().set_field("password", "x")
