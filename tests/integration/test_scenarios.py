"""End-to-end flows through the client stack against a mocked backend.

Each test wires the real token store, fetch wrapper, API client, auth
controller and UI-independent state holders together; only
``requests.Session.request`` is faked.
"""

import pytest
from fakes import API_BASE, make_response

from src.advisory.chatbot import ChatSession
from src.advisory.study_plan import study_plan
from src.auth.flow import AuthState
from src.profile.form import COMPLETION_MESSAGE, ProfileForm
from src.profile.models import Role
from src.router import StudentView, TutorDetailView, TutorListingView, UnauthenticatedView, route
from src.tutor.navigator import RosterNavigator

pytestmark = pytest.mark.integration


def login_body(user_id: str, role: str, token: str = "tok-1") -> dict:
    return {"access_token": token, "user_id": user_id, "role": role}


def sent(http_session, index: int) -> tuple[str, str, str]:
    """(method, url, Authorization header) of the index-th request."""
    call = http_session.request.call_args_list[index]
    method, url = call.args
    return method, url, call.kwargs["headers"]["Authorization"]


class TestStudentJourney:
    """Callback code, profile form, completion and chatbot."""

    def test_sign_in_and_submit_profile(self, controller, client, session, http_session, student_payload):
        http_session.request.side_effect = [
            make_response(200, login_body("20123456", "student")),
            make_response(404),
            make_response(200, student_payload),
        ]

        assert controller.start("code-1") == AuthState.CODE_RECEIVED
        assert controller.advance() == AuthState.AUTHENTICATED
        assert route(session) == StudentView()

        form = ProfileForm(client.update_student, client.get_student)
        assert not form.load_existing(session.user_id)

        form.set_field("student_id", "20123456")
        form.set_field("primary_disability", "Dyslexia")
        form.set_field("learning_preferences.style", "Visual Learning")
        form.set_availability("Monday", "start", "14:00")
        form.set_availability("Monday", "end", "16:00")

        assert form.validate_and_submit()
        assert form.message == COMPLETION_MESSAGE
        assert form.profile.display_name == "Maya Chen"

        assert sent(http_session, 0)[:2] == ("POST", f"{API_BASE}/api/auth/login")
        assert sent(http_session, 1) == ("GET", f"{API_BASE}/api/students/20123456", "Bearer tok-1")
        assert sent(http_session, 2) == ("PUT", f"{API_BASE}/api/students/20123456", "Bearer tok-1")
        body = http_session.request.call_args_list[2].kwargs["json"]
        assert body["availability"] == [{"day": "Monday", "start_time": "14:00", "end_time": "16:00"}]

        chat = ChatSession.for_student(reply_delay=0)
        assert "1-2 business days" in chat.send_sync("When do I get a tutor?").text

    def test_returning_student_sees_stored_profile(self, controller, client, session, http_session, student_payload):
        http_session.request.side_effect = [
            make_response(200, login_body("20123456", "student")),
            make_response(200, student_payload),
        ]
        controller.start("code-1")
        controller.advance()

        form = ProfileForm(client.update_student, client.get_student)

        assert form.load_existing(session.user_id)
        assert form.draft.primary_disability == "Dyslexia"


class TestTutorJourney:
    """Roster, detail, chatbot and back."""

    def test_roster_detail_and_back(self, controller, client, session, http_session, student_payload):
        http_session.request.side_effect = [
            make_response(200, login_body("T-100", "tutor")),
            make_response(200, [student_payload]),
        ]
        controller.start("code-2")
        controller.advance()
        assert session.role == Role.TUTOR

        navigator = RosterNavigator(client.list_students)
        navigator.enter()
        assert route(session, navigator) == TutorListingView()
        assert sent(http_session, 1) == ("GET", f"{API_BASE}/api/students/", "Bearer tok-1")

        student = navigator.select("20123456")
        assert route(session, navigator) == TutorDetailView(student_id="20123456")
        assert "Use multi-sensory learning approaches" in study_plan(student.primary_disability).strategies

        chat = ChatSession.for_tutor(student, reply_delay=0)
        assert chat.send_sync("What accommodations?").text.startswith("Maya Chen needs")

        navigator.back()
        navigator.enter()
        assert route(session, navigator) == TutorListingView()
        assert http_session.request.call_count == 2

    def test_empty_roster(self, controller, client, session, http_session):
        http_session.request.side_effect = [
            make_response(200, login_body("T-100", "tutor")),
            make_response(200, []),
        ]
        controller.start("code-2")
        controller.advance()

        navigator = RosterNavigator(client.list_students)
        navigator.enter()

        assert navigator.is_empty
        assert route(session, navigator) == TutorListingView()


class TestSessionLifecycle:
    """Stored tokens, failures and logout."""

    def test_stored_token_is_verified(self, controller, session, token_store, http_session):
        token_store.set("stored")
        http_session.request.return_value = make_response(200, {"user_id": "20123456", "role": "student"})

        assert controller.start() == AuthState.VERIFYING
        assert controller.advance() == AuthState.AUTHENTICATED
        assert sent(http_session, 0) == ("GET", f"{API_BASE}/api/auth/me", "Bearer stored")
        assert route(session) == StudentView()

    def test_expired_token_signs_out(self, controller, session, token_store, http_session):
        token_store.set("expired")
        http_session.request.return_value = make_response(401)

        controller.start()
        assert controller.advance() == AuthState.UNAUTHENTICATED
        assert token_store.get() is None
        assert route(session) == UnauthenticatedView()

    def test_failed_exchange_then_new_code(self, controller, session, http_session):
        http_session.request.side_effect = [
            make_response(400),
            make_response(200, login_body("20123456", "student", token="tok-2")),
        ]
        controller.start("stale")
        assert controller.advance() == AuthState.FAILED
        assert controller.error

        controller.reset()
        assert controller.receive_code("fresh")
        assert controller.advance() == AuthState.AUTHENTICATED
        assert session.bearer_token == "tok-2"

    def test_logout_clears_token_and_code_is_not_reused(self, controller, session, token_store, http_session):
        http_session.request.return_value = make_response(200, login_body("20123456", "student"))
        controller.start("code-3")
        controller.advance()

        controller.logout()

        assert token_store.get() is None
        assert route(session) == UnauthenticatedView()
        # A rerun with the old callback URL must not exchange the code again
        assert controller.start("code-3") == AuthState.UNAUTHENTICATED
        assert http_session.request.call_count == 1
