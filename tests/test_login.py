import re

import pytest

from auth.login import LoginController, RegistrationController, generate_family_id
from auth.session import SessionManager
from backend.errors import InvalidCredentialsError, LoginLockedError, NetworkError, ValidationError
from conftest import FakeBackend


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def clock():
    return FakeClock()


def test_successful_login_saves_session(backend, clock):
    sessions = SessionManager()
    controller = LoginController(backend, sessions, clock=clock)
    session = controller.login("alice", "Secret1!", "family_abc123")
    assert sessions.require() == session
    assert controller.failed_attempts == 0


def test_five_failures_lock_out_the_sixth_attempt_locally(backend, clock):
    """Five wrong passwords start a 30 second cooldown enforced without the backend."""
    backend.login_error = InvalidCredentialsError()
    controller = LoginController(backend, SessionManager(), max_attempts=5, lockout_seconds=30, clock=clock)

    for _ in range(5):
        with pytest.raises(InvalidCredentialsError):
            controller.login("alice", "wrong", "family_abc123")
    assert backend.login_calls == 5
    assert controller.is_locked

    clock.now += 10
    with pytest.raises(LoginLockedError) as excinfo:
        controller.login("alice", "right", "family_abc123")
    assert backend.login_calls == 5
    assert excinfo.value.retry_after == pytest.approx(20)

    clock.now += 21
    backend.login_error = None
    controller.login("alice", "Secret1!", "family_abc123")
    assert backend.login_calls == 6


def test_network_failures_count_towards_lockout(backend, clock):
    backend.login_error = NetworkError()
    controller = LoginController(backend, SessionManager(), max_attempts=2, lockout_seconds=5, clock=clock)
    for _ in range(2):
        with pytest.raises(NetworkError):
            controller.login("alice", "pw", "family_abc123")
    with pytest.raises(LoginLockedError):
        controller.login("alice", "pw", "family_abc123")


def test_success_resets_failure_count(backend, clock):
    controller = LoginController(backend, SessionManager(), max_attempts=3, clock=clock)
    backend.login_error = InvalidCredentialsError()
    for _ in range(2):
        with pytest.raises(InvalidCredentialsError):
            controller.login("alice", "wrong", "family_abc123")
    backend.login_error = None
    controller.login("alice", "Secret1!", "family_abc123")
    assert controller.failed_attempts == 0


def test_generate_family_id_format():
    assert re.fullmatch(r"family_[0-9a-z]{8}", generate_family_id())


def test_register_new_family(backend):
    result = RegistrationController(backend).register("alice_01", "Str0ng!pass")
    assert result.new_family
    assert result.family_id.startswith("family_")
    assert result.family_id in result.message


def test_register_existing_family(backend):
    result = RegistrationController(backend).register("bob_02", "Str0ng!pass", "family_abc123")
    assert not result.new_family
    assert result.family_id == "family_abc123"


def test_invalid_registration_is_blocked_before_request(backend, monkeypatch):
    calls = []
    monkeypatch.setattr(backend, "register", lambda *args: calls.append(args))
    with pytest.raises(ValidationError):
        RegistrationController(backend).register("x", "weak", "family_abc123")
    assert calls == []
