"""
Unit tests for caller session authentication.
"""

import pytest

from validation_engine.auth.session import Authenticator, SessionAuthenticator
from validation_engine.middleware.chain import CallerIdentity

pytestmark = pytest.mark.unit


class FakeClock:

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSessionAuthenticator:

    def test_satisfies_authenticator_protocol(self):
        assert isinstance(SessionAuthenticator(), Authenticator)

    def test_login_authenticates_sender(self):
        authenticator = SessionAuthenticator()

        session = authenticator.login("window-1", "user-1")

        assert session.user_id == "user-1"
        assert authenticator.is_authenticated(CallerIdentity("window-1", "user-1"))
        assert authenticator.is_authenticated(CallerIdentity("window-1"))
        assert authenticator.active_sessions == 1

    def test_unknown_sender_is_rejected(self):
        authenticator = SessionAuthenticator()
        authenticator.login("window-1", "user-1")

        assert not authenticator.is_authenticated(CallerIdentity("window-2", "user-1"))

    def test_mismatched_user_is_rejected(self):
        authenticator = SessionAuthenticator()
        authenticator.login("window-1", "user-1")

        assert not authenticator.is_authenticated(CallerIdentity("window-1", "user-2"))

    def test_logout(self):
        authenticator = SessionAuthenticator()
        authenticator.login("window-1", "user-1")

        assert authenticator.logout("window-1") is True
        assert authenticator.logout("window-1") is False
        assert not authenticator.is_authenticated(CallerIdentity("window-1"))

    def test_idle_session_expires(self):
        clock = FakeClock()
        authenticator = SessionAuthenticator(max_idle_seconds=60, clock=clock)
        authenticator.login("window-1", "user-1")

        clock.now = 61.0

        assert authenticator.get_session("window-1") is None
        assert authenticator.active_sessions == 0

    def test_activity_extends_session(self):
        clock = FakeClock()
        authenticator = SessionAuthenticator(max_idle_seconds=60, clock=clock)
        authenticator.login("window-1", "user-1")

        clock.now = 50.0
        assert authenticator.is_authenticated(CallerIdentity("window-1"))
        clock.now = 100.0

        assert authenticator.is_authenticated(CallerIdentity("window-1"))
