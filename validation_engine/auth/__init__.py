"""Caller authentication for the request pipeline."""

from validation_engine.auth.session import (
    Authenticator,
    CallerSession,
    SessionAuthenticator,
)

__all__ = [
    "Authenticator",
    "CallerSession",
    "SessionAuthenticator",
]
