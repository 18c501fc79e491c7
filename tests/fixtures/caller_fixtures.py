"""
Caller identities used across the suites.
"""

SENDER_ID = "window-1"
USER_ID = "user-1"

__all__ = ["SENDER_ID", "USER_ID"]
