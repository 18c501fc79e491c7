"""
Input Sanitization Utilities

Recursive sanitization of request arguments before they reach the processor
registry. Strings are stripped of inline event handlers, ``javascript:`` URIs and
script bodies; any string that still carries a script element afterwards is
rejected with SecurityViolationError instead of being passed through cleaned.
Mappings are walked key by key and keys that look like prototype-pollution
vectors are dropped entirely.

Threat Patterns:
    script element: ``<script ...>`` opening tags, with or without a body
    javascript URI: ``javascript:`` scheme anywhere in the value
    inline handler: ``onclick=``, ``onload =`` and similar attributes inside
        a tag (``<img onerror=...>``); plain text such as ``online = yes`` is kept
    polluting keys: ``__proto__`` and any other ``__``-prefixed key,
        ``constructor``, ``prototype``
"""

import re
from typing import Any, Dict, List

import structlog

from validation_engine.utils.exceptions import SecurityViolationError

logger = structlog.get_logger("security.sanitization")

SCRIPT_BODY_PATTERN = re.compile(r"(<script\b[^>]*>).*?(</script\s*>)", re.IGNORECASE | re.DOTALL)
SCRIPT_OPEN_PATTERN = re.compile(r"<script\b", re.IGNORECASE)
JAVASCRIPT_URI_PATTERN = re.compile(r"javascript\s*:", re.IGNORECASE)
EVENT_HANDLER_PATTERN = re.compile(r"(<[^>]*?[\s\"'/])on\w+\s*=", re.IGNORECASE)

BLOCKED_KEYS = frozenset({"constructor", "prototype"})


def is_blocked_key(key: Any) -> bool:
    """Return True for keys that must never be forwarded."""
    if not isinstance(key, str):
        return False
    return key.startswith("__") or key in BLOCKED_KEYS


def sanitize_string(value: str) -> str:
    """
    Strip dangerous patterns from a string.

    Script bodies are removed but their opening tags are left in place, so the
    residual check below rejects every value that carried a script element.
    Stripping repeats until the value stops changing, so nested fragments such
    as ``javajavascript:script:`` cannot reassemble a pattern.

    Args:
        value: Raw string value

    Returns:
        Cleaned string

    Raises:
        SecurityViolationError: When a script element is present
    """
    cleaned = value
    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = SCRIPT_BODY_PATTERN.sub(r"\1\2", cleaned)
        cleaned = JAVASCRIPT_URI_PATTERN.sub("", cleaned)
        cleaned = EVENT_HANDLER_PATTERN.sub(r"\1", cleaned)

    if SCRIPT_OPEN_PATTERN.search(cleaned):
        logger.warning(
            "Unrecoverable script content rejected",
            value_length=len(value),
        )
        raise SecurityViolationError()

    return cleaned


def sanitize_value(value: Any) -> Any:
    """
    Recursively sanitize a value.

    Args:
        value: Any request argument (string, mapping, sequence or scalar)

    Returns:
        Sanitized copy of the value; scalars are returned unchanged
    """
    if isinstance(value, str):
        return sanitize_string(value)

    if isinstance(value, dict):
        sanitized: Dict[Any, Any] = {}
        for key, item in value.items():
            if is_blocked_key(key):
                logger.warning("Dropped polluting key from request input", key=key)
                continue
            sanitized[key] = sanitize_value(item)
        return sanitized

    if isinstance(value, (list, tuple)):
        items = [sanitize_value(item) for item in value]
        if isinstance(value, tuple) and hasattr(value, "_fields"):
            return type(value)(*items)
        return type(value)(items)

    return value


def sanitize_arguments(args: List[Any]) -> None:
    """
    Sanitize a request argument list in place.

    Args:
        args: Mutable positional argument list shared by the pipeline

    Raises:
        SecurityViolationError: When any argument carries a script element
    """
    args[:] = [sanitize_value(arg) for arg in args]


__all__ = [
    "is_blocked_key",
    "sanitize_string",
    "sanitize_value",
    "sanitize_arguments",
]
