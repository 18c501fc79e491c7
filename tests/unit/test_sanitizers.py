"""
Unit tests for recursive input sanitization.
"""

from collections import namedtuple

import pytest

from validation_engine.utils.exceptions import SecurityViolationError
from validation_engine.utils.sanitizers import (
    is_blocked_key,
    sanitize_arguments,
    sanitize_string,
    sanitize_value,
)

pytestmark = pytest.mark.unit


class TestSanitizeString:

    @pytest.mark.parametrize("value", [
        "<script>alert(1)</script>hello",
        "<SCRIPT src='x.js'></SCRIPT>",
        "prefix <script>",
        "<script\n type='text/javascript'>\nsteal()\n</script>",
    ])
    def test_script_elements_are_rejected(self, value):
        with pytest.raises(SecurityViolationError) as exc_info:
            sanitize_string(value)

        assert exc_info.value.code == "MALICIOUS_CONTENT"
        assert exc_info.value.message == "Potentially malicious content detected"

    def test_javascript_uri_is_stripped(self):
        assert sanitize_string("javascript:alert(1)") == "alert(1)"
        assert sanitize_string("JavaScript :void(0)") == "void(0)"

    @pytest.mark.parametrize("value", [
        "javajavascript:script:alert(1)",
        "jajavascript:vajavascript:script:alert(1)",
        "JAVAjavascript:SCRIPT:alert(1)",
    ])
    def test_nested_javascript_uri_cannot_reassemble(self, value):
        cleaned = sanitize_string(value)

        assert "javascript" not in cleaned.lower()
        assert cleaned.endswith("alert(1)")

    def test_nested_script_tag_is_still_rejected(self):
        with pytest.raises(SecurityViolationError):
            sanitize_string("<scr<script>x</script>ipt>alert(1)</script>")

    def test_inline_event_handler_is_stripped(self):
        assert sanitize_string('<img src=x onerror="x()">') == '<img src=x "x()">'
        assert sanitize_string("<a href=x onclick=go() onmouseover = go()>") == "<a href=x go()  go()>"
        assert sanitize_string("<svg/onload=go()>") == "<svg/go()>"

    @pytest.mark.parametrize("value", [
        "on click do X",
        "online = yes",
        "ones=3",
        "onload = go()",
        "<b>online=true</b>",
        "condition=true",
        "Account A1 in OU1",
        "",
    ])
    def test_harmless_strings_pass_unchanged(self, value):
        assert sanitize_string(value) == value


class TestSanitizeValue:

    def test_polluting_keys_are_dropped_and_siblings_kept(self):
        value = {
            "__proto__": {"isAdmin": True},
            "constructor": "x",
            "prototype": {},
            "__class__": "y",
            "validationName": "duplicate_records",
            "ou": "OU1",
        }

        assert sanitize_value(value) == {"validationName": "duplicate_records", "ou": "OU1"}

    def test_nested_structures_are_walked(self):
        value = {"options": {"custom": {"extra": {"note": "javascript:go", "__proto__": 1}}}, "tags": ["<i onload=x>", 3]}

        assert sanitize_value(value) == {"options": {"custom": {"extra": {"note": "go"}}}, "tags": ["<i x>", 3]}

    def test_nested_script_rejects_whole_value(self):
        with pytest.raises(SecurityViolationError):
            sanitize_value({"rows": [{"name": "ok"}, {"name": "<script>x</script>"}]})

    def test_scalars_pass_through(self):
        assert sanitize_value(42) == 42
        assert sanitize_value(None) is None
        assert sanitize_value(True) is True

    def test_tuples_keep_their_type(self):
        assert sanitize_value(("javascript:a", "b")) == ("a", "b")

    def test_named_tuples_keep_their_type(self):
        Period = namedtuple("Period", ["year", "label"])

        sanitized = sanitize_value(Period(2024, "javascript:Q1"))

        assert isinstance(sanitized, Period)
        assert sanitized == Period(2024, "Q1")

    def test_nested_uri_in_mapping_is_stripped(self):
        assert sanitize_value({"url": "javajavascript:script:alert(1)"}) == {"url": "alert(1)"}

    def test_is_blocked_key(self):
        assert is_blocked_key("__proto__")
        assert is_blocked_key("constructor")
        assert not is_blocked_key("name")
        assert not is_blocked_key(1)


class TestSanitizeArguments:

    def test_mutates_list_in_place(self):
        args = [{"bio": "on click do X", "__proto__": {}}, "javascript:x"]
        original = args

        sanitize_arguments(args)

        assert args is original
        assert args == [{"bio": "on click do X"}, "x"]

    def test_input_objects_are_not_mutated(self):
        record = {"__proto__": 1, "ou": "OU1"}
        args = [record]

        sanitize_arguments(args)

        assert record == {"__proto__": 1, "ou": "OU1"}
        assert args == [{"ou": "OU1"}]
