# ==============================================================================
# Tests for Metadata Sanitizing and Selector Resolution
# ==============================================================================
"""
Unit tests for sanitize()/sanitize_metadata() and resolve_selector().
"""

import pytest

from pagepulse.core.models import InteractionEvent
from pagepulse.core.sanitizer import SENSITIVE_KEYS, sanitize, sanitize_metadata
from pagepulse.core.selectors import UNKNOWN_SELECTOR, resolve_selector


def _keys_at_any_depth(obj) -> set[str]:
    keys = set()
    if isinstance(obj, dict):
        for key, value in obj.items():
            keys.add(str(key).lower())
            keys |= _keys_at_any_depth(value)
    elif isinstance(obj, list):
        for item in obj:
            keys |= _keys_at_any_depth(item)
    return keys


# ==============================================================================
# sanitize
# ==============================================================================


class TestSanitize:
    """Tests for sanitize() and sanitize_metadata()."""

    def test_drops_nested_sensitive_keys(self):
        """Denied keys are removed at every depth, other keys survive."""
        result = sanitize({"a": {"Password": "x", "b": [{"token": 1, "c": 2}]}})
        assert result == {"a": {"b": [{"c": 2}]}}

    def test_matching_is_case_insensitive(self):
        """Upper- and mixed-case variants are denied too."""
        result = sanitize({"SSN": "123", "CreditCard": "4111", "Authorization": "Bearer", "x": 1})
        assert result == {"x": 1}

    def test_value_key_is_denied(self):
        """Form field 'value' is treated as sensitive."""
        assert sanitize({"value": "hunter2", "element": "input"}) == {"element": "input"}

    def test_output_contains_no_denied_key(self):
        """No denied key remains anywhere in a deeply mixed structure."""
        payload = {
            "form": [{"pwd": "a", "fields": {"cc": "b", "auth": {"token": "c"}}}],
            "meta": {"nested": [[{"Value": 1, "keep": 2}]]},
        }
        assert not _keys_at_any_depth(sanitize(payload)) & SENSITIVE_KEYS

    def test_lists_stay_lists(self):
        """Lists are rebuilt as lists with sanitized items."""
        assert sanitize([{"pwd": 1, "a": 2}, 3]) == [{"a": 2}, 3]

    @pytest.mark.parametrize("value", [None, 42, "text", 1.5, True])
    def test_scalars_pass_through(self, value):
        """Non-container input is returned unchanged."""
        assert sanitize(value) == value

    @pytest.mark.parametrize("value", [None, "x", 5, ["a"]])
    def test_metadata_non_dict_becomes_empty(self, value):
        """Anything other than a dict degrades to {}."""
        assert sanitize_metadata(value) == {}

    def test_event_metadata_is_sanitized_on_ingest(self):
        """InteractionEvent runs its metadata through the sanitizer."""
        event = InteractionEvent(
            sessionId="s1",
            eventType="click",
            timestamp=1,
            metadata={"x": 1, "password": "secret"},
        )
        assert event.metadata == {"x": 1}


# ==============================================================================
# resolve_selector
# ==============================================================================


class TestResolveSelector:
    """Tests for resolve_selector()."""

    def test_element_id_wins(self):
        """elementId takes priority over className and element."""
        meta = {"elementId": "buy", "className": "btn primary", "element": "BUTTON"}
        assert resolve_selector(meta) == "#buy"

    def test_first_two_class_tokens(self):
        """Only the first two className tokens are used."""
        assert resolve_selector({"className": "btn primary large"}) == ".btn.primary"

    def test_single_class_token(self):
        assert resolve_selector({"className": "link"}) == ".link"

    def test_empty_element_id_falls_through(self):
        """A falsy elementId is ignored."""
        assert resolve_selector({"elementId": "", "element": "A"}) == "a"

    def test_non_string_class_name_is_ignored(self):
        """SVG elements report className as an object; fall back to the tag."""
        assert resolve_selector({"className": {"baseVal": "icon"}, "element": "SVG"}) == "svg"

    def test_element_is_lowercased(self):
        assert resolve_selector({"element": "BUTTON"}) == "button"

    @pytest.mark.parametrize("metadata", [{}, None, "div", 3, {"text": "Buy"}])
    def test_unknown_fallback(self, metadata):
        """Missing identity or non-dict metadata resolves to 'unknown'."""
        assert resolve_selector(metadata) == UNKNOWN_SELECTOR

    def test_is_deterministic(self):
        """Same metadata always yields the same selector."""
        meta = {"className": "a b c", "element": "DIV"}
        assert resolve_selector(meta) == resolve_selector(dict(meta))
