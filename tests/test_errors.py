# ==============================================================================
# Tests for Error Fingerprinting
# ==============================================================================
"""
Unit tests for normalize_stack(), make_fingerprint() and error grouping.
"""

from pagepulse.core.errors import group_errors, make_fingerprint, normalize_stack, top_error_groups
from pagepulse.core.models import ErrorRecord

from conftest import BASE_TS

STACK_BUILD_A = (
    "TypeError: x is undefined\n"
    "    at render (https://cdn.example.com/app.1a2b.js:10:15)\n"
    "    at main (https://cdn.example.com/app.1a2b.js:3:7)"
)
STACK_BUILD_B = (
    "TypeError: x is undefined\n"
    "    at render (https://static.example.org/app.9f8e.js:12:44)\n"
    "    at main (https://static.example.org/app.9f8e.js:5:1)"
)


# ==============================================================================
# Stack Normalization
# ==============================================================================


class TestNormalizeStack:
    """Tests for normalize_stack()."""

    def test_masks_line_and_column(self):
        assert normalize_stack("at foo app.js:12:34") == "at foo app.js:__:__"

    def test_masks_parenthesized_paths(self):
        assert normalize_stack("at foo (https://cdn/app.js:1:2)") == "at foo (...)"

    def test_keeps_first_five_lines(self):
        stack = "\n".join(f"line {i}" for i in range(8))
        assert normalize_stack(stack).split("\n") == [f"line {i}" for i in range(5)]

    def test_empty_and_non_string(self):
        assert normalize_stack("") == ""
        assert normalize_stack(None) == ""
        assert normalize_stack(42) == ""

    def test_fingerprint_is_truncated(self):
        error = ErrorRecord(name="Error", message="m" * 2000)
        assert len(make_fingerprint(error)) == 1000

    def test_fingerprint_strips_name_and_message(self):
        error = ErrorRecord(name=" TypeError ", message=" boom ")
        assert make_fingerprint(error) == "TypeError|boom|"


# ==============================================================================
# Grouping
# ==============================================================================


class TestGroupErrors:
    """Tests for group_errors() and top_error_groups()."""

    def test_same_bug_from_different_builds_groups_together(self, make_sample):
        samples = [
            make_sample(0, js_errors=[{"name": "TypeError", "message": "x is undefined", "stack": STACK_BUILD_A}]),
            make_sample(
                60_000,
                session_id="s2",
                page_url="/cart",
                js_errors=[{"name": "TypeError", "message": "x is undefined", "stack": STACK_BUILD_B}],
            ),
        ]

        (group,) = group_errors(samples)

        assert group.count == 2
        assert group.sessions == {"s1", "s2"}
        assert group.pages == {"/home", "/cart"}
        assert group.first_seen == BASE_TS
        assert group.last_seen == BASE_TS + 60_000
        assert "(...)" in group.normalized_stack

    def test_defaults_for_missing_name_and_message(self, make_sample):
        (group,) = group_errors([make_sample(js_errors=[{"stack": "at x"}])])
        assert group.name == "Error"
        assert group.message == "Unknown error"

    def test_sample_without_session_adds_no_session(self, make_sample):
        (group,) = group_errors([make_sample(session_id=None, js_errors=[{"message": "boom"}])])
        assert group.sessions == set()
        assert group.count == 1

    def test_different_messages_are_separate_groups(self, make_sample):
        sample = make_sample(js_errors=[{"message": "a"}, {"message": "b"}, {"message": "a"}])
        groups = group_errors([sample])
        assert [(g.message, g.count) for g in groups] == [("a", 2), ("b", 1)]

    def test_top_groups_sorted_and_limited(self, make_sample):
        sample = make_sample(
            js_errors=[{"message": "rare"}] + [{"message": "common"}] * 3 + [{"message": "mid"}] * 2
        )
        groups = top_error_groups([sample], limit=2)
        assert [g.message for g in groups] == ["common", "mid"]

    def test_samples_without_errors(self, make_sample):
        assert group_errors([make_sample(lcp=1200)]) == []
