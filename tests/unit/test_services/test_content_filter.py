"""
Content Filter Unit Tests
"""

import pytest

from proxy_service.common.errors import ContentRejectedError
from proxy_service.services.content_filter import ContentFilter


def _passes(content_filter: ContentFilter, body: str) -> bool:
    try:
        content_filter.validate(body)
    except ContentRejectedError:
        return False
    return True


@pytest.mark.parametrize(
    "body,exact,insensitive,allowed",
    [
        # exact
        ('{"body": "bad_message"}', True, False, False),
        ('{"body": " bad_message"}', True, False, False),
        ('{"body": "bad_message "}', True, False, False),
        ('{"body": " bad_message "}', True, False, False),
        ('{"body": "bad_messages"}', True, False, True),
        ('{"body": "0bad_messages"}', True, False, True),
        # contains
        ('{"body": "bad_message"}', False, False, False),
        ('{"body": " bad_message"}', False, False, False),
        ('{"body": "bad_message "}', False, False, False),
        ('{"body": " bad_message "}', False, False, False),
        ('{"body": "bad_messages"}', False, False, False),
        ('{"body": "0bad_messages"}', False, False, False),
        # case-sensitive
        ('{"body": "BAD_MESSAGE"}', True, False, True),
        ('{"body": "BAD_MESSAGE"}', False, False, True),
        # case-insensitive
        ('{"body": "BAD_MESSAGE"}', True, True, False),
        ('{"body": "0BAD_MESSAGES"}', False, True, False),
    ],
)
def test_body_validation(body, exact, insensitive, allowed):
    content_filter = ContentFilter(phrase="bad_message", exact=exact, insensitive=insensitive)

    if allowed:
        assert _passes(content_filter, body) is True
    else:
        with pytest.raises(ContentRejectedError) as exc_info:
            content_filter.validate(body)
        assert exc_info.value.message == "rejected because `bad_message` found within request body"
        assert exc_info.value.status_code == 401


class TestContentFilter:
    """Tests for filter configuration edge cases"""

    def test_empty_phrase_disables_filter(self):
        content_filter = ContentFilter(phrase="", exact=False)
        assert content_filter.enabled is False
        assert _passes(content_filter, '{"body": "anything at all"}') is True
        assert _passes(content_filter, "") is True

    def test_exact_match_needs_delimiters(self):
        """A body that is only the phrase has no delimiter and is not an exact match."""
        content_filter = ContentFilter(phrase="bad_message", exact=True)
        assert _passes(content_filter, "bad_message") is True
        assert _passes(content_filter, "bad_message ") is True

    def test_exact_match_inside_sentence(self):
        content_filter = ContentFilter(phrase="bad message", exact=True)
        assert _passes(content_filter, '{"body": "this is a bad message indeed"}') is False
        assert _passes(content_filter, '{"body": "this is a bad messages indeed"}') is True

    def test_insensitive_message_uses_lowercase_phrase(self):
        content_filter = ContentFilter(phrase="Bad_Message", exact=False, insensitive=True)
        with pytest.raises(ContentRejectedError) as exc_info:
            content_filter.validate('{"body": "BAD_MESSAGE"}')
        assert exc_info.value.phrase == "bad_message"

    def test_exact_patterns(self):
        content_filter = ContentFilter(phrase="x", exact=True)
        assert content_filter.patterns("x") == [" x ", '"x"', ' x"', '"x ']

        content_filter = ContentFilter(phrase="x", exact=False)
        assert content_filter.patterns("x") == ["x"]
