"""
Tests for reply extraction from worker responses.
"""

import pytest
from chat_advisor.llm.extraction import extract_reply


class TestExtractReply:
    """Test choices[0].message.content lookup."""

    def test_reply_found(self):
        """Well-formed responses yield the reply text."""
        result = extract_reply({"choices": [{"message": {"content": "Use micellar water."}}]})
        assert result.ok
        assert result.reply == "Use micellar water."
        assert result.reason is None

    @pytest.mark.parametrize("content", [" ", "   ", "\n\t"])
    def test_whitespace_only_content_is_a_reply(self, content):
        """Whitespace-only text is non-empty and passed through unchanged."""
        result = extract_reply({"choices": [{"message": {"content": content}}]})
        assert result.ok
        assert result.reply == content

    def test_only_first_choice_used(self):
        """Later choices are ignored."""
        result = extract_reply({
            "choices": [
                {"message": {"content": "first"}},
                {"message": {"content": "second"}},
            ]
        })
        assert result.reply == "first"

    @pytest.mark.parametrize(
        "data, reason",
        [
            ({}, "choices missing"),
            ({"choices": None}, "choices missing"),
            ({"choices": "nope"}, "choices is not a list"),
            ({"choices": []}, "choices is empty"),
            ({"choices": [None]}, "first choice is not an object"),
            ({"choices": [{}]}, "choices[0].message missing"),
            ({"choices": [{"message": None}]}, "choices[0].message missing"),
            ({"choices": [{"message": {}}]}, "choices[0].message.content is null"),
            ({"choices": [{"message": {"content": None}}]}, "choices[0].message.content is null"),
            ({"choices": [{"message": {"content": 42}}]}, "choices[0].message.content is not a string"),
            ({"choices": [{"message": {"content": ""}}]}, "choices[0].message.content is empty"),
            ([], "response is not an object"),
            (None, "response is not an object"),
        ],
    )
    def test_missing_reply(self, data, reason):
        """Every malformed level falls back to no reply with a reason."""
        result = extract_reply(data)
        assert not result.ok
        assert result.reply is None
        assert result.reason == reason

    def test_upstream_error_body(self):
        """Error bodies forwarded by the worker carry no reply."""
        result = extract_reply({"error": {"message": "Invalid API key", "type": "invalid_request_error"}})
        assert not result.ok
