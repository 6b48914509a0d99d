"""Tests for message validation, token estimates and statistics."""

from prompt_extractor.messages import (
    MessageStats,
    estimate_token_count,
    get_message_stats,
    validate_messages,
)
from prompt_extractor.models import ChatMessage


class TestValidateMessages:

    def test_valid(self):
        messages = [ChatMessage(role="system", content="s"), ChatMessage(role="user", content="u")]
        assert validate_messages(messages) == []

    def test_not_a_list(self):
        assert validate_messages("nope") == ["Messages must be a list"]

    def test_empty(self):
        assert validate_messages([]) == ["At least one message is required"]

    def test_errors_per_index(self):
        messages = [
            {"role": "user", "content": "ok"},
            {"role": "tool", "content": "x"},
            {"content": ""},
            {"role": "assistant", "content": [{"type": "text", "text": "parts"}]},
        ]
        assert validate_messages(messages) == [
            "Message 2: role must be one of system, user or assistant",
            "Message 3: role must be one of system, user or assistant",
            "Message 3: content must be a non-empty string",
            "Message 4: content must be a non-empty string",
        ]

    def test_non_dict_entry(self):
        assert validate_messages([42]) == [
            "Message 1: role must be one of system, user or assistant",
            "Message 1: content must be a non-empty string",
        ]

    def test_idempotent(self):
        messages = [{"role": "bad"}, ChatMessage(role="user", content="x")]
        first = validate_messages(messages)
        assert validate_messages(messages) == first
        assert messages[0] == {"role": "bad"}


class TestEstimateTokenCount:

    def test_empty(self):
        assert estimate_token_count("") == 0

    def test_mixed(self):
        assert estimate_token_count("hello 你好 !!!") == 4

    def test_words(self):
        assert estimate_token_count("The quick brown fox") == 4

    def test_other_chars_round_up(self):
        assert estimate_token_count("12345") == 2
        assert estimate_token_count("1234") == 1

    def test_whitespace_only(self):
        assert estimate_token_count(" \n\t ") == 0

    def test_astral_characters_count_as_two(self):
        assert estimate_token_count("\U0001F600\U0001F600\U0001F600") == 2


class TestGetMessageStats:

    def test_counts(self):
        messages = [
            ChatMessage(role="system", content="Be brief."),
            ChatMessage(role="user", content="你好"),
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": [{"type": "text", "text": "hi"}]},
        ]
        stats = get_message_stats(messages)
        assert stats == MessageStats(
            total=4,
            system=1,
            user=2,
            assistant=1,
            total_tokens=(2 + 1) + 2 + 1 + 1,
            total_chars=9 + 2 + 5 + 2,
        )

    def test_unknown_role_counted_in_total_only(self):
        stats = get_message_stats([{"role": "tool", "content": "x"}])
        assert stats.to_dict() == {
            "total": 1,
            "system": 0,
            "user": 0,
            "assistant": 0,
            "total_tokens": 1,
            "total_chars": 1,
        }

    def test_empty(self):
        assert get_message_stats([]) == MessageStats()

    def test_chars_counted_in_utf16_units(self):
        stats = get_message_stats([{"role": "user", "content": "hi \U0001F600"}])
        assert stats.total_chars == 5
        assert stats.total_tokens == 2
