"""Tests for string helpers."""

from datetime import datetime, timedelta, timezone

from reflink.text import capitalize, encode_uri, escape_markdown, from_now, get_superscript

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestHelpers:
    def test_escape_markdown(self):
        assert escape_markdown("#42 [x]") == r"\#42 \[x\]"

    def test_encode_uri(self):
        assert encode_uri("https://h/a b?x=1#L2") == "https://h/a%20b?x=1#L2"

    def test_encode_uri_keeps_escapes(self):
        assert encode_uri("https://h/a%0Db") == "https://h/a%0Db"

    def test_superscript(self):
        assert get_superscript(12) == "¹²"

    def test_capitalize(self):
        assert capitalize("merged") == "Merged"
        assert capitalize("") == ""


class TestFromNow:
    def test_past(self):
        assert from_now(NOW - timedelta(days=3), NOW) == "3 days ago"

    def test_singular(self):
        assert from_now(NOW - timedelta(hours=1), NOW) == "1 hour ago"

    def test_future(self):
        assert from_now(NOW + timedelta(minutes=5), NOW) == "in 5 minutes"

    def test_just_now(self):
        assert from_now(NOW - timedelta(seconds=10), NOW) == "just now"

    def test_naive_is_utc(self):
        assert from_now(datetime(2024, 5, 1, 12, 0), NOW) == "1 month ago"
