"""Tests for configuration loading."""

import json
import logging

import pytest

from reflink.config import ReflinkConfig, _get_int, load_config


class TestGetInt:
    """Tests for integer environment variables."""

    def test_valid(self, monkeypatch):
        monkeypatch.setenv("REFLINK_TEST_INT", "500")
        assert _get_int("REFLINK_TEST_INT", 250, "test") == 500

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("REFLINK_TEST_INT", raising=False)
        assert _get_int("REFLINK_TEST_INT", 250, "test") == 250

    def test_invalid_warns(self, monkeypatch):
        monkeypatch.setenv("REFLINK_TEST_INT", "soon")
        with pytest.warns(UserWarning, match="Invalid REFLINK_TEST_INT"):
            assert _get_int("REFLINK_TEST_INT", 250, "test") == 250

    def test_negative_warns(self, monkeypatch):
        monkeypatch.setenv("REFLINK_TEST_INT", "-1")
        with pytest.warns(UserWarning, match="must be non-negative"):
            assert _get_int("REFLINK_TEST_INT", 250, "test") == 250


class TestLoadConfig:
    """Tests for the JSON config file."""

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "missing.json") == ReflinkConfig()

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "autolinks": [{"prefix": "JIRA-", "url": "https://jira/browse/JIRA-<num>", "ignoreCase": True}],
                    "remotes": [{"type": "GitLab", "domain": "git.corp.com", "name": "Corp"}],
                    "integrations": [{"type": "GitHubEnterprise", "domain": "github.corp.com"}],
                }
            )
        )
        config = load_config(path)
        assert config.autolinks[0].prefix == "JIRA-"
        assert config.autolinks[0].ignoreCase
        assert config.remotes[0].domain == "git.corp.com"
        assert config.integrations[0].type == "GitHubEnterprise"

    def test_unknown_remote_type_still_loads(self, tmp_path):
        """Remote types are checked by the registry, not the config loader."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"remotes": [{"type": "Nope", "domain": "x"}]}))
        assert load_config(path).remotes[0].type == "Nope"

    def test_invalid_json(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with caplog.at_level(logging.ERROR, logger="reflink.config"):
            assert load_config(path) == ReflinkConfig()
        assert "Invalid reflink config" in caplog.text

    def test_invalid_shape(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"remotes": [{"domain": "no type"}]}))
        assert load_config(path) == ReflinkConfig()

    def test_invalid_entry_skipped(self, tmp_path, caplog):
        """One malformed entry does not drop the rest of the file."""
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "autolinks": [{"prefix": "JIRA-", "url": "https://jira/browse/JIRA-<num>"}],
                    "remotes": [
                        {"type": "Custom", "domain": "git.corp.com", "urls": {"repository": "https://git.corp.com/${repo}"}},
                        {"type": "Gitea", "domain": "code.corp.com"},
                    ],
                }
            )
        )
        with caplog.at_level(logging.ERROR, logger="reflink.config"):
            config = load_config(path)

        assert [a.prefix for a in config.autolinks] == ["JIRA-"]
        assert [r.domain for r in config.remotes] == ["code.corp.com"]
        assert "Skipping invalid remotes[0]" in caplog.text

    def test_section_must_be_a_list(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"autolinks": {"prefix": "JIRA-"}, "remotes": [{"type": "Gitea", "domain": "x"}]}))
        config = load_config(path)
        assert config.autolinks == []
        assert config.remotes[0].domain == "x"
