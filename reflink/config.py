"""Shared configuration loaded from .env and the reflink config file."""

import json
import logging
import os
import warnings
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

# Make environment loading explicit with opt-out mechanism
if os.getenv("REFLINK_AUTO_LOAD_DOTENV", "true").lower() == "true":
    load_dotenv()

logger = logging.getLogger(__name__)


def _get_int(env_var: str, default: int, name: str) -> int:
    """Safely convert environment variable to int with fallback.

    Args:
        env_var: Environment variable name
        default: Default value if env var is not set or invalid
        name: Human-readable name for error messages

    Returns:
        Integer value from env var or default
    """
    value = os.getenv(env_var, str(default))
    try:
        result = int(value)
        if result < 0:
            warnings.warn(f"{name} must be non-negative, got {result}. Using default {default}.")
            return default
        return result
    except ValueError:
        warnings.warn(f"Invalid {env_var} value '{value}', using default {default}")
        return default


# GitHub API configuration
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GITHUB_API_BASE = os.getenv("GITHUB_API_BASE", "https://api.github.com")

# GitLab API configuration
GITLAB_TOKEN = os.getenv("GITLAB_TOKEN")
GITLAB_API_BASE = os.getenv("GITLAB_API_BASE", "https://gitlab.com/api/v4")

# Enrichment budget; 0 waits for every fetch
ENRICHMENT_TIMEOUT_MS = _get_int("REFLINK_ENRICHMENT_TIMEOUT_MS", 250, "REFLINK_ENRICHMENT_TIMEOUT_MS")

LOG_LEVEL = os.getenv("REFLINK_LOG_LEVEL", "WARNING").upper()

REFLINK_CONFIG_FILE = Path(
    os.getenv("REFLINK_CONFIG_FILE", os.path.expanduser("~/.reflink/config.json"))
)


REMOTE_TYPES = (
    "AzureDevOps",
    "Bitbucket",
    "BitbucketServer",
    "Custom",
    "Gerrit",
    "GoogleSource",
    "Gitea",
    "GitHub",
    "GitLab",
)

SELF_MANAGED_TYPES = ("GitHubEnterprise", "GitLabSelfHosted", "BitbucketServer", "AzureDevOpsServer")


class AutolinkConfig(BaseModel):
    """A user-defined autolink, e.g. ``{"prefix": "JIRA-", "url": "https://jira/browse/JIRA-<num>"}``."""
    prefix: str = ""
    url: str = ""
    title: str | None = None
    alphanumeric: bool = False
    ignoreCase: bool = False


class CustomRemoteUrls(BaseModel):
    """URL templates for a ``Custom`` remote.

    Templates may reference ``${repo}``, ``${branch}``, ``${sha}``, ``${file}``,
    ``${line}``, ``${ref1}``, ``${ref2}`` and ``${notation}``.
    """
    repository: str
    branches: str
    branch: str
    commit: str
    file: str
    fileInBranch: str
    fileInCommit: str
    fileLine: str
    fileRange: str
    comparison: str | None = None
    createPullRequest: str | None = None


class RemoteConfig(BaseModel):
    """A user-defined remote provider entry."""
    type: str  # one of REMOTE_TYPES, checked when the registry loads
    domain: str | None = None
    regex: str | None = None
    name: str | None = None
    protocol: str | None = None
    urls: CustomRemoteUrls | None = None


class IntegrationConfig(BaseModel):
    """A connected self-managed hosting integration."""
    type: str  # one of SELF_MANAGED_TYPES
    domain: str


class ReflinkConfig(BaseModel):
    autolinks: list[AutolinkConfig] = Field(default_factory=list)
    remotes: list[RemoteConfig] = Field(default_factory=list)
    integrations: list[IntegrationConfig] = Field(default_factory=list)


def _validate_entries(model: type[BaseModel], entries: object, section: str, path: Path) -> list:
    """Validate a config section entry by entry, skipping the invalid ones."""
    if entries is None:
        return []
    if not isinstance(entries, list):
        logger.error("Invalid reflink config %s: '%s' must be a list", path, section)
        return []

    valid = []
    for i, entry in enumerate(entries):
        try:
            valid.append(model.model_validate(entry))
        except ValidationError as e:
            logger.error("Skipping invalid %s[%d] in %s: %s", section, i, path, e)
    return valid


def load_config(path: Path | None = None) -> ReflinkConfig:
    """Load the reflink config file.

    Each entry is validated on its own, so one malformed autolink, remote or
    integration is logged and skipped while the rest still load. An unreadable
    file yields the default (empty) configuration.

    Args:
        path: Config file path (defaults to REFLINK_CONFIG_FILE)

    Returns:
        Parsed configuration
    """
    path = path or REFLINK_CONFIG_FILE
    if not path.exists():
        return ReflinkConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error("Invalid reflink config %s: %s", path, e)
        return ReflinkConfig()
    if not isinstance(data, dict):
        logger.error("Invalid reflink config %s: expected an object", path)
        return ReflinkConfig()

    return ReflinkConfig(
        autolinks=_validate_entries(AutolinkConfig, data.get("autolinks"), "autolinks", path),
        remotes=_validate_entries(RemoteConfig, data.get("remotes"), "remotes", path),
        integrations=_validate_entries(IntegrationConfig, data.get("integrations"), "integrations", path),
    )
