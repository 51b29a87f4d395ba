"""Rich hosting integrations that fetch live issue and pull request metadata."""

from .base import HostingIntegration, IntegrationService
from .github import GitHubIntegration
from .gitlab import GitLabIntegration

__all__ = [
    "HostingIntegration",
    "IntegrationService",
    "GitHubIntegration",
    "GitLabIntegration",
]
