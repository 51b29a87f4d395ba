"""Abstract base class for rich hosting integrations."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from ..autolinks.models import AutolinkCategory
from ..types import IssueOrPullRequest, ResourceDescriptor

if TYPE_CHECKING:
    from ..remotes.base import RemoteProvider


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 API timestamp ("2024-01-02T03:04:05Z")."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class HostingIntegration(ABC):
    """A connection to a hosting service able to fetch live issue metadata.

    Each integration implements:
    - is_connected: Whether credentials are available
    - get_issue_or_pull_request: Fetch one issue or pull request by id
    """

    name: str = "base"

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    async def get_issue_or_pull_request(
        self,
        descriptor: ResourceDescriptor,
        id: str,
        category: AutolinkCategory | None = None,
    ) -> IssueOrPullRequest | None:
        """Fetch an issue or pull request.

        Args:
            descriptor: Repository the id belongs to
            id: Issue or pull request number
            category: Which kind of item the reference points at, if known

        Returns:
            The item, or None if it does not exist

        Raises:
            httpx.HTTPError: If the request fails
        """
        pass


IntegrationFactory = Callable[["RemoteProvider"], HostingIntegration]


class IntegrationService:
    """Looks up the integration serving a provider.

    Integrations are created on first use and shared per provider id and domain.
    """

    def __init__(self, factories: dict[str, IntegrationFactory] | None = None):
        self._factories = dict(factories or {})
        self._integrations: dict[tuple[str, str], HostingIntegration] = {}

    @classmethod
    def default(cls) -> "IntegrationService":
        """Integrations for GitHub and GitLab, authenticated from the environment."""
        from .github import GitHubIntegration
        from .gitlab import GitLabIntegration

        return cls(
            {
                "github": lambda provider: GitHubIntegration(),
                "github-enterprise": lambda provider: GitHubIntegration(api_base=provider.api_base_url),
                "gitlab": lambda provider: GitLabIntegration(),
                "gitlab-self-hosted": lambda provider: GitLabIntegration(api_base=provider.api_base_url),
            }
        )

    def register(self, provider_id: str, factory: IntegrationFactory) -> None:
        self._factories[provider_id] = factory

    def get(self, provider: "RemoteProvider") -> HostingIntegration | None:
        key = (provider.id, provider.domain.lower())
        integration = self._integrations.get(key)
        if integration is None:
            factory = self._factories.get(provider.id)
            if factory is None:
                return None
            integration = self._integrations[key] = factory(provider)
        return integration
