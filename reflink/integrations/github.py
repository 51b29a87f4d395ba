"""GitHub integration.

Supports GitHub.com and GitHub Enterprise (``/api/v3``) through the same
issues endpoint, which serves pull requests too.
"""

import logging

import httpx

from ..autolinks.models import AutolinkCategory
from ..config import GITHUB_API_BASE, GITHUB_TOKEN
from ..exceptions import ResolutionFailure
from ..types import IssueOrPullRequest, ResourceDescriptor
from .base import HostingIntegration, parse_timestamp

logger = logging.getLogger(__name__)


class GitHubIntegration(HostingIntegration):
    """GitHub REST API client for issues and pull requests."""

    name = "github"

    def __init__(self, token: str | None = None, api_base: str | None = None):
        self.token = token if token is not None else GITHUB_TOKEN
        self.api_base = (api_base or GITHUB_API_BASE).rstrip("/")

    @property
    def is_connected(self) -> bool:
        return bool(self.token)

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "reflink",
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def get_issue_or_pull_request(
        self,
        descriptor: ResourceDescriptor,
        id: str,
        category: AutolinkCategory | None = None,
    ) -> IssueOrPullRequest | None:
        async with httpx.AsyncClient() as client:
            resp = await client.get(
                f"{self.api_base}/repos/{descriptor.owner}/{descriptor.repo}/issues/{id}",
                headers=self._get_headers(),
                timeout=30.0,
            )
            if resp.status_code == 404:
                logger.debug("%s#%s not found", descriptor, id)
                return None
            resp.raise_for_status()

        try:
            return self._parse_issue(resp.json())
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ResolutionFailure(f"Unexpected response for {descriptor}#{id}: {e}") from e

    @staticmethod
    def _parse_issue(data: dict) -> IssueOrPullRequest:
        pull_request = data.get("pull_request")
        if data["state"] == "open":
            state = "opened"
        elif pull_request and pull_request.get("merged_at"):
            state = "merged"
        else:
            state = "closed"

        return IssueOrPullRequest(
            id=str(data["number"]),
            title=data["title"],
            state=state,
            url=data["html_url"],
            created_date=parse_timestamp(data["created_at"]),
            closed_date=parse_timestamp(data.get("closed_at")),
            type="pullrequest" if pull_request else "issue",
        )
