"""GitLab integration.

Supports GitLab.com and self-hosted GitLab via GITLAB_API_BASE or the
provider's own ``/api/v4`` base.
"""

import logging
from urllib.parse import quote

import httpx

from ..autolinks.models import AutolinkCategory
from ..config import GITLAB_API_BASE, GITLAB_TOKEN
from ..exceptions import ResolutionFailure
from ..types import IssueOrPullRequest, ResourceDescriptor
from .base import HostingIntegration, parse_timestamp

logger = logging.getLogger(__name__)


class GitLabIntegration(HostingIntegration):
    """GitLab REST API client for issues and merge requests."""

    name = "gitlab"

    def __init__(self, token: str | None = None, api_base: str | None = None):
        self.token = token if token is not None else GITLAB_TOKEN
        self.api_base = (api_base or GITLAB_API_BASE).rstrip("/")

    @property
    def is_connected(self) -> bool:
        return bool(self.token)

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers for GitLab API requests."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "reflink",
        }
        if self.token:
            headers["PRIVATE-TOKEN"] = self.token
        return headers

    async def get_issue_or_pull_request(
        self,
        descriptor: ResourceDescriptor,
        id: str,
        category: AutolinkCategory | None = None,
    ) -> IssueOrPullRequest | None:
        # Projects are addressed by their URL-encoded full path
        project = quote(str(descriptor), safe="")
        kind = "merge_requests" if category == "pullrequest" else "issues"

        async with httpx.AsyncClient() as client:
            resp = await client.get(
                f"{self.api_base}/projects/{project}/{kind}/{id}",
                headers=self._get_headers(),
                timeout=30.0,
            )
            if resp.status_code == 404:
                logger.debug("%s %s/%s not found", descriptor, kind, id)
                return None
            resp.raise_for_status()

        try:
            return self._parse_issue(resp.json(), kind)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ResolutionFailure(f"Unexpected response for {descriptor} {kind}/{id}: {e}") from e

    @staticmethod
    def _parse_issue(data: dict, kind: str) -> IssueOrPullRequest:
        state = data["state"]
        if state not in ("opened", "closed", "merged"):
            # "locked" merge requests are still open
            state = "opened"

        return IssueOrPullRequest(
            id=str(data["iid"]),
            title=data["title"],
            state=state,
            url=data["web_url"],
            created_date=parse_timestamp(data["created_at"]),
            closed_date=parse_timestamp(data.get("closed_at") or data.get("merged_at")),
            type="pullrequest" if kind == "merge_requests" else "issue",
        )
