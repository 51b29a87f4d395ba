"""GitLab remote provider.

Covers GitLab.com and self-hosted GitLab instances.
"""

import re
from functools import cached_property
from urllib.parse import quote

from ..autolinks.dynamic import CrossRepoAutolink
from ..autolinks.models import AnyAutolinkTemplate, AutolinkTemplate
from ..types import LineRange
from .base import RemoteProvider
from .resources import Notation, PullRequestRef

GITLAB_DOMAIN = "gitlab.com"


class GitLabRemote(RemoteProvider):
    """GitLab provider.

    Supports:
    - https://gitlab.com/group/project/-/blob/main/src/app.py#L10-20
    - https://gitlab.example.com/group/subgroup/project/-/blob/<sha>/README.md
    """

    # Project paths can include groups/subgroups, so anchor on the "/-/blob" separator
    revision_path_pattern = re.compile(r"^/.+?/-/blob(/.+)$", re.IGNORECASE)
    line_fragment_pattern = re.compile(r"^L(\d+)(?:-L?(\d+))?$")

    @property
    def is_self_hosted(self) -> bool:
        return self.domain.lower() != GITLAB_DOMAIN

    @property
    def id(self) -> str:
        return "gitlab-self-hosted" if self.is_self_hosted else "gitlab"

    @property
    def service_name(self) -> str:
        return "GitLab Self-Hosted" if self.is_self_hosted else "GitLab"

    @property
    def icon(self) -> str:
        return "gitlab"

    @property
    def api_base_url(self) -> str:
        return f"{self.protocol}://{self.domain}/api/v4"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return (
            AutolinkTemplate(
                prefix="#",
                url=f"{self.base_url}/-/issues/<num>",
                title=f"Open Issue #<num> on {self.name}",
                category="issue",
                description=f"{self.name} Issue #<num>",
            ),
            AutolinkTemplate(
                prefix="!",
                url=f"{self.base_url}/-/merge_requests/<num>",
                title=f"Open Merge Request !<num> on {self.name}",
                category="pullrequest",
                description=f"{self.name} Merge Request !<num>",
            ),
            CrossRepoAutolink(
                url=f"{self.protocol}://{self.domain}/{{repo}}/-/issues/{{num}}",
                title=f"Open Issue {{repo}}#{{num}} on {self.name}",
                repo_pattern=r"[-\w.]+(?:/[-\w.]+)+",
            ),
        )

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/-/branches"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}/-/tree/{branch}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_url}/-/commit/{sha}"

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return f"{self.base_url}/-/compare/{base}{notation}{compare}"

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        query = (
            f"merge_request[source_branch]={quote(compare.branch, safe='')}"
            f"&merge_request[target_branch]={quote(base.branch, safe='')}"
        )
        if base.remote_path != compare.remote_path:
            query += f"&merge_request[target_project_path]={quote(base.remote_path, safe='')}"
        return f"{self.base_url}/-/merge_requests/new?{query}"

    def get_url_for_file(
        self,
        path: str,
        branch: str | None = None,
        sha: str | None = None,
        range: LineRange | None = None,
    ) -> str:
        line = ""
        if range is not None:
            line = f"#L{range.start}" if range.is_single_line else f"#L{range.start}-{range.end}"

        if sha:
            return f"{self.base_url}/-/blob/{sha}/{path}{line}"
        if branch:
            return f"{self.base_url}/-/blob/{branch}/{path}{line}"
        return f"{self.base_url}?path={quote(path, safe='/')}{line}"
