"""GitHub remote provider.

Covers GitHub.com and self-hosted GitHub Enterprise; the variant is decided by
the domain, not by a subclass.
"""

import re
from functools import cached_property
from urllib.parse import quote

from ..autolinks.dynamic import CrossRepoAutolink
from ..autolinks.models import AnyAutolinkTemplate, AutolinkTemplate
from ..types import LineRange
from .base import RemoteProvider
from .resources import Notation, PullRequestRef

GITHUB_DOMAIN = "github.com"


class GitHubRemote(RemoteProvider):
    """GitHub provider.

    Supports:
    - https://github.com/owner/repo/blob/main/src/app.ts#L10-L20
    - https://github.example.com/owner/repo/blob/<sha>/README.md
    """

    revision_path_pattern = re.compile(r"^/[^/]*/[^/]*/blob(/.+)$", re.IGNORECASE)

    @property
    def is_enterprise(self) -> bool:
        return self.domain.lower() != GITHUB_DOMAIN

    @property
    def id(self) -> str:
        return "github-enterprise" if self.is_enterprise else "github"

    @property
    def service_name(self) -> str:
        return "GitHub Enterprise" if self.is_enterprise else "GitHub"

    @property
    def icon(self) -> str:
        return "github"

    @property
    def api_base_url(self) -> str:
        if self.is_enterprise:
            return f"{self.protocol}://{self.domain}/api/v3"
        return "https://api.github.com"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return (
            AutolinkTemplate(
                prefix="#",
                url=f"{self.base_url}/issues/<num>",
                title=f"Open Issue or Pull Request #<num> on {self.name}",
                description=f"{self.name} Issue or Pull Request #<num>",
            ),
            AutolinkTemplate(
                prefix="gh-",
                url=f"{self.base_url}/issues/<num>",
                ignore_case=True,
                title=f"Open Issue or Pull Request #<num> on {self.name}",
                description=f"{self.name} Issue or Pull Request #<num>",
            ),
            CrossRepoAutolink(
                url=f"{self.protocol}://{self.domain}/{{repo}}/issues/{{num}}",
                title=f"Open Issue or Pull Request {{repo}}#{{num}} on {self.name}",
            ),
        )

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/branches"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}/tree/{branch}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_url}/commit/{sha}"

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return f"{self.base_url}/compare/{base}{notation}{compare}"

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        if base.remote_path != compare.remote_path:
            owner = compare.remote_path.split("/", 1)[0]
            return f"{self.base_url}/pull/new/{base.branch}...{owner}:{compare.branch}"
        return f"{self.base_url}/pull/new/{base.branch}...{compare.branch}"

    def get_url_for_file(
        self,
        path: str,
        branch: str | None = None,
        sha: str | None = None,
        range: LineRange | None = None,
    ) -> str:
        line = ""
        if range is not None:
            line = f"#L{range.start}" if range.is_single_line else f"#L{range.start}-L{range.end}"

        if sha:
            return f"{self.base_url}/blob/{sha}/{path}{line}"
        if branch:
            return f"{self.base_url}/blob/{branch}/{path}{line}"
        return f"{self.base_url}?path={quote(path, safe='/')}{line}"
