"""Gitea remote provider."""

import re
from functools import cached_property
from urllib.parse import quote

from ..autolinks.dynamic import CrossRepoAutolink
from ..autolinks.models import AnyAutolinkTemplate, AutolinkTemplate
from ..types import LineRange
from .base import RemoteProvider
from .resources import Notation, PullRequestRef


class GiteaRemote(RemoteProvider):
    """Gitea provider.

    Supports:
    - https://gitea.example.com/owner/repo/src/branch/main/src/app.go#L10-L20
    - https://gitea.example.com/owner/repo/src/commit/<sha>/README.md
    """

    revision_path_pattern = re.compile(r"^/[^/]*/[^/]*/src/(?:branch|commit|tag)(/.+)$", re.IGNORECASE)

    @property
    def id(self) -> str:
        return "gitea"

    @property
    def service_name(self) -> str:
        return "Gitea"

    @property
    def icon(self) -> str:
        return "gitea"

    @property
    def api_base_url(self) -> str:
        return f"{self.protocol}://{self.domain}/api/v1"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return (
            AutolinkTemplate(
                prefix="#",
                url=f"{self.base_url}/issues/<num>",
                title=f"Open Issue #<num> on {self.name}",
                description=f"{self.name} Issue #<num>",
            ),
            CrossRepoAutolink(
                url=f"{self.protocol}://{self.domain}/{{repo}}/issues/{{num}}",
                title=f"Open Issue {{repo}}#{{num}} on {self.name}",
            ),
        )

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/branches"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}/src/branch/{branch}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_url}/commit/{sha}"

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return f"{self.base_url}/compare/{base}{notation}{compare}"

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        head = compare.branch
        if base.remote_path != compare.remote_path:
            head = f"{compare.remote_path.split('/', 1)[0]}:{compare.branch}"
        return f"{self.base_url}/compare/{base.branch}...{head}"

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
            return f"{self.base_url}/src/commit/{sha}/{path}{line}"
        if branch:
            return f"{self.base_url}/src/branch/{branch}/{path}{line}"
        return f"{self.base_url}?path={quote(path, safe='/')}{line}"
