"""Bitbucket remote providers: Bitbucket Cloud and self-hosted Bitbucket Server."""

import posixpath
import re
from functools import cached_property
from urllib.parse import quote, unquote, urlsplit

from ..autolinks.models import AnyAutolinkTemplate, AutolinkTemplate
from ..git import Repository
from ..types import LineRange, LocalInfo
from .base import RemoteProvider
from .resources import Notation, PullRequestRef


def _bitbucket_autolinks(base_url: str, name: str) -> tuple[AnyAutolinkTemplate, ...]:
    return (
        AutolinkTemplate(
            prefix="issue #",
            url=f"{base_url}/issues/<num>",
            ignore_case=True,
            title=f"Open Issue #<num> on {name}",
            category="issue",
            description=f"{name} Issue #<num>",
        ),
        AutolinkTemplate(
            prefix="pull request #",
            url=f"{base_url}/pull-requests/<num>",
            ignore_case=True,
            title=f"Open Pull Request #<num> on {name}",
            category="pullrequest",
            description=f"{name} Pull Request #<num>",
        ),
    )


class BitbucketRemote(RemoteProvider):
    """Bitbucket Cloud provider.

    Supports:
    - https://bitbucket.org/owner/repo/src/main/src/app.ts#app.ts-10:20
    """

    revision_path_pattern = re.compile(r"^/[^/]*/[^/]*/src(/.+)$", re.IGNORECASE)
    line_fragment_pattern = re.compile(r"^(?:.+-|lines-)(\d+)(?::(\d+))?$")

    @property
    def id(self) -> str:
        return "bitbucket"

    @property
    def service_name(self) -> str:
        return "Bitbucket"

    @property
    def icon(self) -> str:
        return "bitbucket"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return _bitbucket_autolinks(self.base_url, self.name)

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/branches"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}/branch/{branch}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_url}/commits/{sha}"

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return f"{self.base_url}/branches/compare/{compare}%0D{base}"

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        source = compare.branch
        if base.remote_path != compare.remote_path:
            source = f"{compare.remote_path}:{compare.branch}"
        return (
            f"{self.base_url}/pull-requests/new"
            f"?source={quote(source, safe='')}&dest={quote(base.branch, safe='')}"
        )

    def get_url_for_file(
        self,
        path: str,
        branch: str | None = None,
        sha: str | None = None,
        range: LineRange | None = None,
    ) -> str:
        line = ""
        if range is not None:
            anchor = posixpath.basename(path)
            if range.is_single_line:
                line = f"#{anchor}-{range.start}"
            else:
                line = f"#{anchor}-{range.start}:{range.end}"

        if sha:
            return f"{self.base_url}/src/{sha}/{path}{line}"
        if branch:
            return f"{self.base_url}/src/{branch}/{path}{line}"
        return f"{self.base_url}?path={quote(path, safe='/')}{line}"


class BitbucketServerRemote(RemoteProvider):
    """Bitbucket Server (Data Center) provider.

    Clone paths look like ``scm/PROJ/repo`` while web pages live under
    ``projects/PROJ/repos/repo``.

    Supports:
    - https://git.example.com/projects/PROJ/repos/repo/browse/src/app.ts?at=refs/heads/main#10-20
    """

    line_fragment_pattern = re.compile(r"^(\d+)(?:-(\d+))?$")
    _browse_pattern = re.compile(
        r"^/(?:projects|users)/(?P<project>[^/]+)/repos/(?P<repo>[^/]+)/browse/(?P<file>.+)$", re.IGNORECASE
    )

    @property
    def id(self) -> str:
        return "bitbucket-server"

    @property
    def service_name(self) -> str:
        return "Bitbucket Server"

    @property
    def icon(self) -> str:
        return "bitbucket"

    @property
    def project_and_repo(self) -> tuple[str, str]:
        path = self.path[len("scm/"):] if self.path.lower().startswith("scm/") else self.path
        project, _, repo = path.rpartition("/")
        return project, repo

    @property
    def base_url(self) -> str:
        project, repo = self.project_and_repo
        return f"{self.protocol}://{self.domain}/projects/{project}/repos/{repo}"

    @property
    def api_base_url(self) -> str:
        return f"{self.protocol}://{self.domain}/rest/api/1.0"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return _bitbucket_autolinks(self.base_url, self.name)

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/branches"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}/commits?until={branch}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_url}/commits/{sha}"

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return f"{self.base_url}/compare/commits?sourceBranch={compare}&targetBranch={base}"

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        return (
            f"{self.base_url}/pull-requests?create"
            f"&sourceBranch={quote(compare.branch, safe='')}&targetBranch={quote(base.branch, safe='')}"
        )

    def get_url_for_file(
        self,
        path: str,
        branch: str | None = None,
        sha: str | None = None,
        range: LineRange | None = None,
    ) -> str:
        line = ""
        if range is not None:
            line = f"#{range.start}" if range.is_single_line else f"#{range.start}-{range.end}"

        rev = sha or branch
        if rev:
            return f"{self.base_url}/browse/{path}?at={rev}{line}"
        return f"{self.base_url}/browse/{path}{line}"

    async def get_local_info(
        self, url: str, repository: Repository, validate: bool = True
    ) -> LocalInfo | None:
        # The revision travels in ?at=, so the file path is exact and no branch lookup is needed
        parts = urlsplit(url)
        # The domain may carry a mount path, e.g. "git.example.com/bitbucket"
        location = f"{parts.netloc}{unquote(parts.path)}"
        if not location.lower().startswith(f"{self.domain.lower()}/"):
            return None
        match = self._browse_pattern.match(location[len(self.domain):])
        if match is None:
            return None

        if validate:
            project, repo = self.project_and_repo
            if (match.group("project").lower(), match.group("repo").lower()) != (project.lower(), repo.lower()):
                return None

        start_line, end_line = self.parse_line_range(parts)
        return LocalInfo(path=match.group("file"), start_line=start_line, end_line=end_line)
