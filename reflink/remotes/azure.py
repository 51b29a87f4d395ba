"""Azure DevOps remote provider (dev.azure.com and legacy visualstudio.com hosts)."""

import re
from dataclasses import dataclass
from functools import cached_property
from urllib.parse import parse_qs, quote, urlsplit

from ..autolinks.models import AnyAutolinkTemplate, AutolinkTemplate
from ..git import Repository
from ..types import LineRange, LocalInfo
from .base import RemoteProvider
from .resources import Notation, PullRequestRef

_SSH_DOMAIN = re.compile(r"^(?:ssh|vs-ssh)\.", re.IGNORECASE)
_SSH_PATH = re.compile(r"^/?v\d/", re.IGNORECASE)
_ORG_AND_PROJECT = re.compile(r"^([^/]+)/([^/]+)/(.+)$")


@dataclass(frozen=True)
class AzureDevOpsRemote(RemoteProvider):
    """Azure DevOps provider.

    Web paths look like ``org/project/_git/repo``; file pages carry the path and
    lines in the query string.

    Supports:
    - https://dev.azure.com/org/project/_git/repo?path=/src/app.cs&version=GBmain&line=10&lineEnd=21
    """

    legacy: bool = False

    @classmethod
    def create(
        cls,
        domain: str,
        path: str,
        protocol: str = "https",
        display_name: str | None = None,
        custom: bool = False,
        legacy: bool = False,
    ) -> "AzureDevOpsRemote":
        """Build a provider, rewriting ssh remotes to their web equivalent.

        ``ssh.dev.azure.com:v3/org/project/repo`` becomes ``dev.azure.com/org/project/_git/repo``;
        legacy ``vs-ssh.visualstudio.com:v3/org/project/repo`` becomes
        ``org.visualstudio.com/project/_git/repo``.
        """
        if _SSH_DOMAIN.match(domain):
            path = _SSH_PATH.sub("", path)
            domain = _SSH_DOMAIN.sub("", domain)

            match = _ORG_AND_PROJECT.match(path)
            if match is not None:
                org, project, rest = match.groups()
                if legacy:
                    domain = f"{org}.{domain}"
                    path = f"{project}/_git/{rest}"
                else:
                    path = f"{org}/{project}/_git/{rest}"

        return cls(domain, path, protocol, display_name, custom, legacy)

    @property
    def id(self) -> str:
        return "azure-devops"

    @property
    def service_name(self) -> str:
        return "Azure DevOps"

    @property
    def icon(self) -> str:
        return "azdo"

    @property
    def project_url(self) -> str:
        """URL of the project that owns the repository (work items live here)."""
        project_path, _, _ = self.path.partition("/_git/")
        return f"{self.protocol}://{self.domain}/{project_path}"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return (
            AutolinkTemplate(
                prefix="#",
                url=f"{self.project_url}/_workitems/edit/<num>",
                title=f"Open Work Item #<num> on {self.name}",
                category="issue",
                description=f"{self.name} Work Item #<num>",
            ),
            AutolinkTemplate(
                prefix="!",
                url=f"{self.base_url}/pullrequest/<num>",
                title=f"Open Pull Request !<num> on {self.name}",
                category="pullrequest",
                description=f"{self.name} Pull Request !<num>",
            ),
        )

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/branches"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}?version=GB{quote(branch, safe='')}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_url}/commit/{sha}"

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return f"{self.base_url}/branchCompare?baseVersion=GB{base}&targetVersion=GB{compare}"

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        return (
            f"{self.base_url}/pullrequestcreate"
            f"?sourceRef={quote(compare.branch, safe='')}&targetRef={quote(base.branch, safe='')}"
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
            # lineEnd is exclusive when lineEndColumn is 1
            end = range.end if range.end is not None else range.start
            line = f"&line={range.start}&lineEnd={end + 1}&lineStartColumn=1&lineEndColumn=1"

        if sha:
            version = f"&version=GC{sha}"
        elif branch:
            version = f"&version=GB{quote(branch, safe='')}"
        else:
            version = ""
        return f"{self.base_url}?path={quote('/' + path, safe='/')}{version}{line}"

    async def get_local_info(
        self, url: str, repository: Repository, validate: bool = True
    ) -> LocalInfo | None:
        # Path, revision and lines all live in the query string
        parts = urlsplit(url)
        if parts.netloc.lower() != self.domain.lower():
            return None
        if validate and parts.path.rstrip("/").lower() != f"/{self.path}".lower():
            return None

        query = parse_qs(parts.query)
        path = query.get("path", [""])[0].lstrip("/")
        if not path:
            return None

        start_line = end_line = None
        line = query.get("line", [""])[0]
        if line.isdigit():
            start_line = int(line)
            line_end = query.get("lineEnd", [""])[0]
            if line_end.isdigit():
                end_line = int(line_end)
                if query.get("lineEndColumn", [""])[0] == "1" and end_line > start_line:
                    end_line -= 1
                if end_line == start_line:
                    end_line = None
        return LocalInfo(path=path, start_line=start_line, end_line=end_line)
