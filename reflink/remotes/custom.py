"""User-defined remote provider driven by URL templates from the config file."""

from dataclasses import dataclass
from string import Template

from ..config import CustomRemoteUrls
from ..exceptions import ConfigurationError
from ..types import LineRange
from .base import RemoteProvider
from .resources import Notation, PullRequestRef


@dataclass(frozen=True)
class CustomRemote(RemoteProvider):
    """Custom provider.

    Every URL comes from a ``${name}`` template in ``urls``. There is no reverse
    mapping since the file URL shape is unknown.
    """

    urls: CustomRemoteUrls | None = None

    def __post_init__(self) -> None:
        if self.urls is None:
            raise ConfigurationError(f"Custom remote for {self.domain} has no urls")

    @property
    def id(self) -> str:
        return "custom"

    @property
    def service_name(self) -> str:
        return "Custom"

    def _format(self, template: str, **values: str) -> str:
        return Template(template).safe_substitute(repo=self.path, **values)

    def get_url_for_repository(self) -> str:
        return self._format(self.urls.repository)

    def get_url_for_branches(self) -> str:
        return self._format(self.urls.branches)

    def get_url_for_branch(self, branch: str) -> str:
        return self._format(self.urls.branch, branch=branch)

    def get_url_for_commit(self, sha: str) -> str:
        return self._format(self.urls.commit, id=sha, sha=sha)

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        if not self.urls.comparison:
            return None
        return self._format(self.urls.comparison, ref1=base, ref2=compare, notation=notation)

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        if not self.urls.createPullRequest:
            return None
        return self._format(
            self.urls.createPullRequest,
            base=base.branch,
            head=compare.branch,
            headRepo=compare.remote_path,
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
            if range.is_single_line:
                line = self._format(self.urls.fileLine, line=str(range.start))
            else:
                line = self._format(self.urls.fileRange, start=str(range.start), end=str(range.end))

        if sha:
            return self._format(self.urls.fileInCommit, id=sha, sha=sha, file=path, line=line)
        if branch:
            return self._format(self.urls.fileInBranch, branch=branch, file=path, line=line)
        return self._format(self.urls.file, file=path, line=line)
