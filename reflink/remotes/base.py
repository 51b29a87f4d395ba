"""Abstract base class for git hosting remote providers."""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import cached_property
from typing import ClassVar
from urllib.parse import SplitResult, unquote, urlsplit

from ..autolinks.models import AnyAutolinkTemplate
from ..git import Repository
from ..text import encode_uri
from ..types import LineRange, LocalInfo, RemoteDescriptor, ResourceDescriptor
from .resources import (
    BranchesResource,
    BranchResource,
    CommitResource,
    ComparisonResource,
    CreatePullRequestResource,
    FileResource,
    Notation,
    PullRequestRef,
    RemoteResource,
    RepoResource,
    RevisionResource,
)

logger = logging.getLogger(__name__)

_FULL_SHA = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$", re.IGNORECASE)
_SHORT_SHA = re.compile(r"^[0-9a-f]{7,39}$", re.IGNORECASE)

# GitHub-style "#L10-L20" fragments
LINE_RANGE_FRAGMENT = re.compile(r"^L(\d+)(?:-L(\d+))?$")


def is_sha(ref: str, allow_short: bool = False) -> bool:
    """Return True if ``ref`` looks like a full (or, optionally, abbreviated) commit hash."""
    if _FULL_SHA.match(ref):
        return True
    return allow_short and bool(_SHORT_SHA.match(ref))


@dataclass(frozen=True)
class RemoteProvider(ABC):
    """A git hosting service backing a remote (GitHub, GitLab, Gerrit, etc.).

    Each provider implements:
    - URL building for abstract resources (url)
    - Reverse mapping of a pasted hosting URL to a local file (get_local_info)
    - The autolinks its service understands (autolinks)

    Instances are immutable once constructed.
    """

    domain: str
    path: str
    protocol: str = "https"
    display_name: str | None = None
    custom: bool = False

    # Matches the part of a URL path that holds "/<revision>/<file>"; group 1 keeps the leading slash
    revision_path_pattern: ClassVar[re.Pattern | None] = None
    line_fragment_pattern: ClassVar[re.Pattern] = LINE_RANGE_FRAGMENT

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable provider identifier (e.g. "github", "github-enterprise")."""

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Name of the hosting service, used when no display name override is set."""

    @property
    def name(self) -> str:
        if self.display_name is not None:
            return self.display_name
        return f"{self.service_name} ({self.domain})" if self.custom else self.service_name

    @property
    def icon(self) -> str:
        return "remote"

    @property
    def descriptor(self) -> RemoteDescriptor:
        return RemoteDescriptor(
            domain=self.domain,
            path=self.path,
            protocol=self.protocol,
            name=self.display_name,
            custom=self.custom,
        )

    @property
    def repo_descriptor(self) -> ResourceDescriptor:
        owner, repo = self.split_path()
        return ResourceDescriptor(owner=owner, repo=repo)

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return ()

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.domain}/{self.path}"

    @property
    def web_path(self) -> str:
        """URL path prefix of every page of this repository (with a trailing slash)."""
        return urlsplit(self.base_url).path.rstrip("/") + "/"

    def split_path(self) -> tuple[str, str]:
        """Split ``owner/repo`` (the owner may contain further slashes)."""
        owner, _, repo = self.path.rpartition("/")
        return owner, repo

    # -- forward mapping ---------------------------------------------------

    def url(self, resource: RemoteResource) -> str | None:
        """Build the hosting URL for a resource.

        Args:
            resource: What to link to

        Returns:
            The encoded URL, or None when the service has no equivalent page
        """
        if isinstance(resource, BranchResource):
            url = self.get_url_for_branch(resource.branch)
        elif isinstance(resource, BranchesResource):
            url = self.get_url_for_branches()
        elif isinstance(resource, CommitResource):
            url = self.get_url_for_commit(resource.sha)
        elif isinstance(resource, ComparisonResource):
            url = self.get_url_for_comparison(resource.base, resource.compare, resource.notation)
        elif isinstance(resource, CreatePullRequestResource):
            url = self.get_url_for_create_pull_request(resource.base, resource.compare)
        elif isinstance(resource, FileResource):
            url = self.get_url_for_file(resource.path, resource.branch_or_tag, None, resource.range)
        elif isinstance(resource, RepoResource):
            url = self.get_url_for_repository()
        elif isinstance(resource, RevisionResource):
            url = self.get_url_for_file(resource.path, resource.branch_or_tag, resource.sha, resource.range)
        else:
            return None
        return encode_uri(url) if url is not None else None

    def get_url_for_repository(self) -> str:
        return self.base_url

    @abstractmethod
    def get_url_for_branch(self, branch: str) -> str:
        pass

    @abstractmethod
    def get_url_for_branches(self) -> str:
        pass

    @abstractmethod
    def get_url_for_commit(self, sha: str) -> str:
        pass

    def get_url_for_comparison(self, base: str, compare: str, notation: Notation) -> str | None:
        return None

    def get_url_for_create_pull_request(self, base: PullRequestRef, compare: PullRequestRef) -> str | None:
        return None

    @abstractmethod
    def get_url_for_file(
        self,
        path: str,
        branch: str | None = None,
        sha: str | None = None,
        range: LineRange | None = None,
    ) -> str:
        pass

    # -- reverse mapping ---------------------------------------------------

    def parse_line_range(self, url: SplitResult) -> tuple[int | None, int | None]:
        """Read the selected lines from the URL (the fragment by default)."""
        if not url.fragment:
            return None, None
        match = self.line_fragment_pattern.match(url.fragment)
        if match is None:
            return None, None
        start = match.group(1)
        # Some hosts only select a single line
        end = match.group(2) if match.re.groups >= 2 else None
        return int(start), int(end) if end else None

    def extract_revision_path(self, url: SplitResult) -> str | None:
        """Return ``/<revision>/<file>`` from a file URL, or None if it is not one."""
        if self.revision_path_pattern is None:
            return None
        match = self.revision_path_pattern.match(unquote(url.path))
        return match.group(1) if match else None

    async def get_local_info(
        self, url: str, repository: Repository, validate: bool = True
    ) -> LocalInfo | None:
        """Map a pasted hosting URL back to a file and line range in the repository.

        Args:
            url: A file URL on this provider's host
            repository: Repository used to disambiguate branch names containing "/"
            validate: Require the URL to point into this provider's repository path

        Returns:
            LocalInfo with the repository-relative path, or None if the URL is not a file URL
        """
        parts = urlsplit(url)
        if parts.netloc.lower() != self.domain.lower():
            return None
        if validate and not unquote(parts.path).lower().startswith(self.web_path.lower()):
            return None

        start_line, end_line = self.parse_line_range(parts)
        revision_path = self.extract_revision_path(parts)
        if revision_path is None:
            return None
        return await resolve_revision_path(revision_path, repository, start_line, end_line)


async def resolve_revision_path(
    revision_path: str,
    repository: Repository,
    start_line: int | None = None,
    end_line: int | None = None,
) -> LocalInfo | None:
    """Split ``/<revision>/<file>`` where the revision may itself contain slashes.

    A full commit hash in the first segment is a permalink and is taken as-is.
    Otherwise every cut point, from the end of the path backwards, is a candidate
    branch name; one batched lookup finds which exist and the first candidate in
    walk order (the longest branch name) wins. An abbreviated hash in the first
    segment is used only when no branch matches.
    """
    fallback = None
    index = revision_path.find("/", 1)
    if index != -1:
        rev = revision_path[1:index]
        if is_sha(rev):
            return LocalInfo(path=revision_path[index + 1:], start_line=start_line, end_line=end_line)
        if is_sha(rev, allow_short=True):
            fallback = LocalInfo(path=revision_path[index + 1:], start_line=start_line, end_line=end_line)

    candidates: dict[str, str] = {}
    index = len(revision_path)
    while True:
        index = revision_path.rfind("/", 0, index)
        if index <= 0:
            break
        candidates[revision_path[1:index]] = revision_path[index + 1:]

    if candidates:
        existing = await repository.get_branch_names(candidates)
        for branch, path in candidates.items():
            if branch in existing and path:
                logger.debug("Resolved %s as branch %r", revision_path, branch)
                return LocalInfo(path=path, start_line=start_line, end_line=end_line)

    return fallback
