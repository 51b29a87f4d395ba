"""Abstract "which URL do I want" requests, independent of the hosting service."""

from dataclasses import dataclass
from typing import Literal, Union

from ..types import LineRange

Notation = Literal["..", "..."]


@dataclass(frozen=True)
class BranchResource:
    branch: str


@dataclass(frozen=True)
class BranchesResource:
    pass


@dataclass(frozen=True)
class CommitResource:
    sha: str


@dataclass(frozen=True)
class ComparisonResource:
    base: str
    compare: str
    notation: Notation = "..."


@dataclass(frozen=True)
class PullRequestRef:
    """One side of a pull request: a branch on a remote (``owner/repo`` path)."""
    branch: str
    remote_path: str
    remote_url: str | None = None


@dataclass(frozen=True)
class CreatePullRequestResource:
    base: PullRequestRef
    compare: PullRequestRef


@dataclass(frozen=True)
class FileResource:
    path: str
    branch_or_tag: str | None = None
    range: LineRange | None = None


@dataclass(frozen=True)
class RepoResource:
    pass


@dataclass(frozen=True)
class RevisionResource:
    path: str
    sha: str | None = None
    branch_or_tag: str | None = None
    range: LineRange | None = None


RemoteResource = Union[
    BranchResource,
    BranchesResource,
    CommitResource,
    ComparisonResource,
    CreatePullRequestResource,
    FileResource,
    RepoResource,
    RevisionResource,
]


def get_name_from_remote_resource(resource: RemoteResource) -> str:
    """Human-readable label for a resource, e.g. for "Open Branch on GitHub"."""
    if isinstance(resource, BranchResource):
        return "Branch"
    if isinstance(resource, BranchesResource):
        return "Branches"
    if isinstance(resource, CommitResource):
        return "Commit"
    if isinstance(resource, ComparisonResource):
        return "Comparison"
    if isinstance(resource, CreatePullRequestResource):
        return "Pull Request"
    if isinstance(resource, (FileResource, RevisionResource)):
        return "File"
    if isinstance(resource, RepoResource):
        return "Repository"
    return ""
