"""Type definitions shared by the remotes and autolinks packages."""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .remotes.base import RemoteProvider


IssueState = Literal["opened", "closed", "merged"]
IssueType = Literal["issue", "pullrequest"]


@dataclass(frozen=True)
class RemoteDescriptor:
    """Where a remote lives and how it should be displayed."""
    domain: str
    path: str
    protocol: str = "https"
    name: str | None = None  # display name override
    custom: bool = False


@dataclass(frozen=True)
class ResourceDescriptor:
    """Identifies a repository on a hosting service."""
    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class LineRange:
    """A 1-based, inclusive line range."""
    start: int
    end: int | None = None

    @property
    def is_single_line(self) -> bool:
        return self.end is None or self.end == self.start


@dataclass
class LocalInfo:
    """A pasted hosting URL mapped back to a file in the working tree."""
    path: str
    start_line: int | None = None
    end_line: int | None = None


@dataclass
class IssueOrPullRequest:
    """Live metadata for an issue or pull request."""
    id: str
    title: str
    state: IssueState
    url: str
    created_date: datetime
    closed_date: datetime | None = None
    type: IssueType = "issue"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "state": self.state,
            "url": self.url,
            "createdDate": self.created_date.isoformat(),
            "closedDate": self.closed_date.isoformat() if self.closed_date else None,
            "type": self.type,
        }


@dataclass(frozen=True)
class EnrichmentOutcome:
    """The result of resolving one referenced id.

    A cancelled outcome means the fetch did not finish before the deadline.
    """
    status: Literal["resolved", "not_found", "cancelled"]
    value: IssueOrPullRequest | None = None

    @classmethod
    def resolved(cls, value: IssueOrPullRequest) -> "EnrichmentOutcome":
        return cls(status="resolved", value=value)

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def is_resolved(self) -> bool:
        return self.status == "resolved" and self.value is not None


NOT_FOUND = EnrichmentOutcome(status="not_found")
CANCELLED = EnrichmentOutcome(status="cancelled")


@dataclass
class GitRemote:
    """A named remote of a local repository."""
    name: str
    url: str
    domain: str
    path: str
    protocol: str = "https"
    provider: "RemoteProvider | None" = None
    connected: bool = False  # whether a rich integration is connected for this remote

    @property
    def remote_key(self) -> str:
        return f"{self.domain}/{self.path}"
