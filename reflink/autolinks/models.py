"""Autolink templates and the references detected from them."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from ..types import EnrichmentOutcome, ResourceDescriptor

if TYPE_CHECKING:
    from ..remotes.base import RemoteProvider

NUM_PLACEHOLDER = "<num>"

AutolinkCategory = Literal["issue", "pullrequest"]


@dataclass(frozen=True)
class AutolinkTemplate:
    """A rule turning ``prefix`` + id (e.g. ``#123``) into a link."""
    prefix: str
    url: str  # contains NUM_PLACEHOLDER
    alphanumeric: bool = False
    ignore_case: bool = False
    title: str | None = None
    category: AutolinkCategory | None = None
    description: str | None = None

    def key_for(self, num: str) -> str:
        # Merge requests share numbers with issues on some hosts (GitLab #5 vs !5)
        return f"{self.prefix}{num}" if self.category == "pullrequest" else num

    def url_for(self, num: str) -> str:
        return self.url.replace(NUM_PLACEHOLDER, num)

    def title_for(self, num: str) -> str | None:
        return self.title.replace(NUM_PLACEHOLDER, num) if self.title else None

    def description_for(self, num: str) -> str | None:
        return self.description.replace(NUM_PLACEHOLDER, num) if self.description else None


@dataclass(frozen=True)
class Autolink:
    """A reference found in a piece of text."""
    key: str  # dedup key, also the key of the resolved-outcome map
    id: str
    prefix: str
    url: str
    title: str | None = None
    category: AutolinkCategory | None = None
    description: str | None = None
    index: int | None = None  # offset of the match in the scanned text
    descriptor: ResourceDescriptor | None = None  # repository for cross-repo references
    provider: "RemoteProvider | None" = field(default=None, compare=False)


@dataclass
class RenderContext:
    """Mutable state threaded through every template during one ``linkify`` call."""
    markdown: bool
    resolved: dict[str, EnrichmentOutcome] | None = None
    footnotes: dict[int, str] | None = None
    token_mapping: dict[str, str] = field(default_factory=dict)
    footnote_index: dict[str, int] = field(default_factory=dict)

    def add_token(self, replacement: str) -> str:
        """Park rendered output behind a placeholder so later templates cannot match inside it."""
        token = f"\x00{len(self.token_mapping)}\x00"
        self.token_mapping[token] = replacement
        return token

    def add_footnote(self, key: str, footnote: str) -> int | None:
        """Number a footnote, reusing the index of an earlier mention of the same key."""
        if self.footnotes is None:
            return None
        index = self.footnote_index.get(key)
        if index is None:
            index = len(self.footnotes) + 1
            self.footnotes[index] = footnote
            self.footnote_index[key] = index
        return index


class DynamicAutolinkTemplate(ABC):
    """A provider-supplied autolink with its own detection and rendering.

    Used for references a prefix cannot describe, such as ``owner/repo#123``.
    """

    @abstractmethod
    def parse(self, text: str, autolinks: dict[str, Autolink], provider: "RemoteProvider | None") -> None:
        """Add every reference found in ``text`` to ``autolinks``."""

    @abstractmethod
    def tokenize(self, text: str, ctx: RenderContext) -> str:
        """Replace every reference in ``text`` with a rendered placeholder token."""


AnyAutolinkTemplate = AutolinkTemplate | DynamicAutolinkTemplate
