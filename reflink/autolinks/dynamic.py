"""Cross-repository references such as ``owner/repo#123``."""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from ..types import ResourceDescriptor
from .models import Autolink, DynamicAutolinkTemplate, RenderContext
from .rendering import render_reference

if TYPE_CHECKING:
    from ..remotes.base import RemoteProvider


@dataclass(frozen=True)
class CrossRepoAutolink(DynamicAutolinkTemplate):
    """Links ``owner/repo#num`` to an issue of another repository on the same host.

    ``url`` and ``title`` are format strings receiving ``repo`` and ``num``.
    """
    url: str
    title: str
    repo_pattern: str = r"[-\w.]+/[-\w.]+"

    @property
    def pattern(self) -> re.Pattern:
        return _compile(self.repo_pattern)

    def _autolink(self, repo: str, num: str, index: int, provider: "RemoteProvider | None") -> Autolink:
        owner, _, name = repo.rpartition("/")
        return Autolink(
            key=f"{repo}#{num}",
            id=num,
            prefix=f"{repo}#",
            url=self.url.format(repo=repo, num=num),
            title=self.title.format(repo=repo, num=num),
            category="issue",
            index=index,
            descriptor=ResourceDescriptor(owner=owner, repo=name),
            provider=provider,
        )

    def parse(self, text: str, autolinks: dict[str, Autolink], provider: "RemoteProvider | None") -> None:
        for match in self.pattern.finditer(text):
            autolink = self._autolink(match.group("repo"), match.group("num"), match.start(2), provider)
            autolinks.setdefault(autolink.key, autolink)

    def tokenize(self, text: str, ctx: RenderContext) -> str:
        def replace(match: re.Match) -> str:
            repo, num = match.group("repo"), match.group("num")
            return match.group(1) + render_reference(
                ctx,
                key=f"{repo}#{num}",
                link_text=match.group(2),
                url=self.url.format(repo=repo, num=num),
                title=self.title.format(repo=repo, num=num),
                name=f"{repo}#{num}",
            )

        return self.pattern.sub(replace, text)


@lru_cache(maxsize=None)
def _compile(repo_pattern: str) -> re.Pattern:
    return re.compile(rf"(^|\s|\(|\[|\{{)((?P<repo>{repo_pattern})\\?#(?P<num>[0-9]+))\b", re.IGNORECASE)
