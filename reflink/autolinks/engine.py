"""Autolink detection and rendering.

The engine owns the compiled patterns of every template it has seen, keyed by
the template itself, so provider templates shared across calls compile once.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config import AutolinkConfig
from ..exceptions import AutolinkCompileError
from ..text import escape_markdown, get_superscript
from ..types import EnrichmentOutcome, GitRemote
from .models import (
    NUM_PLACEHOLDER,
    AnyAutolinkTemplate,
    Autolink,
    AutolinkTemplate,
    DynamicAutolinkTemplate,
    RenderContext,
)
from .rendering import SEPARATOR, render_reference

if TYPE_CHECKING:
    from ..remotes.base import RemoteProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledAutolink:
    """Patterns for one static template."""
    plain: re.Pattern
    markdown: re.Pattern
    branch: re.Pattern


def compile_template(template: AutolinkTemplate) -> CompiledAutolink:
    """Compile the detection patterns of a template.

    Raises:
        AutolinkCompileError: If a pattern fails to compile
    """
    flags = re.IGNORECASE if template.ignore_case else 0
    id_class = r"\w+" if template.alphanumeric else r"[0-9]+"
    prefix = re.escape(template.prefix)
    md_prefix = re.escape(escape_markdown(template.prefix))
    if md_prefix != prefix:
        md_prefix = f"(?:{md_prefix}|{prefix})"

    try:
        return CompiledAutolink(
            plain=re.compile(rf"(^|\s|\(|\[|\{{)({prefix}(?P<id>{id_class}))\b", flags),
            markdown=re.compile(rf"(^|\s|\(|\[|\{{)({md_prefix}(?P<id>{id_class}))\b", flags),
            branch=re.compile(rf"(^|-|_|\.|/)({prefix})(?P<id>{id_class})(?=$|-|_|\.|/)", re.IGNORECASE),
        )
    except re.error as e:
        raise AutolinkCompileError(template.prefix, template.url, template.title, e) from e


def _relevance(autolink: Autolink) -> tuple:
    # A key at the very start of a branch name is the strongest signal
    return (
        autolink.index != 0,
        -len(autolink.prefix),
        -len(autolink.id),
        autolink.index or 0,
    )


class AutolinksEngine:
    """Detects references in text and renders them as links.

    Templates come from the user configuration, followed by the templates of the
    providers behind the given remotes.
    """

    def __init__(self, autolinks: Sequence[AutolinkConfig] | None = None):
        self._templates: tuple[AutolinkTemplate, ...] = ()
        self._compiled: dict[AutolinkTemplate, CompiledAutolink] = {}
        # Templates that failed once stay off for the life of the engine
        self._disabled: set[AnyAutolinkTemplate] = set()
        self.set_config(autolinks or ())

    @property
    def templates(self) -> tuple[AutolinkTemplate, ...]:
        return self._templates

    def set_config(self, autolinks: Sequence[AutolinkConfig]) -> None:
        """Replace the configured templates.

        Entries without a prefix or url are ignored; entries whose url has no
        ``<num>`` placeholder are logged and skipped.
        """
        templates = []
        for cfg in autolinks:
            if not cfg.prefix or not cfg.url:
                logger.debug("Ignoring incomplete autolink %r", cfg)
                continue
            if NUM_PLACEHOLDER not in cfg.url:
                logger.error(
                    "Invalid autolink (prefix=%s, url=%s): url must contain %s",
                    cfg.prefix,
                    cfg.url,
                    NUM_PLACEHOLDER,
                )
                continue
            templates.append(
                AutolinkTemplate(
                    prefix=cfg.prefix,
                    url=cfg.url,
                    title=cfg.title,
                    alphanumeric=cfg.alphanumeric,
                    ignore_case=cfg.ignoreCase,
                )
            )

        self._templates = tuple(templates)
        self._compiled.clear()

    def _get_compiled(self, template: AutolinkTemplate) -> CompiledAutolink:
        compiled = self._compiled.get(template)
        if compiled is None:
            compiled = self._compiled[template] = compile_template(template)
        return compiled

    def _iter_templates(
        self, remotes: Iterable[GitRemote] | None
    ) -> Iterable[tuple[AnyAutolinkTemplate, "RemoteProvider | None"]]:
        seen = set()
        for template in self._templates:
            seen.add(template)
            yield template, None

        # Remotes with a connected integration contribute first
        for remote in sorted(remotes or (), key=lambda r: not r.connected):
            if remote.provider is None:
                continue
            for template in remote.provider.autolinks:
                if template in seen:
                    continue
                seen.add(template)
                yield template, remote.provider

    def _disable(self, template: AnyAutolinkTemplate, error: Exception) -> None:
        self._disabled.add(template)
        if isinstance(template, AutolinkTemplate):
            logger.error(
                "Disabling autolink (prefix=%s, url=%s, title=%s): %s",
                template.prefix,
                template.url,
                template.title,
                error,
            )
        else:
            logger.error("Disabling autolink %r: %s", template, error)

    def get_autolinks(self, text: str, remote: GitRemote | None = None) -> dict[str, Autolink]:
        """Find every reference in ``text``.

        Args:
            text: Text to scan
            remote: Remote whose provider templates apply, if any

        Returns:
            References keyed by id (``owner/repo#id`` for cross-repository ones and
            prefix plus id for pull requests), in template order then text order
        """
        autolinks: dict[str, Autolink] = {}
        for template, provider in self._iter_templates([remote] if remote else None):
            if template in self._disabled:
                continue
            try:
                if isinstance(template, DynamicAutolinkTemplate):
                    template.parse(text, autolinks, provider)
                    continue

                for match in self._get_compiled(template).plain.finditer(text):
                    num = match.group("id")
                    key = template.key_for(num)
                    autolinks.setdefault(
                        key,
                        Autolink(
                            key=key,
                            id=num,
                            prefix=template.prefix,
                            url=template.url_for(num),
                            title=template.title_for(num),
                            category=template.category,
                            description=template.description_for(num),
                            index=match.start(2),
                            provider=provider,
                        ),
                    )
            except (AutolinkCompileError, ValueError, KeyError, IndexError) as e:
                self._disable(template, e)
        return autolinks

    def get_branch_autolinks(self, branch: str, remote: GitRemote | None = None) -> dict[str, Autolink]:
        """Find issue keys in a branch name, e.g. ``feature/PROJ-123-login``.

        Pull request templates are skipped. Results are ordered by relevance: a key
        at the start of the name first, then longer prefixes, longer ids, and
        earlier positions.
        """
        found: list[Autolink] = []
        for template, provider in self._iter_templates([remote] if remote else None):
            if (
                template in self._disabled
                or isinstance(template, DynamicAutolinkTemplate)
                or template.category == "pullrequest"
            ):
                continue
            try:
                pattern = self._get_compiled(template).branch
            except AutolinkCompileError as e:
                self._disable(template, e)
                continue

            for match in pattern.finditer(branch):
                num = match.group("id")
                found.append(
                    Autolink(
                        key=num,
                        id=num,
                        prefix=match.group(2),
                        url=template.url_for(num),
                        title=template.title_for(num),
                        category=template.category,
                        description=template.description_for(num),
                        index=match.start(2),
                        provider=provider,
                    )
                )

        autolinks: dict[str, Autolink] = {}
        for autolink in sorted(found, key=_relevance):
            autolinks.setdefault(autolink.key, autolink)
        return autolinks

    def linkify(
        self,
        text: str,
        markdown: bool,
        remotes: Sequence[GitRemote] | None = None,
        resolved: dict[str, EnrichmentOutcome] | None = None,
        footnotes: dict[int, str] | None = None,
        include_footnotes: bool = True,
    ) -> str:
        """Replace every reference in ``text`` with a link.

        Args:
            text: Text to render
            markdown: Render markdown links; otherwise plain text with footnote markers
            remotes: Remotes whose provider templates apply
            resolved: Enrichment outcomes keyed like ``get_autolinks``
            footnotes: Collection to add footnotes to; when omitted the engine
                appends its own footnote block to the result
            include_footnotes: False to render links without any footnotes

        Returns:
            The rendered text
        """
        if not text:
            return text

        owns_footnotes = footnotes is None and include_footnotes
        if owns_footnotes:
            footnotes = {}
        ctx = RenderContext(
            markdown=markdown,
            resolved=resolved,
            footnotes=footnotes if include_footnotes else None,
        )

        for template, provider in self._iter_templates(remotes):
            if template in self._disabled:
                continue
            try:
                if isinstance(template, DynamicAutolinkTemplate):
                    text = template.tokenize(text, ctx)
                else:
                    text = self._tokenize(template, text, ctx)
            except (AutolinkCompileError, ValueError, KeyError, IndexError) as e:
                self._disable(template, e)

        for token, replacement in ctx.token_mapping.items():
            text = text.replace(token, replacement)

        if owns_footnotes and footnotes:
            lines = "\n".join(f"{get_superscript(i)} {footnote}" for i, footnote in footnotes.items())
            text = f"{text}\n{SEPARATOR}\n{lines}"
        return text

    def _tokenize(self, template: AutolinkTemplate, text: str, ctx: RenderContext) -> str:
        compiled = self._get_compiled(template)
        pattern = compiled.markdown if ctx.markdown else compiled.plain

        def replace(match: re.Match) -> str:
            num = match.group("id")
            link_text = match.group(2)
            return match.group(1) + render_reference(
                ctx,
                key=template.key_for(num),
                link_text=link_text,
                url=template.url_for(num),
                title=template.title_for(num),
                name=template.description_for(num) or link_text,
            )

        return pattern.sub(replace, text)
