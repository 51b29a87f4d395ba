"""Rendering of a single detected reference as a link, tooltip and footnote."""

from ..text import capitalize, encode_uri, escape_markdown, from_now, get_superscript
from .models import RenderContext

SEPARATOR = "--"
TIMED_OUT = "Timed out"


def _quote_title(title: str) -> str:
    return title.replace('"', '\\"')


def render_reference(
    ctx: RenderContext,
    *,
    key: str,
    link_text: str,
    url: str,
    title: str | None,
    name: str,
) -> str:
    """Render one reference and return the placeholder token (or bare text) to splice in.

    Args:
        ctx: State of the current linkify call
        key: Key of the reference in ``ctx.resolved``
        link_text: The matched text, e.g. ``#42``
        url: Link target with the id already interpolated
        title: Tooltip with the id already interpolated
        name: Fallback label for footnotes when no live data is available

    Returns:
        Replacement text for the match
    """
    outcome = ctx.resolved.get(key) if ctx.resolved else None

    if not ctx.markdown:
        if outcome is None or not (outcome.is_resolved or outcome.is_cancelled):
            return link_text

        if outcome.is_cancelled:
            footnote = f"{link_text}: {TIMED_OUT}"
        else:
            issue = outcome.value
            age = from_now(issue.closed_date or issue.created_date)
            footnote = f"{link_text}: {issue.title.strip()}  •  {capitalize(issue.state)}, {age}"

        index = ctx.add_footnote(key, footnote)
        if index is None:
            return link_text
        return ctx.add_token(f"{link_text}{get_superscript(index)}")

    url = encode_uri(url)
    tooltip = _quote_title(title) if title else ""
    footnote = None

    if outcome is not None and outcome.is_resolved:
        issue = outcome.value
        issue_title = escape_markdown(issue.title.strip())
        age = from_now(issue.closed_date or issue.created_date)
        details = f"{_quote_title(issue_title)}\n{capitalize(issue.state)}, {age}"
        tooltip = f"{tooltip}\n{SEPARATOR}\n{details}" if tooltip else details
        footnote = f'[**{issue_title}**]({url} "{tooltip}")\\\n{" " * 5}{link_text} {issue.state} {age}'
    elif outcome is not None and outcome.is_cancelled:
        tooltip = f"{tooltip}\n{SEPARATOR}\n{TIMED_OUT}" if tooltip else TIMED_OUT
        footnote = f'[{escape_markdown(name)}]({url} "{tooltip}") {TIMED_OUT.lower()}'

    if footnote is not None:
        ctx.add_footnote(key, footnote)

    link = f'[{link_text}]({url} "{tooltip}")' if tooltip else f"[{link_text}]({url})"
    return ctx.add_token(link)
