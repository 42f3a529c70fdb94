"""Rich-text rendering helpers for feed item content."""

import html
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .errors import RenderError

_ISSUE_REF = re.compile(r"(?<![\w&])#(\d+)\b")
_BLANK_LINE = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class RenderContext:
    """Where rendered text lives: relative links resolve against url_prefix."""

    url_prefix: str
    owner_name: str
    repo_name: str


class PlainTextRenderer:
    """Renders plain text as HTML paragraphs with issue references linked."""

    def render(self, text: str, ctx: RenderContext) -> str:
        if text is None:
            raise RenderError("nothing to render")

        paragraphs = []
        for block in _BLANK_LINE.split(text.strip()):
            if not block.strip():
                continue
            escaped = html.escape(block.strip()).replace("\n", "<br>\n")
            paragraphs.append(f"<p>{self._link_issues(escaped, ctx)}</p>")
        return "\n".join(paragraphs)

    def _link_issues(self, text: str, ctx: RenderContext) -> str:
        return _ISSUE_REF.sub(
            lambda m: f'<a href="{ctx.url_prefix}/issues/{m.group(1)}">#{m.group(1)}</a>',
            text,
        )


class SanitizingRenderer:
    """Wraps another renderer and strips active content from its output."""

    def __init__(self, inner):
        self.inner = inner

    def render(self, text: str, ctx: RenderContext) -> str:
        return sanitize_html(self.inner.render(text, ctx))


def sanitize_html(content: str) -> str:
    """Remove script and style elements from an HTML fragment.

    Args:
        content: Rendered HTML

    Returns:
        The fragment without <script> and <style> elements
    """
    if not content:
        return ""

    if "<" not in content:
        return content

    soup = BeautifulSoup(content, "html.parser")
    found = soup(["script", "style"])
    if not found:
        return content

    for element in found:
        element.decompose()

    return str(soup)


def render_commit_message(message: str) -> str:
    """Render the summary line of a commit message as escaped HTML."""
    summary = message.strip().split("\n", 1)[0] if message else ""
    return html.escape(summary.strip())
