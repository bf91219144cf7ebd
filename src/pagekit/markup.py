"""
Markdown rendering for page bodies.
"""

from __future__ import annotations

import mistune
from markupsafe import Markup

# escape=True: raw HTML in a page source is shown, not injected
_markdown = mistune.create_markdown(
    escape=True,
    plugins=["strikethrough", "table", "url"],
)


def render_markdown(text: str | None) -> Markup:
    """Convert Markdown text to HTML.

    Args:
        text: Markdown source of a page body

    Returns:
        Safe HTML markup, so Jinja2 does not escape it a second time
    """
    if not text:
        return Markup("")
    return Markup(_markdown(text))


__all__ = ["render_markdown"]
