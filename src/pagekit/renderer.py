"""
Page renderer.

Turns a parsed page source into a standalone HTML document.

Architecture:
    ```
    SourceDocument (metadata, body)
           │
           ├──► PageMetadata.from_mapping()
           │
           ▼
    placeholders protected ──► mistune ──► placeholders restored
           │
           ▼
    Jinja2 substitution ({{ current_page.data.title }} etc.)
           │
           ▼
    layout.html ──► RenderedPage.html
    ```

Placeholders are lifted out of the Markdown before conversion so that
Markdown escaping never touches template expressions, then put back and
evaluated against the page metadata with autoescaping on.

Tags:
    renderer, template, jinja2, markdown
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from jinja2 import (
    ChainableUndefined,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)
from markupsafe import Markup

from pagekit import frontmatter
from pagekit.errors import MetadataError, ReviewIntervalError, TemplateRenderError
from pagekit.frontmatter import SourceDocument
from pagekit.markup import render_markdown
from pagekit.metadata import PageMetadata

PACKAGED_TEMPLATES = Path(__file__).parent / "templates"

_PLACEHOLDER_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}|\{#.*?#\}", re.DOTALL)
_TOKEN = "PAGEKITPLACEHOLDER{index}X"
_TOKEN_RE = re.compile(r"PAGEKITPLACEHOLDER(\d+)X")


@dataclass
class RenderedPage:
    """Result of rendering one page."""

    html: str
    body_html: str
    metadata: PageMetadata
    source_path: Path | None = None

    @property
    def title(self) -> str:
        return self.metadata.title


class CurrentPage:
    """Template-facing view of the page being rendered.

    Exposes ``current_page.data.<key>`` for front-matter values.
    """

    def __init__(self, metadata: PageMetadata, source_path: Path | None = None):
        self.data = metadata.data
        self.metadata = metadata
        self.path = source_path.as_posix() if source_path else ""


def review_date(value: Any) -> str:
    """Jinja2 filter: ``2026-10-16`` -> ``16 October 2026``."""
    if not value:
        return ""
    if isinstance(value, date):
        return f"{value.day} {value:%B %Y}"
    return str(value)


def slack_channel(value: Any) -> str:
    """Jinja2 filter: normalise a Slack channel to ``#name``."""
    if not value:
        return ""
    value = str(value).strip()
    return value if value.startswith("#") else f"#{value}"


class PageRenderer:
    """
    Render page sources into HTML documents.

    Features:
        - Jinja2 environment with packaged templates as fallback
        - Placeholder substitution against front-matter metadata
        - Missing metadata renders empty rather than failing
        - Custom filters: ``review_date``, ``slack_channel``

    Examples:
        >>> renderer = PageRenderer()
        >>> page = renderer.render_text("---\\ntitle: Python\\n---\\n# {{ current_page.data.title }}\\n")
        >>> "<h1>Python</h1>" in page.body_html
        True
    """

    def __init__(
        self,
        template_dir: Path | str | None = None,
        layout: str = "layout.html",
        warn_within_days: int = 30,
    ):
        """Initialize the renderer.

        Args:
            template_dir: Directory whose templates override the packaged ones
            layout: Layout template wrapping each page
            warn_within_days: Window used for the review status shown in the layout
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self.layout = layout
        self.warn_within_days = warn_within_days

        loaders = []
        if self.template_dir is not None:
            loaders.append(FileSystemLoader(str(self.template_dir)))
        loaders.append(FileSystemLoader(str(PACKAGED_TEMPLATES)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"], default_for_string=True),
            undefined=ChainableUndefined,
            keep_trailing_newline=True,
        )

        self.env.filters["review_date"] = review_date
        self.env.filters["slack_channel"] = slack_channel

    def _context(self, metadata: PageMetadata, source_path: Path | None) -> dict[str, Any]:
        return {
            "current_page": CurrentPage(metadata, source_path),
            "page": metadata,
        }

    def check_syntax(self, body: str, source_path: Path | None = None, first_line: int = 1) -> None:
        """Fail early on placeholder syntax errors, reporting the source line."""
        try:
            self.env.parse(body)
        except TemplateSyntaxError as e:
            line = first_line + (e.lineno or 1) - 1
            raise TemplateRenderError(
                f"Invalid placeholder syntax: {e.message}", cause=e
            ).with_context(
                source_path=str(source_path) if source_path else None, line=line
            ) from e

    def markdown_to_html(self, body: str) -> str:
        """Convert a Markdown body to HTML, leaving placeholders intact."""
        placeholders: list[str] = []

        def _protect(match: re.Match) -> str:
            placeholders.append(match.group(0))
            return _TOKEN.format(index=len(placeholders) - 1)

        protected = _PLACEHOLDER_RE.sub(_protect, body)
        html = str(render_markdown(protected))
        return _TOKEN_RE.sub(lambda m: placeholders[int(m.group(1))], html)

    def substitute(
        self,
        html: str,
        metadata: PageMetadata,
        source_path: Path | None = None,
    ) -> str:
        """Replace placeholders in ``html`` with metadata values.

        Undefined names render as the empty string; values are HTML-escaped.
        """
        try:
            template = self.env.from_string(html)
            return template.render(**self._context(metadata, source_path))
        except TemplateError as e:
            raise TemplateRenderError(
                f"Placeholder substitution failed: {e}", cause=e
            ).with_context(source_path=str(source_path) if source_path else None) from e
        except Exception as e:
            raise TemplateRenderError(
                f"Placeholder raised {type(e).__name__}: {e}", cause=e
            ).with_context(source_path=str(source_path) if source_path else None) from e

    def wrap(
        self,
        body_html: str,
        metadata: PageMetadata,
        source_path: Path | None = None,
    ) -> str:
        """Wrap rendered body HTML in the layout template."""
        try:
            template = self.env.get_template(self.layout)
        except TemplateNotFound as e:
            raise TemplateRenderError(f"Layout template not found: {self.layout}", cause=e) from e

        try:
            status = metadata.review_status(warn_within_days=self.warn_within_days)
        except ReviewIntervalError:
            # reported by `pagekit check`
            status = None

        try:
            return template.render(
                content=Markup(body_html),
                review=status,
                **self._context(metadata, source_path),
            )
        except TemplateError as e:
            raise TemplateRenderError(
                f"Layout rendering failed: {e}", cause=e
            ).with_context(source_path=str(source_path) if source_path else None) from e
        except Exception as e:
            raise TemplateRenderError(
                f"Layout raised {type(e).__name__}: {e}", cause=e
            ).with_context(source_path=str(source_path) if source_path else None) from e

    def render(self, document: SourceDocument) -> RenderedPage:
        """Render a parsed page source."""
        path = document.path
        try:
            metadata = PageMetadata.from_mapping(document.metadata)
        except MetadataError as e:
            raise e.with_context(source_path=str(path) if path else None)

        self.check_syntax(document.body, path, document.body_line)
        body_html = self.substitute(self.markdown_to_html(document.body), metadata, path)
        html = self.wrap(body_html, metadata, path)
        return RenderedPage(html=html, body_html=body_html, metadata=metadata, source_path=path)

    def render_text(self, text: str, path: Path | str | None = None) -> RenderedPage:
        """Parse and render a page source given as text."""
        return self.render(frontmatter.parse(text, path))

    def render_file(self, path: Path | str) -> RenderedPage:
        """Read, parse and render a page source from disk."""
        return self.render(frontmatter.read(path))


__all__ = [
    "PACKAGED_TEMPLATES",
    "CurrentPage",
    "PageRenderer",
    "RenderedPage",
    "review_date",
    "slack_channel",
]
