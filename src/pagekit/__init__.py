"""
pagekit - render front-matter documentation pages to HTML.

A page is a Markdown document with an optional YAML front-matter block.
Placeholders such as ``{{ current_page.data.title }}`` are filled from the
front matter and the result is wrapped in an HTML layout.

Example:
    >>> from pagekit import PageRenderer
    >>> page = PageRenderer().render_file("content/python.md")
    >>> page.title
    'Python style guide'
"""

__version__ = "0.1.0"

from pagekit.builder import BuildResult, PageReview, SiteBuilder
from pagekit.config import PagekitSettings, SiteConfig
from pagekit.errors import PagekitError
from pagekit.frontmatter import SourceDocument
from pagekit.metadata import PageMetadata, ReviewInterval, ReviewState, ReviewStatus
from pagekit.renderer import PageRenderer, RenderedPage

__all__ = [
    "BuildResult",
    "PageReview",
    "SiteBuilder",
    "PagekitSettings",
    "SiteConfig",
    "PagekitError",
    "SourceDocument",
    "PageMetadata",
    "ReviewInterval",
    "ReviewState",
    "ReviewStatus",
    "PageRenderer",
    "RenderedPage",
    "__version__",
]
