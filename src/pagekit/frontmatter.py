"""
Front-matter parsing.

A page source optionally starts with a YAML block fenced by ``---`` lines::

    ---
    title: Python style guide
    last_reviewed_on: 2026-04-02
    review_in: 6 months
    owner_slack: "#python-community"
    ---
    # {{ current_page.data.title }}

The block is closed by the next ``---`` (or ``...``) line. Everything after
it is the Markdown body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pagekit.errors import FrontMatterError, PageNotFoundError

FENCE = "---"
CLOSING_FENCES = ("---", "...")


@dataclass
class SourceDocument:
    """A page source split into front matter and body."""

    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    path: Path | None = None
    # 1-based line of the first body line in the original source
    body_line: int = 1

    @property
    def has_front_matter(self) -> bool:
        return self.body_line > 1


def _normalise(text: str) -> str:
    if text.startswith("\ufeff"):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _load_block(block: str, path: Path | None) -> dict[str, Any]:
    try:
        data = yaml.safe_load(block)
    except (yaml.YAMLError, ValueError) as e:
        # ValueError: date-shaped scalars that are not real dates (2026-02-30)
        err = FrontMatterError(f"Invalid front matter: {e}", cause=e)
        mark = getattr(e, "problem_mark", None)
        # +2: yaml marks are 0-based and the block starts after the fence
        line = mark.line + 2 if mark is not None else None
        raise err.with_context(source_path=str(path) if path else None, line=line) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"Front matter must be a mapping, got {type(data).__name__}"
        ).with_context(source_path=str(path) if path else None, line=1)

    for key in data:
        if not isinstance(key, str):
            raise FrontMatterError(
                f"Front matter keys must be strings, got {key!r}"
            ).with_context(source_path=str(path) if path else None, line=1)
    return data


def split(text: str, path: Path | None = None) -> tuple[dict[str, Any], str]:
    """Split ``text`` into its front-matter mapping and body."""
    doc = parse(text, path)
    return doc.metadata, doc.body


def parse(text: str, path: Path | str | None = None) -> SourceDocument:
    """Parse a page source into a ``SourceDocument``.

    Raises:
        FrontMatterError: Unclosed block, invalid YAML, or a non-mapping block
    """
    path = Path(path) if path is not None else None
    text = _normalise(text)
    lines = text.split("\n")

    if not lines or lines[0] != FENCE:
        return SourceDocument(metadata={}, body=text, path=path, body_line=1)

    for index in range(1, len(lines)):
        if lines[index] in CLOSING_FENCES:
            block = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1:])
            metadata = _load_block(block, path)
            return SourceDocument(
                metadata=metadata,
                body=body,
                path=path,
                body_line=index + 2,
            )

    raise FrontMatterError("Front matter block is not closed").with_context(
        source_path=str(path) if path else None, line=1
    )


def read(path: Path | str) -> SourceDocument:
    """Read and parse a page source from disk."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise PageNotFoundError(f"Page not found: {path}", cause=e) from e
    except (OSError, UnicodeDecodeError) as e:
        raise PageNotFoundError(f"Cannot read page {path}: {e}", cause=e) from e
    return parse(text, path)


__all__ = ["SourceDocument", "split", "parse", "read"]
