"""
Site builder.

Coordinates rendering of a directory of pages: discovery, rendering,
writing output files, and the review/validation reports built on the same
page set.

Example:
    >>> builder = SiteBuilder(SiteConfig(source_dir=Path("content")))
    >>> results = builder.build_all()
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Iterator

from pagekit import frontmatter
from pagekit.config import SiteConfig
from pagekit.errors import OutputError, PagekitError, PageNotFoundError
from pagekit.logging import LogContext, get_logger
from pagekit.metadata import PageMetadata, ReviewState, ReviewStatus
from pagekit.renderer import PageRenderer

logger = get_logger(__name__)


@dataclass
class BuildResult:
    """Outcome of building one page."""

    source: Path
    output: Path | None = None
    size: int = 0
    error: PagekitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PageReview:
    """Review standing of one page."""

    path: Path
    title: str
    owner_slack: str | None
    status: ReviewStatus
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path.as_posix(),
            "title": self.title,
            "owner_slack": self.owner_slack,
            **self.status.to_dict(),
            "error": self.error,
        }


# EXPIRED first, then DUE_SOON, OK, and finally pages without a schedule
_STATE_ORDER = {
    ReviewState.EXPIRED: 0,
    ReviewState.DUE_SOON: 1,
    ReviewState.OK: 2,
    ReviewState.UNKNOWN: 3,
}


class SiteBuilder:
    """Build every page under ``config.source_dir`` into ``config.output_dir``.

    Guardrails:
        - One broken page never stops the others; its error is recorded
          on its ``BuildResult``
        - The renderer (and its Jinja2 environment) is created once
    """

    def __init__(self, config: SiteConfig | None = None, renderer: PageRenderer | None = None):
        self.config = config or SiteConfig()
        self.renderer = renderer or PageRenderer(
            template_dir=self.config.template_dir,
            layout=self.config.layout,
            warn_within_days=self.config.warn_within_days,
        )

    def discover(self) -> list[Path]:
        """Page sources under the source directory, sorted."""
        source_dir = self.config.source_dir
        if not source_dir.is_dir():
            raise PageNotFoundError(f"Source directory not found: {source_dir}")

        found: set[Path] = set()
        for pattern in self.config.patterns:
            for path in source_dir.rglob(pattern):
                if not path.is_file():
                    continue
                if self.config.should_skip(path.relative_to(source_dir)):
                    continue
                found.add(path)
        return sorted(found)

    def output_path_for(self, source: Path) -> Path:
        """``<source_dir>/a/b.md`` -> ``<output_dir>/a/b.html``."""
        try:
            relative = source.relative_to(self.config.source_dir)
        except ValueError:
            relative = Path(source.name)
        return self.config.output_dir / relative.with_suffix(".html")

    def build_page(self, source: Path | str) -> BuildResult:
        """Render one page and write it; errors are captured on the result."""
        source = Path(source)
        result = BuildResult(source=source)

        with LogContext(page=source.as_posix()):
            try:
                rendered = self.renderer.render_file(source)
                output = self.output_path_for(source)
                try:
                    output.parent.mkdir(parents=True, exist_ok=True)
                    output.write_text(rendered.html, encoding="utf-8")
                except OSError as e:
                    raise OutputError(f"Cannot write {output}: {e}", cause=e) from e
            except PagekitError as e:
                result.error = e
                logger.warning("page_failed", **e.to_dict())
                return result

            result.output = output
            result.size = len(rendered.html.encode("utf-8"))
            logger.info("page_rendered", output=output.as_posix(), size=result.size)
        return result

    def build_all(self) -> list[BuildResult]:
        """Build every discovered page."""
        sources = self.discover()
        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        results = [self.build_page(source) for source in sources]

        failed = [r for r in results if not r.ok]
        logger.info(
            "build_finished",
            pages=len(results),
            failed=len(failed),
            total_bytes=sum(r.size for r in results),
        )
        return results

    def _iter_metadata(self) -> Iterator[tuple[Path, PageMetadata | None, PagekitError | None]]:
        for path in self.discover():
            try:
                document = frontmatter.read(path)
                metadata = PageMetadata.from_mapping(document.metadata)
            except PagekitError as e:
                if e.context.source_path is None:
                    e.with_context(source_path=str(path))
                yield path, None, e
                continue
            yield path, metadata, None

    def review_report(self, today: date | None = None) -> list[PageReview]:
        """Review standing of every page, most overdue first."""
        today = today or date.today()
        reviews: list[PageReview] = []

        for path, metadata, error in self._iter_metadata():
            if metadata is None:
                reviews.append(PageReview(
                    path=path,
                    title="",
                    owner_slack=None,
                    status=ReviewStatus(state=ReviewState.UNKNOWN),
                    error=str(error),
                ))
                continue
            try:
                status = metadata.review_status(today, self.config.warn_within_days)
                problem = None
            except PagekitError as e:
                status = ReviewStatus(state=ReviewState.UNKNOWN)
                problem = e.message
            reviews.append(PageReview(
                path=path,
                title=metadata.title,
                owner_slack=metadata.owner_slack,
                status=status,
                error=problem,
            ))

        reviews.sort(key=lambda r: (
            _STATE_ORDER[r.status.state],
            r.status.days_remaining if r.status.days_remaining is not None else 0,
            r.path.as_posix(),
        ))
        return reviews

    def check(
        self,
        required_keys: list[str] | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        """Validate front matter across all pages.

        Returns:
            Dict with ``valid``, ``issues`` and ``warnings``
        """
        required = self.config.required_keys if required_keys is None else required_keys
        today = today or date.today()
        issues: list[str] = []
        warnings: list[str] = []

        for path, metadata, error in self._iter_metadata():
            if metadata is None:
                issues.append(str(error))
                continue

            for key in metadata.missing(required):
                issues.append(f"{path}: missing front matter key '{key}'")

            try:
                status = metadata.review_status(today, self.config.warn_within_days)
            except PagekitError as e:
                issues.append(f"{path}: {e.message}")
                continue

            if status.is_expired:
                warnings.append(
                    f"{path}: review overdue since {status.review_by.isoformat()}"
                )

        return {
            "valid": len(issues) == 0,
            "issues": issues,
            "warnings": warnings,
        }


__all__ = ["BuildResult", "PageReview", "SiteBuilder"]
