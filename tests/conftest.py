"""Pytest configuration and shared fixtures."""

import shutil
from datetime import date
from pathlib import Path

import pytest
import structlog

from pagekit.config import SiteConfig
from pagekit.renderer import PageRenderer


@pytest.fixture(scope="session")
def project_root():
    """Root directory of the repository."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def fixtures_path():
    """Path to test fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def pages_dir(fixtures_path):
    """Directory of sample page sources."""
    return fixtures_path / "pages"


@pytest.fixture
def source_dir(pages_dir, tmp_path):
    """Writable copy of the sample pages."""
    target = tmp_path / "content"
    shutil.copytree(pages_dir, target)
    return target


@pytest.fixture
def site_config(source_dir, tmp_path):
    """Site configuration over the copied sample pages."""
    return SiteConfig(source_dir=source_dir, output_dir=tmp_path / "build")


@pytest.fixture
def renderer():
    return PageRenderer()


@pytest.fixture
def today():
    """Fixed 'today' so review arithmetic is deterministic."""
    return date(2026, 10, 16)


@pytest.fixture
def style_guide_source():
    """Page source with all four recognised front-matter keys."""
    return (
        "---\n"
        "title: Python style guide\n"
        "last_reviewed_on: 2026-04-02\n"
        "review_in: 6 months\n"
        'owner_slack: "#python-community"\n'
        "---\n"
        "# {{ current_page.data.title }}\n"
        "\n"
        "Use Black for formatting.\n"
    )


@pytest.fixture(autouse=True)
def reset_structlog():
    """CLI tests configure structlog against CliRunner streams; undo that."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
