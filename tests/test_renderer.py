"""Tests for the page renderer."""

from datetime import date

import pytest

from pagekit.errors import ErrorCategory, MetadataError, TemplateRenderError
from pagekit.markup import render_markdown
from pagekit.metadata import PageMetadata
from pagekit.renderer import PageRenderer, review_date, slack_channel


class TestMarkdown:
    """Tests for Markdown conversion."""

    def test_heading(self):
        assert "<h1>Hello</h1>" in render_markdown("# Hello\n")

    def test_empty(self):
        assert render_markdown("") == ""
        assert render_markdown(None) == ""

    def test_raw_html_is_escaped(self):
        html = render_markdown("<script>alert(1)</script>\n")

        assert "<script>" not in html

    def test_table_plugin(self):
        html = render_markdown("| a | b |\n| --- | --- |\n| 1 | 2 |\n")

        assert "<table>" in html


class TestTitleSubstitution:
    """The rendered heading equals the title front-matter field."""

    def test_heading_is_title(self, renderer, style_guide_source):
        page = renderer.render_text(style_guide_source)

        assert "<h1>Python style guide</h1>" in page.body_html
        assert page.title == "Python style guide"

    def test_missing_title_renders_empty(self, renderer):
        page = renderer.render_text("---\nowner_slack: '#docs'\n---\n# {{ current_page.data.title }}\n")

        assert "<h1></h1>" in page.body_html
        assert "<title></title>" in page.html

    def test_no_front_matter_renders_empty(self, renderer):
        page = renderer.render_text("# {{ current_page.data.title }}\n\ntext\n")

        assert "<h1></h1>" in page.body_html

    def test_title_is_escaped(self, renderer):
        page = renderer.render_text("---\ntitle: Tips & <tricks>\n---\n# {{ current_page.data.title }}\n")

        assert "Tips &amp; &lt;tricks&gt;" in page.body_html
        assert "<tricks>" not in page.html

    def test_page_alias(self, renderer):
        page = renderer.render_text("---\ntitle: Alias\n---\n{{ page.title }}\n")

        assert "Alias" in page.body_html

    def test_extra_keys_available(self, renderer):
        page = renderer.render_text("---\nteam: devex\n---\nOwned by {{ current_page.data.team }}.\n")

        assert "Owned by devex." in page.body_html

    def test_undefined_names_render_empty(self, renderer):
        page = renderer.render_text("a{{ current_page.data.nothing.deeper }}b\n")

        assert "ab" in page.body_html

    def test_placeholder_survives_markdown_emphasis(self, renderer):
        page = renderer.render_text("---\nowner_slack: '#python_community'\n---\nAsk in {{ current_page.data.owner_slack }}\n")

        assert "#python_community" in page.body_html

    def test_substitute_directly(self, renderer):
        meta = PageMetadata.from_mapping({"title": "Direct"})

        assert renderer.substitute("<h1>{{ current_page.data.title }}</h1>", meta) == "<h1>Direct</h1>"


class TestLayout:
    """Tests for layout wrapping."""

    def test_document_structure(self, renderer, style_guide_source):
        page = renderer.render_text(style_guide_source)

        assert page.html.startswith("<!DOCTYPE html>")
        assert "<title>Python style guide</title>" in page.html
        assert page.body_html in page.html

    def test_footer_shows_review_dates(self, renderer, style_guide_source):
        page = renderer.render_text(style_guide_source)

        assert "last reviewed on 2 April 2026" in page.html
        assert "2 October 2026" in page.html
        assert "#python-community" in page.html

    def test_custom_template_dir_overrides_layout(self, tmp_path, style_guide_source):
        (tmp_path / "layout.html").write_text(
            "<custom>{{ current_page.data.title }}|{{ content }}</custom>", encoding="utf-8"
        )
        renderer = PageRenderer(template_dir=tmp_path)

        page = renderer.render_text(style_guide_source)

        assert page.html.startswith("<custom>Python style guide|")

    def test_missing_layout(self, style_guide_source):
        renderer = PageRenderer(layout="nope.html")

        with pytest.raises(TemplateRenderError, match="nope.html"):
            renderer.render_text(style_guide_source)


class TestRenderErrors:
    """Tests for error reporting."""

    def test_syntax_error_reports_source_line(self, renderer):
        text = "---\ntitle: A\n---\nline one\n\n{{ current_page.data.title "

        with pytest.raises(TemplateRenderError) as exc_info:
            renderer.render_text(text, "page.md")

        err = exc_info.value
        assert err.category == ErrorCategory.TEMPLATE
        assert err.context.source_path == "page.md"
        assert err.context.line == 6

    def test_invalid_metadata_names_page(self, renderer):
        with pytest.raises(MetadataError) as exc_info:
            renderer.render_text("---\nlast_reviewed_on: someday\n---\nbody\n", "page.md")

        assert exc_info.value.context.source_path == "page.md"

    @pytest.mark.parametrize("expression,cause", [
        ("current_page.data.title + 1", TypeError),
        ("1 // 0", ZeroDivisionError),
    ])
    def test_runtime_placeholder_error(self, renderer, expression, cause):
        text = "---\ntitle: A\n---\n{{ " + expression + " }}\n"

        with pytest.raises(TemplateRenderError) as exc_info:
            renderer.render_text(text, "page.md")

        err = exc_info.value
        assert err.category == ErrorCategory.TEMPLATE
        assert err.context.source_path == "page.md"
        assert isinstance(err.cause, cause)

    def test_bad_review_interval_still_renders(self, renderer):
        page = renderer.render_text("---\ntitle: A\nlast_reviewed_on: 2026-01-01\nreview_in: whenever\n---\n# {{ page.title }}\n")

        assert "<h1>A</h1>" in page.body_html


class TestRenderFile:
    """Tests for rendering sources from disk."""

    def test_fixture_page(self, renderer, pages_dir):
        page = renderer.render_file(pages_dir / "python.md")

        assert "<h1>Python style guide</h1>" in page.body_html
        assert "<h2>Pinning dependencies</h2>" in page.body_html
        assert page.source_path == pages_dir / "python.md"

    def test_shipped_style_guide(self, renderer, project_root):
        page = renderer.render_file(project_root / "content" / "python.md")

        assert "<h1>Python style guide</h1>" in page.body_html
        assert page.metadata.owner_slack == "#python-community"
        assert "{{" not in page.html


class TestFilters:
    def test_review_date(self):
        assert review_date(date(2026, 10, 6)) == "6 October 2026"
        assert review_date(None) == ""

    def test_slack_channel(self):
        assert slack_channel("python") == "#python"
        assert slack_channel("#python") == "#python"
        assert slack_channel(None) == ""
