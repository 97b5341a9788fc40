"""Unit tests for template rendering."""

from __future__ import annotations

import pytest

from apidocs.generators.templating import (
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateRenderer,
    substitute_placeholders,
)
from apidocs.generators.toc import TOCItem


class TestTemplateRenderer:
    """Tests for the packaged templates."""

    def test_render_html_page(self) -> None:
        child = TOCItem(level=2, title="Create", link="create-pod-v1-core")
        section = TOCItem(level=1, title="Pod v1 core", link="pod-v1-core", subsections=[child])
        overview = TOCItem(level=1, title="Overview", link="-strong-overview-strong-")

        page = TemplateRenderer().render(
            "index.html.j2",
            {
                "title": "Docs <beta>",
                "copyright": "(c)",
                "sections": [overview, section],
                "content": "<H1>Body</H1>",
                "timestamp": "2024-01-02",
            },
        )

        assert "<TITLE>Docs &lt;beta&gt;</TITLE>" in page
        assert '<LI class="nav-level-1 strong-nav">' in page
        assert "<STRONG>Overview</STRONG>" in page
        assert '<UL id="pod-v1-core-nav" style="display: none;">' in page
        assert '<LI class="nav-level-2"><A href="#create-pod-v1-core"' in page
        assert "<H1>Body</H1>" in page
        assert "Generated at 2024-01-02" in page

    def test_render_tex_document(self) -> None:
        document = TemplateRenderer(tex=True).render(
            "main.tex.j2",
            {
                "title": "Docs",
                "author": "Team",
                "copyright": r"\href{https://example.com}{Copyright}",
                "static_prefix": "static_includes",
                "includes": ["includes/_overview", "includes/_definitions"],
            },
        )

        assert r"\include{static_includes/package}" in document
        assert r"\date{\href{https://example.com}{Copyright}}" in document
        assert "\\include{includes/_overview}\n\\include{includes/_definitions}\n" in document
        assert "BLOCK" not in document

    def test_missing_template(self) -> None:
        with pytest.raises(TemplateNotFoundError):
            TemplateRenderer().render("missing.j2", {})

    def test_missing_variable(self) -> None:
        with pytest.raises(TemplateRenderError, match="Missing variable"):
            TemplateRenderer().render("index.html.j2", {"title": "Docs"})


def test_substitute_placeholders() -> None:
    content = "Generated TIMESTAMP for RELEASE and RELEASE"
    result = substitute_placeholders(content, {"TIMESTAMP": "now", "RELEASE": "1.29"})
    assert result == "Generated now for 1.29 and 1.29"
    assert substitute_placeholders("plain", {"RELEASE": "1.29"}) == "plain"
