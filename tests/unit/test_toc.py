"""Unit tests for the table of contents."""

from __future__ import annotations

from apidocs.generators.toc import TOC, TOCItem


def build_toc() -> TOC:
    toc = TOC(title="Docs", copyright="(c)")
    overview = TOCItem(level=1, title="Overview", link="overview", file="overview.md")
    resource = TOCItem(level=1, title="Pod", link="pod-v1-core", file="resources/pod.md")
    category = TOCItem(level=2, title="Read Operations", link="read-operations-pod-v1-core")
    category.subsections.append(TOCItem(level=2, title="Read", link="read-pod-v1-core"))
    resource.subsections.append(category)
    toc.sections.extend([overview, resource])
    return toc


def test_iter_items_document_order() -> None:
    items = [(depth, item.link) for depth, item in build_toc().iter_items()]
    assert items == [
        (0, "overview"),
        (0, "pod-v1-core"),
        (1, "read-operations-pod-v1-core"),
        (2, "read-pod-v1-core"),
    ]


def test_iter_files_skips_entries_without_file() -> None:
    assert list(build_toc().iter_files()) == [
        (0, "overview.md"),
        (0, "resources/pod.md"),
    ]


def test_to_dict_omits_empty_values() -> None:
    data = build_toc().to_dict()
    assert data["title"] == "Docs"
    assert data["sections"][0] == {
        "level": 1,
        "title": "Overview",
        "link": "overview",
        "file": "overview.md",
    }
    category = data["sections"][1]["subsections"][0]
    assert "file" not in category
    assert category["subsections"] == [
        {"level": 2, "title": "Read", "link": "read-pod-v1-core"}
    ]
