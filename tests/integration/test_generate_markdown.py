"""Integration tests for Markdown generation from the sample model."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest
import yaml

from apidocs.config.settings import GeneratorSettings, load_settings
from apidocs.generators.markdown import MarkdownWriter
from apidocs.generators.writer import generate_files


@pytest.fixture
def settings(config_dir: Path) -> GeneratorSettings:
    return load_settings(config_dir=config_dir, build_operations=True)


@pytest.fixture
def writer(settings: GeneratorSettings, generated_at: datetime) -> MarkdownWriter:
    return generate_files("markdown", settings, generated_at=generated_at)


class TestMarkdownToc:
    """Tests for the accumulated table of contents."""

    def test_section_order(self, writer: MarkdownWriter) -> None:
        assert [s.title for s in writer.toc.sections] == [
            "Overview",
            "API Groups",
            "WORKLOADS APIS",
            "Deployment (apps/v1)",
            "Pod (core/v1)",
            "DEFINITIONS",
            "Old API Versions",
            "Deployment (apps/v1beta1)",
        ]

    def test_title_and_copyright(self, writer: MarkdownWriter) -> None:
        assert writer.toc.title == "Kubernetes API Reference Docs"
        assert writer.toc.copyright.startswith("[Copyright 2016-2024 The Kubernetes Authors]")

    def test_definitions_are_subsections(self, writer: MarkdownWriter) -> None:
        definitions = writer.toc.sections[5]
        assert [s.link for s in definitions.subsections] == [
            "deploymentstatus-v1-apps",
            "objectmeta-v1-meta",
            "podtemplatespec-v1-core",
        ]
        assert all(s.level == 2 for s in definitions.subsections)

    def test_operation_categories(self, writer: MarkdownWriter) -> None:
        deployment = writer.toc.sections[3]
        assert [(c.title, c.link) for c in deployment.subsections] == [
            ("Write Operations", "write-operations-deployment-v1-apps"),
            ("Read Operations", "read-operations-deployment-v1-apps"),
        ]
        create = deployment.subsections[0].subsections[0]
        assert (create.title, create.link, create.file) == (
            "Create",
            "create-deployment-v1-apps",
            "",
        )

    def test_toc_yaml(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        toc = yaml.safe_load((settings.build_dir / "toc.yaml").read_text())
        assert toc["title"] == writer.toc.title
        assert toc["sections"][0] == {
            "level": 1,
            "title": "Overview",
            "link": "overview",
            "file": "overview.md",
        }
        assert len(toc["sections"]) == 8


class TestMarkdownFiles:
    """Tests for the generated pages."""

    def test_static_sections(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        build = settings.build_dir
        assert (build / "overview.md").read_text().startswith("## Overview\n\nHand-written")
        assert "Workloads are objects" in (build / "workloads.md").read_text()
        assert (build / "definitions.md").read_text() == "## Definitions\n\n"
        assert (build / "oldversions.md").read_text() == "## Old Versions\n\n"

    def test_index(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        index = (settings.build_dir / "_index.md").read_text()
        assert "Generated at 2024-01-02 03:04:05 (UTC) for release 1.29." in index

    def test_group_versions(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        content = (settings.build_dir / "group_versions.md").read_text()
        assert "weight: 20" in content
        rows = [line for line in content.splitlines() if line.startswith("<TR><TD>")]
        assert rows == [
            "<TR><TD><CODE>core</CODE></TD><TD><CODE>v1</CODE></TD></TR>",
            "<TR><TD><CODE>apps</CODE></TD><TD><CODE>v1, v1beta1</CODE></TD></TR>",
            "<TR><TD><CODE>meta</CODE></TD><TD><CODE>v1</CODE></TD></TR>",
        ]

    def test_resource_page(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        content = (settings.build_dir / "resources" / "deployment-v1-apps.md").read_text()

        assert content.startswith("## Deployment (apps/v1) {#deployment-v1-apps}\n")
        assert ">kubectl Deployment Config to run 3 nginx instances" in content
        assert "```yaml\napiVersion: apps/v1\nkind: Deployment\n```" in content
        assert "`apps` | `v1` | `Deployment`" in content
        assert '<aside class="notice">Deployments manage ReplicaSets.</aside>' in content
        assert "- [Deployment apps/v1beta1](#deployment-v1beta1-apps)" in content
        assert "`metadata`<br /> *[ObjectMeta](#objectmeta-v1-meta)*" in content
        assert "### DeploymentSpec (apps/v1) {#deploymentspec-v1-apps}" in content
        assert "**patch strategy**: *retainKeys*" in content

    def test_operations(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        content = (settings.build_dir / "resources" / "deployment-v1-apps.md").read_text()

        assert "## Write Operations {#write-operations-deployment-v1-apps}" in content
        assert "### Create {#create-deployment-v1-apps}" in content
        assert "`curl` command (*requires `kubectl proxy` to be running*)" in content
        assert "`kubectl` command\n\n```shell\n$ kubectl create -f deployment.yaml" in content
        assert "`POST /apis/apps/v1/namespaces/{namespace}/deployments`" in content
        assert "##### Path Parameters" in content
        assert "##### Query Parameters" in content
        assert "Misc Operations" not in content
        assert content.index("<TR><TD>200") < content.index("<TR><TD>201")

    def test_definition_page(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        content = (settings.build_dir / "definitions" / "objectmeta-v1-meta.md").read_text()
        assert content.startswith("## ObjectMeta (meta/v1) {#objectmeta-v1-meta}\n")
        assert "### Appears In:" in content
        assert "- [PodTemplateSpec core/v1](#podtemplatespec-v1-core)" in content
        assert "Map of string keys and values, e.g. &lt;key&gt;=&lt;value&gt;." in content

    def test_old_version_page(self, writer: MarkdownWriter, settings: GeneratorSettings) -> None:
        content = (settings.build_dir / "resources" / "deployment-v1beta1-apps.md").read_text()
        assert content.startswith("## Deployment (apps/v1beta1) {#deployment-v1beta1-apps}\n")
        assert "- [Deployment apps/v1](#deployment-v1-apps)" in content


class TestMarkdownEdgeCases:
    """Tests for missing inputs and disabled operations."""

    def test_missing_definition_skipped(
        self,
        settings: GeneratorSettings,
        generated_at: datetime,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING):
            writer = generate_files("markdown", settings, generated_at=generated_at)

        assert "Missing definition for item in TOC CronTab" in caplog.text
        assert "CronTab" not in [s.title for s in writer.toc.sections]

    def test_operations_disabled(self, config_dir: Path, generated_at: datetime) -> None:
        settings = load_settings(config_dir=config_dir)
        writer = generate_files("markdown", settings, generated_at=generated_at)

        assert writer.toc.title == "Kubernetes Resource Reference Docs"
        assert writer.toc.sections[3].subsections == []
        content = (settings.build_dir / "resources" / "deployment-v1-apps.md").read_text()
        assert "#### HTTP Request" not in content

    def test_missing_index_template(
        self,
        settings: GeneratorSettings,
        generated_at: datetime,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (settings.sections_dir / "index.md").unlink()
        with caplog.at_level(logging.WARNING):
            generate_files("markdown", settings, generated_at=generated_at)

        assert (settings.build_dir / "_index.md").read_text() == ""
        assert "Not found" in caplog.text
