"""Integration tests for single-page HTML generation."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

import pytest

from apidocs.config.settings import GeneratorSettings, load_settings
from apidocs.generators.html import HTMLWriter
from apidocs.generators.writer import generate_files


@pytest.fixture
def settings(config_dir: Path) -> GeneratorSettings:
    return load_settings(config_dir=config_dir, build_operations=True)


@pytest.fixture
def writer(settings: GeneratorSettings, generated_at: datetime) -> HTMLWriter:
    return generate_files("html", settings, generated_at=generated_at)


def read_nav_data(settings: GeneratorSettings) -> dict:
    content = (settings.build_dir / "navData.js").read_text()
    prefix, suffix = "(function(){navData = ", ";})();\n"
    assert content.startswith(prefix)
    assert content.endswith(suffix)
    return json.loads(content[len(prefix) : -len(suffix)])


class TestHtmlFragments:
    """Tests for the per-entity include files."""

    def test_include_files(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        includes = settings.includes_dir
        for name in (
            "_overview.html",
            "_group_versions.html",
            "workloads.html",
            "_generated_deployment_v1_apps_concept.html",
            "_generated_pod_v1_core_concept.html",
            "_definitions.html",
            "_generated_objectmeta_v1_meta_definition.html",
            "_oldversions.html",
            "_generated_deployment_v1beta1_apps_concept.html",
        ):
            assert (includes / name).is_file(), name

    def test_default_static_sections(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        overview = (settings.includes_dir / "_overview.html").read_text()
        assert overview == '<H1 id="-strong-overview-strong-">Overview</H1>\n'
        workloads = (settings.includes_dir / "workloads.html").read_text()
        assert workloads == '<H1 id="-strong-workloads-apis-strong-">Workloads APIs</H1>\n'

    def test_resource_fragment(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        content = (
            settings.includes_dir / "_generated_deployment_v1_apps_concept.html"
        ).read_text()

        assert content.startswith('<H1 id="deployment-v1-apps">Deployment v1 apps</H1>\n')
        assert 'data-target="#kubectl-deployment-v1-apps"' in content
        assert '<CODE class="lang-yaml">' in content
        assert '<A href="#deployment-v1beta1-apps">v1beta1</A>' in content
        assert '<a href="#objectmeta-v1-meta">ObjectMeta</a>' in content
        assert '<H3 id="deploymentspec-v1-apps">DeploymentSpec v1 apps</H3>' in content
        assert "<B>patch merge key</B>: <I>name</I>" in content

    def test_warning_and_escaping(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        content = (settings.includes_dir / "_generated_pod_v1_core_concept.html").read_text()
        assert "<B>Warning:</B>" in content
        assert "Pods are usually created through controllers." in content

        create = (
            settings.includes_dir / "_generated_deployment_v1_apps_concept.html"
        ).read_text()
        assert "&#x27;Content-Type: application/yaml&#x27;" in create

    def test_operations(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        content = (
            settings.includes_dir / "_generated_deployment_v1_apps_concept.html"
        ).read_text()

        assert '<H2 id="-strong-write-operations-deployment-v1-apps-strong-">' in content
        assert '<H2 id="create-deployment-v1-apps">Create</H2>' in content
        assert 'data-target="#req-curl-create-deployment-v1-apps"' in content
        assert "<CODE>kubectl</CODE> command" in content
        assert "<CODE>POST /apis/apps/v1/namespaces/{namespace}/deployments</CODE>" in content
        assert "<H3>Body Parameters</H3>" in content

    def test_appears_in(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        content = (
            settings.includes_dir / "_generated_objectmeta_v1_meta_definition.html"
        ).read_text()
        assert '<H2 id="objectmeta-v1-meta">ObjectMeta v1 meta</H2>' in content
        assert '<LI><A href="#deployment-v1beta1-apps">Deployment [apps/v1beta1]</A></LI>' in content


class TestHtmlPage:
    """Tests for the assembled page and navigation data."""

    def test_index_contains_fragments_in_order(
        self, writer: HTMLWriter, settings: GeneratorSettings
    ) -> None:
        page = (settings.build_dir / "index.html").read_text()

        assert "<TITLE>Kubernetes API Reference Docs</TITLE>" in page
        overview = page.index('<H1 id="-strong-overview-strong-">')
        deployment = page.index('<H1 id="deployment-v1-apps">')
        definitions = page.index('<H2 id="objectmeta-v1-meta">')
        old = page.index('<H1 id="deployment-v1beta1-apps">')
        assert overview < deployment < definitions < old

    def test_navigation(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        page = (settings.build_dir / "index.html").read_text()

        assert '<LI class="nav-level-1 strong-nav"><A href="#-strong-overview-strong-"' in page
        assert '<UL id="deployment-v1-apps-nav" style="display: none;">' in page
        assert '<LI class="nav-level-3"><A href="#create-deployment-v1-apps"' in page
        assert "Copyright 2016-2024 The Kubernetes Authors.</a>" in page
        assert "Generated at 2024-01-02 03:04:05 (UTC)" in page

    def test_nav_data(self, writer: HTMLWriter, settings: GeneratorSettings) -> None:
        data = read_nav_data(settings)

        assert [s["section"] for s in data["toc"]][:3] == [
            "-strong-overview-strong-",
            "-strong-api-groups-strong-",
            "-strong-workloads-apis-strong-",
        ]
        deployment = data["toc"][3]
        assert deployment["section"] == "deployment-v1-apps"
        assert deployment["subsections"][0]["subsections"] == [
            {"section": "create-deployment-v1-apps", "subsections": []}
        ]
        assert data["flatToc"][0] == "deployment-v1beta1-apps"
        assert data["flatToc"][-1] == "-strong-overview-strong-"
        assert len(data["flatToc"]) == len(list(writer.toc.iter_items()))

    def test_missing_include_skipped(
        self,
        writer: HTMLWriter,
        settings: GeneratorSettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (settings.includes_dir / "_definitions.html").unlink()
        with caplog.at_level(logging.WARNING, logger="apidocs.generators.html"):
            writer.finalize()

        assert "Collecting _definitions.html ... Not found" in caplog.text
        page = (settings.build_dir / "index.html").read_text()
        assert '<H1 id="-strong-definitions-strong-">' not in page
        assert '<H2 id="objectmeta-v1-meta">' in page
