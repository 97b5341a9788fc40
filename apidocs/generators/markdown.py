"""Markdown writer producing Hugo-style pages under the build directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import yaml

from apidocs.api.model import (
    Definition,
    ExampleText,
    Field,
    GroupVersions,
    Operation,
    OperationCategory,
    Resource,
)
from apidocs.generators.templating import substitute_placeholders
from apidocs.generators.toc import TOCItem
from apidocs.generators.writer import DocWriter, get_link

logger = logging.getLogger(__name__)

GVK_HEADER = "Group        | Version    | Kind\n------------ | ---------- | -----------\n"
FIELDS_HEADER = "Field        | Description\n------------ | -----------\n"


def _cell(text: str) -> str:
    """Make text safe for a single Markdown table cell."""
    return text.replace("|", "\\|").replace("\n", " ").strip()


class MarkdownWriter(DocWriter):
    """Writes one Markdown page per resource and definition."""

    @property
    def output_dir(self) -> Path:
        return self.settings.build_dir

    def extension(self) -> str:
        return ".md"

    def default_static_content(self, title: str) -> str:
        return f"## {title}\n\n"

    def write_overview(self) -> None:
        fn = "overview.md"
        self.write_static("Overview", fn)
        self.add_section(TOCItem(level=1, title="Overview", link="overview", file=fn))

    def write_api_group_versions(self, gvs: GroupVersions) -> None:
        fn = "group_versions.md"
        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write("---\ntitle: API Groups and Versions\nweight: 20\n---\n\n")
            f.write(
                "The API Groups and their versions are summarized in the following table.\n\n"
            )
            f.write(
                '<TABLE class="col-md-8">\n'
                "<THEAD><TR><TH>Group</TH><TH>Version</TH></TR></THEAD>\n<TBODY>\n"
            )
            for group, versions in gvs.items_sorted():
                f.write(
                    f"<TR><TD><CODE>{group}</CODE></TD>"
                    f"<TD><CODE>{', '.join(versions)}</CODE></TD></TR>\n"
                )
            f.write("</TBODY>\n</TABLE>\n\n")

        self.add_section(
            TOCItem(level=1, title="API Groups", link="api-groups", file=fn)
        )

    def write_resource_category(self, name: str, file: str) -> None:
        fn = file + self.extension()
        self.write_static(name, fn)
        self.add_section(
            TOCItem(level=1, title=name.upper(), link=get_link(name), file=fn)
        )

    def write_fields(self, out: TextIO, d: Definition) -> None:
        out.write(FIELDS_HEADER)
        for field in d.fields:
            out.write(f"`{field.name}`")
            if field.link():
                out.write(f"<br /> *{field.link()}*")
            if field.patch_strategy:
                out.write(f"<br /> **patch strategy**: *{field.patch_strategy}*")
            if field.patch_merge_key:
                out.write(f"<br /> **patch merge key**: *{field.patch_merge_key}*")
            out.write(f" | {_cell(field.description_with_entities)}\n")

    def write_other_versions(self, out: TextIO, d: Definition) -> None:
        if not d.other_versions:
            return
        out.write("### Other API versions:\n\n")
        for v in d.other_versions:
            out.write(f"- {v.md_link()}\n")
        out.write("\n")

    def write_appears_in(self, out: TextIO, d: Definition) -> None:
        if not d.appears_in:
            return
        out.write("### Appears In:\n\n")
        for a in d.appears_in:
            out.write(f"- {a.md_link()}\n")
        out.write("\n")

    def write_definitions_overview(self) -> None:
        fn = "definitions.md"
        self.write_static("Definitions", fn)
        self.add_section(
            TOCItem(level=1, title="DEFINITIONS", link="definitions", file=fn)
        )

    @staticmethod
    def entity_file(d: Definition) -> str:
        defname = d.name.lower().replace(".", "-")
        return f"{defname}-{d.version}-{d.group_display_name()}.md"

    def write_definition(self, d: Definition) -> None:
        fn = f"definitions/{self.entity_file(d)}"
        nvg = f"{d.name} ({d.group_display_name()}/{d.version})"
        link_id = d.link_id()

        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f"## {nvg} {{#{link_id}}}\n\n")
            f.write(GVK_HEADER)
            f.write(f"`{d.group_display_name()}` | `{d.version}` | `{d.name}`\n\n")
            f.write(f"\n{d.description_with_entities}\n\n")
            self.write_fields(f, d)
            f.write("\n")
            self.write_other_versions(f, d)
            self.write_appears_in(f, d)

        self.add_subsection(TOCItem(level=2, title=nvg, link=link_id, file=fn))

    def write_samples(self, out: TextIO, d: Definition) -> None:
        note = d.sample.note if d.sample else ""
        for t in d.get_samples():
            out.write(f">{t.example_type} {note}\n\n")
            out.write(f"```{t.lang}\n{t.text}\n```\n\n")

    def write_resource(self, resource: Resource) -> None:
        d = resource.definition
        fn = f"resources/{self.entity_file(d)}"
        dvg = f"{resource.name} ({d.group_display_name()}/{d.version})"
        link_id = d.link_id()

        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f"## {dvg} {{#{link_id}}}\n\n")
            self.write_samples(f, d)

            f.write(GVK_HEADER)
            f.write(f"`{d.group_display_name()}` | `{d.version}` | `{resource.name}`\n\n")

            if resource.description_warning:
                f.write(
                    f'<aside class="warning">{resource.description_warning}</aside>\n\n'
                )
            if resource.description_note:
                f.write(f'<aside class="notice">{resource.description_note}</aside>\n\n')

            self.write_other_versions(f, d)
            self.write_appears_in(f, d)
            self.write_fields(f, d)
            f.write("\n")

            for inline in d.inline:
                f.write(
                    f"### {inline.name} ({inline.group_display_name()}/{inline.version})"
                    f" {{#{inline.link_id()}}}\n\n"
                )
                self.write_appears_in(f, inline)
                self.write_fields(f, inline)
                f.write("\n")

            self.add_section(TOCItem(level=1, title=dvg, link=link_id, file=fn))
            self.write_operations(f, resource)

    def write_operation_category(
        self, out: TextIO, category: OperationCategory, category_id: str
    ) -> None:
        out.write(f"## {category.name} {{#{category_id}}}\n\n")

    def write_operation(self, out: TextIO, operation: Operation, operation_id: str) -> None:
        out.write(f"\n### {operation.type.name} {{#{operation_id}}}\n\n")

        requests = operation.get_example_requests()
        if requests:
            self.write_operation_sample(out, True, requests)
        responses = operation.get_example_responses()
        if responses:
            self.write_operation_sample(out, False, responses)

        out.write(f"{operation.description}\n")
        out.write(f"\n#### HTTP Request\n\n`{operation.get_display_http()}`\n\n")

        self.write_request_params(out, operation)
        self.write_response_params(out, operation)

    def write_operation_sample(
        self, out: TextIO, req: bool, examples: list[ExampleText]
    ) -> None:
        for e in examples:
            suffix = "request" if req else "response"
            out.write(f"**{e.example_type} {suffix} example**\n\n")
            msg = self.example_message(
                e,
                curl="`curl` command (*requires `kubectl proxy` to be running*)",
                kubectl="`kubectl` command",
            )
            if msg:
                out.write(f"{msg}\n\n")
            out.write(f"```{e.lang}\n{e.text}\n```\n\n")

    def write_params(self, out: TextIO, title: str, params: list[Field]) -> None:
        out.write(f"##### {title}\n\n")
        out.write(
            "<TABLE>\n<THEAD><TR><TH>Parameter</TH><TH>Description</TH></TR></THEAD>\n<TBODY>\n"
        )
        for p in params:
            out.write(f"<TR><TD><CODE>{p.name}</CODE>")
            if p.link():
                out.write(f"<br /><I>{p.full_link()}</I>")
            out.write(f"</TD><TD>{p.description_with_entities}</TD></TR>\n")
        out.write("</TBODY>\n</TABLE>\n\n")

    def write_request_params(self, out: TextIO, o: Operation) -> None:
        if o.path_params:
            self.write_params(out, "Path Parameters", o.path_params)
        if o.query_params:
            self.write_params(out, "Query Parameters", o.query_params)
        if o.body_params:
            self.write_params(out, "Body Parameters", o.body_params)

    def write_response_params(self, out: TextIO, o: Operation) -> None:
        if not o.http_responses:
            return

        out.write("#### Response\n\n")
        out.write(
            "<TABLE>\n<THEAD><TR><TH>Code</TH><TH>Description</TH></TR></THEAD>\n<TBODY>\n"
        )
        for r in o.sorted_responses():
            out.write(f"<TR><TD>{r.name}")
            if r.field.link():
                out.write(f"<br /><I>{r.field.full_link()}</I>")
            out.write(f"</TD><TD>{r.field.description_with_entities}</TD></TR>\n")
        out.write("</TBODY>\n</TABLE>\n\n")

    def write_old_versions_overview(self) -> None:
        fn = "oldversions.md"
        self.write_static("Old Versions", fn)
        self.add_section(
            TOCItem(level=1, title="Old API Versions", link="old-versions", file=fn)
        )

    def finalize(self) -> None:
        build_dir = self.settings.build_dir
        build_dir.mkdir(parents=True, exist_ok=True)

        index = self.settings.sections_dir / "index.md"
        if index.is_file():
            logger.info(f"Reading index template {index} ... OK")
            content = index.read_text(encoding="utf-8")
        else:
            logger.warning(f"Reading index template {index} ... Not found")
            content = ""

        content = substitute_placeholders(
            content,
            {"TIMESTAMP": self.timestamp(), "RELEASE": self.model.release()},
        )
        (build_dir / "_index.md").write_text(content, encoding="utf-8")

        (build_dir / "toc.yaml").write_text(
            yaml.safe_dump(self.toc.to_dict(), sort_keys=False), encoding="utf-8"
        )

        self.check_toc_files(build_dir)
