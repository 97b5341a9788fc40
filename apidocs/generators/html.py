"""HTML writer: per-entity fragments assembled into a single page."""

from __future__ import annotations

import html
import json
import logging
from pathlib import Path
from typing import Any, TextIO

from apidocs.api.model import (
    Definition,
    ExampleText,
    Field,
    GroupVersions,
    Operation,
    OperationCategory,
    Resource,
)
from apidocs.generators.templating import TemplateRenderer
from apidocs.generators.toc import TOCItem
from apidocs.generators.writer import (
    DocWriter,
    concept_file_name,
    definition_file_name,
    get_link,
)

logger = logging.getLogger(__name__)


def strong(link: str) -> str:
    return f"-strong-{link}-strong-"


class HTMLWriter(DocWriter):
    """Writes HTML fragments into the includes directory.

    :meth:`finalize` concatenates the fragments in TOC order into
    ``index.html`` with a navigation sidebar built from the TOC.
    """

    COPYRIGHT_TEMPLATE = '<a href="{url}">{text}.</a>'

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.renderer = TemplateRenderer()

    @property
    def output_dir(self) -> Path:
        return self.settings.includes_dir

    def extension(self) -> str:
        return ".html"

    def default_static_content(self, title: str) -> str:
        return f'<H1 id="{strong(get_link(title))}">{html.escape(title)}</H1>\n'

    def section_link(self, link: str) -> str:
        return strong(link)

    def write_overview(self) -> None:
        fn = "_overview.html"
        self.write_static("Overview", fn)
        self.add_section(
            TOCItem(level=1, title="Overview", link=strong("overview"), file=fn)
        )

    def write_api_group_versions(self, gvs: GroupVersions) -> None:
        fn = "_group_versions.html"
        link = strong("api-groups")
        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f'<H1 id="{link}">API Groups</H1>\n')
            f.write(
                "<P>The API Groups and their versions are summarized in the following table.</P>\n"
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
            f.write("</TBODY>\n</TABLE>\n")

        self.add_section(TOCItem(level=1, title="API Groups", link=link, file=fn))

    def write_resource_category(self, name: str, file: str) -> None:
        fn = file + self.extension()
        self.write_static(name, fn)
        self.add_section(
            TOCItem(level=1, title=name.upper(), link=strong(get_link(name)), file=fn)
        )

    def write_other_versions(self, out: TextIO, d: Definition) -> None:
        if not d.other_versions:
            return
        out.write(
            '<DIV class="alert alert-success col-md-8">'
            '<I class="fa fa-toggle-right"></I> Other API versions of this object exist:\n'
        )
        links = []
        for v in d.other_versions:
            link, text = v.version_link_data()
            links.append(f'<A href="#{link}">{text}</A>')
        out.write(", ".join(links))
        out.write("\n</DIV>\n")

    def write_appears_in(self, out: TextIO, d: Definition) -> None:
        if not d.appears_in:
            return
        out.write(
            '<DIV class="alert alert-info col-md-8">'
            '<I class="fa fa-info-circle"></I> Appears In:\n <UL>\n'
        )
        for a in d.appears_in:
            link, text = a.full_href_link_data()
            out.write(f'  <LI><A href="#{link}">{text}</A></LI>\n')
        out.write(" </UL>\n</DIV>\n")

    def write_fields(self, out: TextIO, d: Definition) -> None:
        out.write("<TABLE>\n<THEAD><TR><TH>Field</TH><TH>Description</TH></TR></THEAD>\n<TBODY>\n")
        for field in d.fields:
            out.write(f"<TR><TD><CODE>{field.name}</CODE>")
            if field.link():
                out.write(f"<BR /><I>{field.full_link()}</I>")
            if field.patch_strategy:
                out.write(f"<BR /><B>patch strategy</B>: <I>{field.patch_strategy}</I>")
            if field.patch_merge_key:
                out.write(f"<BR /><B>patch merge key</B>: <I>{field.patch_merge_key}</I>")
            out.write(f"</TD><TD>{field.description_with_entities}</TD></TR>\n")
        out.write("</TBODY>\n</TABLE>\n")

    def write_gvk(self, out: TextIO, d: Definition, kind: str) -> None:
        out.write(
            '<TABLE class="col-md-8">\n'
            "<THEAD><TR><TH>Group</TH><TH>Version</TH><TH>Kind</TH></TR></THEAD>\n<TBODY>\n"
        )
        out.write(
            f"<TR><TD><CODE>{d.group_display_name()}</CODE></TD>"
            f"<TD><CODE>{d.version}</CODE></TD><TD><CODE>{kind}</CODE></TD></TR>\n"
        )
        out.write("</TBODY>\n</TABLE>\n")

    def write_definitions_overview(self) -> None:
        fn = "_definitions.html"
        self.write_static("Definitions", fn)
        self.add_section(
            TOCItem(level=1, title="DEFINITIONS", link=strong("definitions"), file=fn)
        )

    def write_definition(self, d: Definition) -> None:
        fn = "_" + definition_file_name(d) + self.extension()
        nvg = f"{d.name} {d.version} {d.group_display_name()}"
        link_id = d.link_id()

        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f'<H2 id="{link_id}">{nvg}</H2>\n')
            self.write_gvk(f, d, d.name)
            f.write(f"<P>{d.description_with_entities}</P>\n")
            self.write_other_versions(f, d)
            self.write_appears_in(f, d)
            self.write_fields(f, d)

        self.add_subsection(TOCItem(level=2, title=nvg, link=link_id, file=fn))

    def write_sample(self, out: TextIO, d: Definition) -> None:
        samples = d.get_samples()
        if not samples:
            return

        note = d.sample.note if d.sample else ""
        for s in samples:
            link_id = f"{s.example_type}-{d.link_id()}"
            out.write(
                '<BUTTON class="btn btn-info" type="button" data-toggle="collapse"\n'
                f'  data-target="#{link_id}" aria-controls="{link_id}"\n'
                f'  aria-expanded="false">{s.example_type} example</BUTTON>\n'
            )

        for s in samples:
            link_id = f"{s.example_type}-{d.link_id()}"
            self.write_collapse_panel(out, link_id, note, s)

    def write_collapse_panel(
        self, out: TextIO, panel_id: str, heading: str, example: ExampleText
    ) -> None:
        out.write(f'<DIV class="collapse" id="{panel_id}">\n')
        out.write(
            f'  <DIV class="panel panel-default">\n<DIV class="panel-heading">{heading}</DIV>\n'
        )
        out.write(f'  <DIV class="panel-body">\n<PRE class="{example.example_type}">')
        out.write(f'<CODE class="lang-{example.lang}">\n')
        out.write(f"{html.escape(example.text)}\n</CODE></PRE></DIV></DIV></DIV>\n")

    def write_resource(self, resource: Resource) -> None:
        d = resource.definition
        fn = "_" + concept_file_name(d) + self.extension()
        dvg = f"{resource.name} {d.version} {d.group_display_name()}"
        link_id = d.link_id()

        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f'<H1 id="{link_id}">{dvg}</H1>\n')
            self.write_sample(f, d)
            self.write_gvk(f, d, resource.name)

            if resource.description_warning:
                f.write(
                    '<DIV class="alert alert-warning col-md-8">'
                    '<P><I class="fa fa-warning"></I> <B>Warning:</B></P>'
                    f"<P>{resource.description_warning}</P></DIV>\n"
                )
            if resource.description_note:
                f.write(
                    '<DIV class="alert alert-info col-md-8">'
                    f'<I class="fa fa-bullhorn"></I> {resource.description_note}</DIV>\n'
                )

            self.write_other_versions(f, d)
            self.write_appears_in(f, d)
            self.write_fields(f, d)

            for inline in d.inline:
                f.write(
                    f'<H3 id="{inline.link_id()}">'
                    f"{inline.name} {inline.version} {inline.group_display_name()}</H3>\n"
                )
                self.write_appears_in(f, inline)
                self.write_fields(f, inline)

            self.add_section(TOCItem(level=1, title=dvg, link=link_id, file=fn))
            self.write_operations(f, resource)

    def write_operation_category(
        self, out: TextIO, category: OperationCategory, category_id: str
    ) -> None:
        out.write(f'<H2 id="{category_id}">{category.name}</H2>\n')

    def write_operation(self, out: TextIO, operation: Operation, operation_id: str) -> None:
        out.write(f'<H2 id="{operation_id}">{operation.type.name}</H2>\n')

        requests = operation.get_example_requests()
        if requests:
            self.write_operation_sample(out, True, operation_id, requests)
        responses = operation.get_example_responses()
        if responses:
            self.write_operation_sample(out, False, operation_id, responses)

        out.write(f"<P>{html.escape(operation.description)}</P>\n")
        out.write(f"<H3>HTTP Request</H3>\n<CODE>{operation.get_display_http()}</CODE>\n")

        self.write_request_params(out, operation)
        self.write_response_params(out, operation)

    def write_operation_sample(
        self, out: TextIO, req: bool, op: str, examples: list[ExampleText]
    ) -> None:
        prefix = "req" if req else "res"
        suffix = "request" if req else "response"

        for e in examples:
            sample_id = f"{prefix}-{e.example_type}-{op}"
            out.write(
                '<BUTTON class="btn btn-info" type="button" data-toggle="collapse"\n'
                f'  data-target="#{sample_id}" aria-controls="{sample_id}"\n'
                f'  aria-expanded="false">{e.example_type} {suffix} example</BUTTON>\n'
            )

        for e in examples:
            sample_id = f"{prefix}-{e.example_type}-{op}"
            msg = self.example_message(
                e,
                curl="<CODE>curl</CODE> command "
                "(<I>requires <CODE>kubectl proxy</CODE> to be running</I>)",
                kubectl="<CODE>kubectl</CODE> command",
            )
            self.write_collapse_panel(out, sample_id, msg, e)

    def write_params(self, out: TextIO, title: str, params: list[Field]) -> None:
        out.write(f"<H3>{title}</H3>\n")
        out.write(
            "<TABLE>\n<THEAD><TR><TH>Parameter</TH><TH>Description</TH></TR></THEAD>\n<TBODY>\n"
        )
        for p in params:
            out.write(f"<TR><TD><CODE>{p.name}</CODE>")
            if p.link():
                out.write(f"<BR /><I>{p.full_link()}</I>")
            out.write(f"</TD><TD>{p.description_with_entities}</TD></TR>\n")
        out.write("</TBODY>\n</TABLE>\n")

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

        out.write("<H3>Response</H3>\n")
        out.write("<TABLE>\n<THEAD><TR><TH>Code</TH><TH>Description</TH></TR></THEAD>\n<TBODY>\n")
        for r in o.sorted_responses():
            out.write(f"<TR><TD>{r.name}")
            if r.field.link():
                out.write(f"<BR /><I>{r.field.full_link()}</I>")
            out.write(f"</TD><TD>{r.field.description_with_entities}</TD></TR>\n")
        out.write("</TBODY>\n</TABLE>\n")

    def write_old_versions_overview(self) -> None:
        fn = "_oldversions.html"
        self.write_static("Old API Versions", fn)
        self.add_section(
            TOCItem(
                level=1,
                title="OLD API VERSIONS",
                link=strong("old-api-versions"),
                file=fn,
            )
        )

    def nav_data(self) -> dict[str, Any]:
        """Navigation data for the page scripts.

        ``flatToc`` lists every link last-first, so scroll tracking can stop
        at the first anchor above the viewport.
        """

        def section(item: TOCItem) -> dict[str, Any]:
            return {
                "section": item.link,
                "subsections": [section(sub) for sub in item.subsections],
            }

        flat = [item.link for _, item in self.toc.iter_items()]
        flat.reverse()
        return {
            "toc": [section(item) for item in self.toc.sections],
            "flatToc": flat,
        }

    def generate_nav_js(self) -> Path:
        path = self.settings.build_dir / "navData.js"
        data = json.dumps(self.nav_data(), separators=(",", ":"))
        path.write_text(f"(function(){{navData = {data};}})();\n", encoding="utf-8")
        return path

    def collect_includes(self) -> str:
        """Concatenate the include files in TOC order."""
        parts = []
        for _, file in self.toc.iter_files():
            path = self.settings.includes_dir / file
            if not path.is_file():
                logger.warning(f"Collecting {file} ... Not found")
                continue
            logger.info(f"Collecting {file} ... OK")
            parts.append(path.read_text(encoding="utf-8"))
        return "".join(parts)

    def generate_html(self) -> Path:
        page = self.renderer.render(
            "index.html.j2",
            {
                "title": self.toc.title,
                "copyright": self.toc.copyright,
                "sections": self.toc.sections,
                "content": self.collect_includes(),
                "timestamp": self.timestamp(),
            },
        )
        path = self.settings.build_dir / "index.html"
        path.write_text(page, encoding="utf-8")
        return path

    def finalize(self) -> None:
        self.settings.build_dir.mkdir(parents=True, exist_ok=True)
        self.generate_nav_js()
        path = self.generate_html()
        logger.info(f"Wrote {path}")
