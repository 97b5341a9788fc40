"""LaTeX writer: per-entity include files plus a ``main.tex`` master document."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import replace
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
from apidocs.config.settings import GeneratorSettings
from apidocs.generators.templating import TemplateRenderer
from apidocs.generators.toc import TOCItem
from apidocs.generators.writer import (
    DocWriter,
    concept_file_name,
    definition_file_name,
    get_link,
)

logger = logging.getLogger(__name__)

_TEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "<": r"\textless{}",
    ">": r"\textgreater{}",
}
_TEX_PATTERN = re.compile("|".join(re.escape(c) for c in _TEX_SPECIALS))


def tex_escape(text: str) -> str:
    """Escape LaTeX special characters in plain text."""
    return _TEX_PATTERN.sub(lambda m: _TEX_SPECIALS[m.group()], text)


def strong(link: str) -> str:
    return f"-strong-{link}-strong-"


def longtable_begin(out: TextIO, first: str, second: str) -> None:
    out.write("\\begin{longtable}{p{0.35\\textwidth}|p{0.6\\textwidth}}\n")
    out.write(f"\\toprule\n{first} & {second}\\\\\n\\midrule\n\\endfirsthead\n")
    out.write("\\multicolumn{2}{r}{\\textit{Continued}}\\\\\n")
    out.write(f"\\toprule\n{first} & {second}\\\\\n\\midrule\n\\endhead\n")
    out.write("\\midrule\n\\multicolumn{2}{r}{\\textit{Continued on next page}}\\\\\n")
    out.write("\\endfoot\n\\bottomrule\n\\endlastfoot\n")


def longtable_end(out: TextIO) -> None:
    out.write("\\end{longtable}\n\n")


class TexWriter(DocWriter):
    """Writes ``_``-prefixed LaTeX include files into the includes directory."""

    COPYRIGHT_TEMPLATE = "\\href{{{url}}}{{{text}}}"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.renderer = TemplateRenderer(tex=True)

    @classmethod
    def format_copyright(cls, settings: GeneratorSettings, year: str) -> str:
        text = tex_escape(
            f"Copyright {settings.copyright_start_year}-{year} {settings.copyright_holder}"
        )
        return cls.COPYRIGHT_TEMPLATE.format(text=text, url=settings.copyright_url)

    @property
    def output_dir(self) -> Path:
        return self.settings.includes_dir

    def extension(self) -> str:
        return ".tex"

    def default_static_content(self, title: str) -> str:
        return f"\\section{{{tex_escape(title)}}}\n\\label{{{strong(get_link(title))}}}\n"

    def section_link(self, link: str) -> str:
        return strong(link)

    def write_overview(self) -> None:
        fn = "_overview.tex"
        self.write_static("Overview", fn)
        self.add_section(
            TOCItem(level=1, title="Overview", link=strong("overview"), file=fn)
        )

    def write_api_group_versions(self, gvs: GroupVersions) -> None:
        fn = "_group_versions.tex"
        link = strong("api-groups")
        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f"\\section{{API Groups}}\n\\label{{{link}}}\n\n")
            f.write(
                "The API Groups and their versions are summarized in the following table.\n\n"
            )
            f.write("\\begin{center}\n\\begin{tabular}{l|l}\n\\hline\n")
            f.write("Group & Versions\\\\\n\\hline\n")
            for group, versions in gvs.items_sorted():
                f.write(
                    f"\\texttt{{{tex_escape(group)}}} & "
                    f"\\texttt{{{tex_escape(', '.join(versions))}}}\\\\\n"
                )
            f.write("\\hline\n\\end{tabular}\n\\end{center}\n\n")

        self.add_section(TOCItem(level=1, title="API Groups", link=link, file=fn))

    def write_resource_category(self, name: str, file: str) -> None:
        fn = file + self.extension()
        self.write_static(name, fn)
        self.add_section(
            TOCItem(level=1, title=name.upper(), link=strong(get_link(name)), file=fn)
        )

    def field_link(self, field: Field) -> str:
        suffix = " array" if field.is_array else ""
        if field.definition is not None:
            d = field.definition
            return f"\\hyperref[{d.link_id()}]{{{tex_escape(d.name)}}}{suffix}"
        if field.type:
            return tex_escape(field.type) + suffix
        return ""

    def write_other_versions(self, out: TextIO, d: Definition) -> None:
        if not d.other_versions:
            return
        out.write("Other API versions of this object exist:\n\\begin{itemize}\n")
        for v in d.other_versions:
            link, text = v.version_link_data()
            out.write(f"\\item \\hyperref[{link}]{{{tex_escape(text)}}}\n")
        out.write("\\end{itemize}\n\n")

    def write_appears_in(self, out: TextIO, d: Definition) -> None:
        if not d.appears_in:
            return
        out.write("Appears In:\n\n \\begin{itemize}\n")
        for a in d.appears_in:
            link, text = a.full_href_link_data()
            out.write(f"  \\item \\hyperref[{link}]{{{tex_escape(text)}}}\n")
        out.write(" \\end{itemize}\n\n")

    def write_fields(self, out: TextIO, d: Definition) -> None:
        longtable_begin(out, "Field", "Description")
        for field in d.fields:
            out.write(f"\\texttt{{{tex_escape(field.name)}}}")
            link = self.field_link(field)
            if link:
                out.write(f"\\newline \\textit{{{link}}}")
            if field.patch_strategy:
                out.write(
                    f"\\newline \\textbf{{patch strategy}}: "
                    f"\\textit{{{tex_escape(field.patch_strategy)}}}"
                )
            if field.patch_merge_key:
                out.write(
                    f"\\newline \\textbf{{patch merge key}}: "
                    f"\\textit{{{tex_escape(field.patch_merge_key)}}}"
                )
            out.write(f" & {tex_escape(field.description)} \\\\\n")
        longtable_end(out)

    def write_gvk(self, out: TextIO, d: Definition, kind: str) -> None:
        out.write("\\begin{center}\n\\begin{tabular}{c|c|c}\n\\hline\n")
        out.write("Group & Version & Kind\\\\\n\\hline\n")
        out.write(
            f"\\texttt{{{tex_escape(d.group_display_name())}}} & "
            f"\\texttt{{{tex_escape(d.version)}}} & "
            f"\\texttt{{{tex_escape(kind)}}}\\\\\n"
        )
        out.write("\\hline\n\\end{tabular}\n\\end{center}\n\n")

    def write_definitions_overview(self) -> None:
        fn = "_definitions.tex"
        self.write_static("Definitions", fn)
        self.add_section(
            TOCItem(level=1, title="DEFINITIONS", link=strong("definitions"), file=fn)
        )

    def write_definition(self, d: Definition) -> None:
        fn = "_" + definition_file_name(d) + self.extension()
        nvg = f"{d.name} {d.version} {d.group_display_name()}"
        link_id = d.link_id()

        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f"\\subsection{{{tex_escape(nvg)}}}\n\\label{{{link_id}}}\n\n")
            self.write_gvk(f, d, d.name)
            f.write(f"{tex_escape(d.description)}\n\n")
            self.write_other_versions(f, d)
            self.write_appears_in(f, d)
            self.write_fields(f, d)

        self.add_subsection(TOCItem(level=2, title=nvg, link=link_id, file=fn))

    def write_example(self, out: TextIO, heading: str, caption: str, e: ExampleText) -> None:
        out.write(f"\\paragraph{{{tex_escape(heading)}}}")
        if caption:
            out.write(f" {caption}")
        out.write("\n\\begin{verbatim}\n")
        out.write(f"{e.text}\n")
        out.write("\\end{verbatim}\n\n")

    def write_sample(self, out: TextIO, d: Definition) -> None:
        note = tex_escape(d.sample.note) if d.sample else ""
        for s in d.get_samples():
            self.write_example(out, f"{s.example_type} example", note, s)

    def write_resource(self, resource: Resource) -> None:
        d = resource.definition
        fn = "_" + concept_file_name(d) + self.extension()
        dvg = f"{resource.name} {d.version} {d.group_display_name()}"
        link_id = d.link_id()

        with self.output_path(fn).open("w", encoding="utf-8") as f:
            f.write(f"\\section{{{tex_escape(dvg)}}}\n\\label{{{link_id}}}\n\n")
            self.write_sample(f, d)
            self.write_gvk(f, d, resource.name)

            if resource.description_warning:
                f.write(
                    f"\\textbf{{Warning:}} {tex_escape(resource.description_warning)}\n\n"
                )
            if resource.description_note:
                f.write(f"\\textit{{Note:}} {tex_escape(resource.description_note)}\n\n")

            self.write_other_versions(f, d)
            self.write_appears_in(f, d)
            self.write_fields(f, d)

            for inline in d.inline:
                title = f"{inline.name} {inline.version} {inline.group_display_name()}"
                f.write(
                    f"\\subsubsection{{{tex_escape(title)}}}\n\\label{{{inline.link_id()}}}\n\n"
                )
                self.write_appears_in(f, inline)
                self.write_fields(f, inline)

            self.add_section(TOCItem(level=1, title=dvg, link=link_id, file=fn))
            self.write_operations(f, resource)

    def write_operation_category(
        self, out: TextIO, category: OperationCategory, category_id: str
    ) -> None:
        out.write(f"\\subsection{{{tex_escape(category.name)}}}\n\\label{{{category_id}}}\n\n")

    def write_operation(self, out: TextIO, operation: Operation, operation_id: str) -> None:
        out.write(
            f"\\subsubsection{{{tex_escape(operation.type.name)}}}\n"
            f"\\label{{{operation_id}}}\n\n"
        )

        for e in operation.get_example_requests():
            self.write_example(out, f"{e.example_type} request example", self.caption(e), e)
        for e in operation.get_example_responses():
            self.write_example(out, f"{e.example_type} response example", self.caption(e), e)

        out.write(f"{tex_escape(operation.description)}\n\n")
        out.write("\\paragraph{HTTP Request}\n\n")
        out.write(f"\\texttt{{{tex_escape(operation.get_display_http())}}}\n\n")

        self.write_request_params(out, operation)
        self.write_response_params(out, operation)

    def caption(self, e: ExampleText) -> str:
        return self.example_message(
            replace(e, msg=tex_escape(e.msg)),
            curl="\\texttt{curl} command "
            "(\\textit{requires \\texttt{kubectl proxy} to be running})",
            kubectl="\\texttt{kubectl} command",
        )

    def write_params(self, out: TextIO, title: str, params: list[Field]) -> None:
        out.write(f"\\paragraph{{{title}}}\n\n")
        longtable_begin(out, "Parameter", "Description")
        for p in params:
            out.write(f"\\texttt{{{tex_escape(p.name)}}}")
            link = self.field_link(p)
            if link:
                out.write(f"\\newline \\textit{{{link}}}")
            out.write(f" & {tex_escape(p.description)} \\\\\n")
        longtable_end(out)

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

        out.write("\\paragraph{Response}\n\n")
        longtable_begin(out, "Code", "Description")
        for r in o.sorted_responses():
            out.write(tex_escape(r.name))
            link = self.field_link(r.field)
            if link:
                out.write(f"\\newline \\textit{{{link}}}")
            out.write(f" & {tex_escape(r.field.description)} \\\\\n")
        longtable_end(out)

    def write_old_versions_overview(self) -> None:
        fn = "_oldversions.tex"
        self.write_static("Old API Versions", fn)
        self.add_section(
            TOCItem(
                level=1,
                title="OLD API VERSIONS",
                link=strong("old-api-versions"),
                file=fn,
            )
        )

    def relative_dir(self, path: Path) -> str:
        """``path`` relative to the config directory, where LaTeX is run."""
        return Path(os.path.relpath(path, self.settings.config_dir)).as_posix()

    def collect_includes(self) -> list[str]:
        """Include names for the TOC files that exist, in TOC order."""
        prefix = self.relative_dir(self.settings.includes_dir)
        includes = []
        for _, file in self.toc.iter_files():
            path = self.settings.includes_dir / file
            if not path.is_file():
                logger.warning(f"Collecting {file} ... Not found")
                continue
            logger.info(f"Collecting {file} ... OK")
            includes.append(f"{prefix}/{Path(file).stem}")
        return includes

    def generate_document(self) -> Path:
        document = self.renderer.render(
            "main.tex.j2",
            {
                "title": tex_escape(self.toc.title),
                "author": tex_escape(self.settings.author),
                "copyright": self.toc.copyright,
                "static_prefix": self.relative_dir(self.settings.sections_dir),
                "includes": self.collect_includes(),
            },
        )
        path = self.settings.build_dir / "main.tex"
        path.write_text(document, encoding="utf-8")
        return path

    def finalize(self) -> None:
        self.settings.build_dir.mkdir(parents=True, exist_ok=True)
        path = self.generate_document()
        logger.info(f"Wrote {path}")
