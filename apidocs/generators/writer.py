"""Writer interface and the single traversal that drives every output format."""

from __future__ import annotations

import importlib
import logging
import shutil
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import ClassVar, TextIO

from apidocs.api.loader import load_model
from apidocs.api.model import (
    ApiModel,
    Definition,
    ExampleText,
    GroupVersions,
    Operation,
    OperationCategory,
    Resource,
)
from apidocs.config.settings import GeneratorSettings
from apidocs.errors import ApiDocsError
from apidocs.generators.toc import TOC, TOCItem

logger = logging.getLogger(__name__)

WRITERS: dict[str, str] = {
    "markdown": "apidocs.generators.markdown:MarkdownWriter",
    "html": "apidocs.generators.html:HTMLWriter",
    "tex": "apidocs.generators.tex:TexWriter",
}

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S (%Z)"


class UnsupportedFormatError(ApiDocsError):
    """Raised when no writer exists for the requested output format."""

    pass


class DocWriter(ABC):
    """Base class for the per-format document writers.

    A writer is driven by :func:`generate_files`. Each ``write_*`` call
    emits one or more files into :attr:`output_dir` and records them in the
    table of contents. Level-1 items become the current section; definitions
    and operation categories are attached below it.
    """

    COPYRIGHT_TEMPLATE: ClassVar[str] = "[{text}]({url})"

    def __init__(
        self,
        settings: GeneratorSettings,
        model: ApiModel,
        copyright: str,
        title: str,
        generated_at: datetime | None = None,
    ) -> None:
        self.settings = settings
        self.model = model
        self.toc = TOC(title=title, copyright=copyright)
        self.current_section: TOCItem | None = None
        self.generated_at = generated_at or datetime.now().astimezone()

    @classmethod
    def format_copyright(cls, settings: GeneratorSettings, year: str) -> str:
        text = (
            f"Copyright {settings.copyright_start_year}-{year} "
            f"{settings.copyright_holder}"
        )
        return cls.COPYRIGHT_TEMPLATE.format(text=text, url=settings.copyright_url)

    @property
    @abstractmethod
    def output_dir(self) -> Path:
        """Directory receiving the per-entity files."""

    @abstractmethod
    def extension(self) -> str: ...

    @abstractmethod
    def default_static_content(self, title: str) -> str:
        """Content written for a static section with no hand-written file."""

    @abstractmethod
    def write_overview(self) -> None: ...

    @abstractmethod
    def write_api_group_versions(self, gvs: GroupVersions) -> None: ...

    @abstractmethod
    def write_resource_category(self, name: str, file: str) -> None: ...

    @abstractmethod
    def write_resource(self, resource: Resource) -> None: ...

    @abstractmethod
    def write_definitions_overview(self) -> None: ...

    @abstractmethod
    def write_definition(self, definition: Definition) -> None: ...

    @abstractmethod
    def write_old_versions_overview(self) -> None: ...

    @abstractmethod
    def finalize(self) -> None: ...

    @abstractmethod
    def write_operation_category(
        self, out: TextIO, category: OperationCategory, category_id: str
    ) -> None: ...

    @abstractmethod
    def write_operation(
        self, out: TextIO, operation: Operation, operation_id: str
    ) -> None: ...

    # TOC bookkeeping

    def add_section(self, item: TOCItem) -> TOCItem:
        self.toc.sections.append(item)
        self.current_section = item
        return item

    def add_subsection(self, item: TOCItem) -> TOCItem:
        if self.current_section is None:
            raise ApiDocsError(f"No section to attach '{item.title}' to")
        self.current_section.subsections.append(item)
        return item

    def section_link(self, link: str) -> str:
        """Anchor used for static sections and operation categories."""
        return link

    # Shared helpers

    def output_path(self, relative: str) -> Path:
        path = self.output_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def write_static(self, title: str, location: str) -> None:
        write_static_file(
            self.settings,
            location,
            self.default_static_content(title),
            self.output_dir,
        )

    def write_operations(self, out: TextIO, resource: Resource) -> None:
        """Write the operation categories of a resource.

        Must be called after the resource's own section was added, since
        categories are attached to the current section and operations to
        their category.
        """
        definition = resource.definition
        if definition is None or not self.settings.build_operations:
            return

        for category in definition.operation_categories:
            if not category.operations:
                continue

            category_id = self.section_link(
                f"{get_link(category.name)}-{definition.link_id()}"
            )
            self.write_operation_category(out, category, category_id)
            category_item = self.add_subsection(
                TOCItem(level=2, title=category.name, link=category_id)
            )

            for operation in category.operations:
                operation_id = f"{get_link(operation.type.name)}-{definition.link_id()}"
                category_item.subsections.append(
                    TOCItem(level=2, title=operation.type.name, link=operation_id)
                )
                self.write_operation(out, operation, operation_id)

    def example_message(self, example: ExampleText, curl: str, kubectl: str) -> str:
        """Caption for an example, normalising the well-known tool captions."""
        kind = example.example_type
        if kind == "curl" and "proxy" in example.msg:
            return curl
        if kind == "kubectl" and "Command" in example.msg:
            return kubectl
        return example.msg

    def check_toc_files(self, base_dir: Path) -> list[str]:
        """Log the state of every TOC file and return the missing ones."""
        missing = []
        for _, file in self.toc.iter_files():
            if (base_dir / file).exists():
                logger.info(f"Processing {file} ... OK")
            else:
                logger.warning(f"Processing {file} ... Not found")
                missing.append(file)
        return missing

    def timestamp(self) -> str:
        return self.generated_at.strftime(TIMESTAMP_FORMAT)


def get_writer(output_format: str) -> type[DocWriter]:
    """Return the writer class registered for an output format."""
    try:
        target = WRITERS[output_format]
    except KeyError:
        raise UnsupportedFormatError(
            f"unsupported format '{output_format}' specified. "
            f"Valid formats: {', '.join(WRITERS)}"
        ) from None
    module_name, class_name = target.split(":")
    return getattr(importlib.import_module(module_name), class_name)


def generate_files(
    output_format: str,
    settings: GeneratorSettings,
    model: ApiModel | None = None,
    generated_at: datetime | None = None,
) -> DocWriter:
    """Render the whole API model with the writer for ``output_format``.

    Returns:
        The writer, holding the accumulated table of contents.
    """
    writer_cls = get_writer(output_format)
    if model is None:
        model = load_model(settings.model_file)
    print_info(settings, model)
    ensure_include_dir(settings)

    generated_at = generated_at or datetime.now().astimezone()
    copyright = writer_cls.format_copyright(settings, generated_at.strftime("%Y"))
    writer = writer_cls(settings, model, copyright, settings.title, generated_at)

    writer.write_overview()
    writer.write_api_group_versions(model.group_versions)

    for category in model.resource_categories:
        writer.write_resource_category(category.name, category.include)
        for resource in category.resources:
            if resource.definition is None:
                logger.warning(f"Missing definition for item in TOC {resource.name}")
                continue
            writer.write_resource(resource)

    writer.write_definitions_overview()
    for definition in model.toc_definitions():
        writer.write_definition(definition)

    writer.write_old_versions_overview()
    for definition in model.old_version_definitions():
        writer.write_resource(Resource(name=definition.name, definition=definition))

    writer.finalize()
    return writer


def print_info(settings: GeneratorSettings, model: ApiModel) -> None:
    logger.info(f"Using spec version {model.spec_version or 'unknown'}")
    logger.info(f"Reading static sections from {settings.sections_dir}")
    logger.info(f"Writing includes to {settings.includes_dir}")
    logger.info(f"Writing build output to {settings.build_dir}")
    logger.info(
        f"{len(model.definitions)} definitions, "
        f"{len(model.resource_categories)} resource categories"
    )


def ensure_include_dir(settings: GeneratorSettings) -> None:
    settings.build_dir.mkdir(parents=True, exist_ok=True)
    settings.includes_dir.mkdir(parents=True, exist_ok=True)


def _file_stem(d: Definition) -> str:
    return "generated_" + d.name.lower().replace(".", "_")


def definition_file_name(d: Definition) -> str:
    return f"{_file_stem(d)}_{d.version}_{d.group_display_name()}_definition"


def concept_file_name(d: Definition) -> str:
    return f"{_file_stem(d)}_{d.version}_{d.group_display_name()}_concept"


def get_link(s: str) -> str:
    return s.replace(".", "-").replace(" ", "-").lower()


def write_static_file(
    settings: GeneratorSettings,
    location: str,
    default_content: str,
    target_dir: Path,
) -> Path:
    """Copy a hand-written section into ``target_dir`` or write a default.

    The hand-written file is looked up as ``location`` in the sections
    directory.
    """
    source = settings.sections_dir / location
    target = target_dir / location
    target.parent.mkdir(parents=True, exist_ok=True)

    if source.is_file():
        shutil.copyfile(source, target)
        return target

    logger.info(f"Creating file {target}")
    target.write_text(default_content, encoding="utf-8")
    return target
