"""In-memory API model walked by the document writers.

The model is a linked graph: fields point at the definitions they reference,
definitions know which other definitions they appear in and which other
versions of themselves exist. The graph is built by
:func:`apidocs.api.loader.load_model`; writers only read it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator

CORE_GROUP = "core"

_VERSION_PATTERN = re.compile(r"^v(\d+)(?:(alpha|beta)(\d+))?$")
_STAGE_RANK = {None: 0, "beta": 1, "alpha": 2}


def version_sort_key(version: str) -> tuple:
    """Sort key placing GA versions first, then beta, then alpha.

    Within a stage, higher major and minor numbers come first, so
    ``v2 > v1 > v1beta2 > v1beta1 > v1alpha1``. Versions that do not follow
    the ``vN[alpha|betaM]`` convention sort last, alphabetically.
    """
    match = _VERSION_PATTERN.match(version)
    if match is None:
        return (len(_STAGE_RANK), 0, 0, version)
    major, stage, minor = match.groups()
    return (_STAGE_RANK[stage], -int(major), -int(minor or 0), version)


def group_sort_key(group: str) -> tuple[bool, str]:
    return (group != CORE_GROUP, group)


@dataclass
class ExampleText:
    """A single example snippet.

    Attributes:
        tab: Tab identifier, e.g. ``bdocs-tab:kubectl``.
        type: Highlight type, e.g. ``bdocs-tab:kubectl_shell``.
        text: The example body.
        msg: Caption shown above the example.
    """

    tab: str
    type: str
    text: str
    msg: str = ""

    @property
    def example_type(self) -> str:
        """Tool name of the example (``kubectl``, ``curl``, ...)."""
        return self.tab.split(":", 1)[-1]

    @property
    def lang(self) -> str:
        """Language used for syntax highlighting (``shell``, ``yaml``, ...)."""
        kind = self.type.split(":", 1)[-1]
        return kind.split("_", 1)[-1]


@dataclass
class Sample:
    note: str = ""
    examples: list[ExampleText] = field(default_factory=list)


@dataclass(eq=False)
class Field:
    """A field of a definition, or a parameter of an operation."""

    name: str
    type: str = ""
    ref: str = ""
    is_array: bool = False
    description: str = ""
    patch_strategy: str = ""
    patch_merge_key: str = ""
    definition: Definition | None = field(default=None, repr=False)

    @property
    def description_with_entities(self) -> str:
        return encode_entities(self.description)

    def _suffix(self) -> str:
        return " array" if self.is_array else ""

    def link(self) -> str:
        """Markdown link to the field's type, or the plain type name."""
        if self.definition is not None:
            d = self.definition
            return f"[{d.name}](#{d.link_id()}){self._suffix()}"
        if self.type:
            return f"{self.type}{self._suffix()}"
        return ""

    def full_link(self) -> str:
        """HTML anchor to the field's type, or the plain type name."""
        if self.definition is not None:
            d = self.definition
            return f'<a href="#{d.link_id()}">{d.name}</a>{self._suffix()}'
        if self.type:
            return f"{self.type}{self._suffix()}"
        return ""


@dataclass(eq=False)
class Definition:
    """A named, versioned object schema."""

    name: str
    group: str = ""
    version: str = ""
    description: str = ""
    fields: list[Field] = field(default_factory=list)
    sample: Sample | None = None
    inline: list[Definition] = field(default_factory=list, repr=False)
    other_versions: list[Definition] = field(default_factory=list, repr=False)
    appears_in: list[Definition] = field(default_factory=list, repr=False)
    operation_categories: list[OperationCategory] = field(
        default_factory=list, repr=False
    )
    in_toc: bool = False
    is_inlined: bool = False
    is_old_version: bool = False

    @property
    def description_with_entities(self) -> str:
        return encode_entities(self.description)

    def group_display_name(self) -> str:
        return self.group or CORE_GROUP

    def key(self) -> str:
        """Unique lookup key, ``group/version/Name``."""
        return f"{self.group_display_name()}/{self.version}/{self.name}"

    def link_id(self) -> str:
        """Anchor used for this definition in every output format."""
        raw = f"{self.name}-{self.version}-{self.group_display_name()}"
        return raw.lower().replace(".", "-")

    def md_link(self) -> str:
        return (
            f"[{self.name} {self.group_display_name()}/{self.version}]"
            f"(#{self.link_id()})"
        )

    def version_link_data(self) -> tuple[str, str]:
        """Anchor and text linking to this definition by version only."""
        return self.link_id(), self.version

    def full_href_link_data(self) -> tuple[str, str]:
        """Anchor and text linking to this definition by name and version."""
        text = f"{self.name} [{self.group_display_name()}/{self.version}]"
        return self.link_id(), text

    def get_samples(self) -> list[ExampleText]:
        if self.sample is None:
            return []
        return list(self.sample.examples)

    def has_sample(self) -> bool:
        return bool(self.get_samples())


@dataclass
class OperationType:
    name: str


@dataclass(eq=False)
class HttpResponse:
    name: str
    field: Field


@dataclass(eq=False)
class Operation:
    """A single HTTP operation on a resource."""

    id: str
    type: OperationType
    http_method: str
    path: str
    description: str = ""
    path_params: list[Field] = field(default_factory=list)
    query_params: list[Field] = field(default_factory=list)
    body_params: list[Field] = field(default_factory=list)
    http_responses: list[HttpResponse] = field(default_factory=list)
    example_requests: list[ExampleText] = field(default_factory=list)
    example_responses: list[ExampleText] = field(default_factory=list)

    def get_display_http(self) -> str:
        return f"{self.http_method.upper()} {self.path}"

    def get_example_requests(self) -> list[ExampleText]:
        return list(self.example_requests)

    def get_example_responses(self) -> list[ExampleText]:
        return list(self.example_responses)

    def sorted_responses(self) -> list[HttpResponse]:
        return sorted(self.http_responses, key=lambda r: r.name)


@dataclass(eq=False)
class OperationCategory:
    name: str
    operations: list[Operation] = field(default_factory=list)


@dataclass(eq=False)
class Resource:
    """A top-level resource listed in the table of contents."""

    name: str
    definition: Definition | None = None
    description_warning: str = ""
    description_note: str = ""


@dataclass(eq=False)
class ResourceCategory:
    name: str
    include: str
    resources: list[Resource] = field(default_factory=list)


class GroupVersions(dict):
    """Mapping of API group name to the versions served for it."""

    def sorted_groups(self) -> list[str]:
        return sorted(self.keys(), key=group_sort_key)

    def sorted_versions(self, group: str) -> list[str]:
        return sorted(self.get(group, []), key=version_sort_key)

    def items_sorted(self) -> Iterator[tuple[str, list[str]]]:
        for group in self.sorted_groups():
            yield group, self.sorted_versions(group)


@dataclass(eq=False)
class ApiModel:
    """Root of the API graph."""

    spec_version: str = ""
    group_versions: GroupVersions = field(default_factory=GroupVersions)
    resource_categories: list[ResourceCategory] = field(default_factory=list)
    definitions: list[Definition] = field(default_factory=list)

    def toc_definitions(self) -> list[Definition]:
        """Definitions documented in the definitions section, sorted by name.

        Top-level resources, inlined definitions and old versions are
        documented elsewhere and excluded.
        """
        selected = [
            d
            for d in self.definitions
            if not (d.in_toc or d.is_inlined or d.is_old_version)
        ]
        return sort_definitions(selected)

    def old_version_definitions(self) -> list[Definition]:
        selected = [
            d for d in self.definitions if d.is_old_version and not d.is_inlined
        ]
        return sort_definitions(selected)

    def release(self) -> str:
        """Release number derived from the spec version.

        ``v1.29.0`` becomes ``1.29``. A version without a patch component
        is returned without its leading ``v``.
        """
        version = self.spec_version.strip()
        if version.startswith("v"):
            version = version[1:]
        if version.count(".") >= 2:
            version = version[: version.rfind(".")]
        return version


def sort_definitions(definitions: list[Definition]) -> list[Definition]:
    return sorted(
        definitions,
        key=lambda d: (
            d.name,
            group_sort_key(d.group_display_name()),
            version_sort_key(d.version),
        ),
    )


def encode_entities(text: str) -> str:
    return text.replace("<", "&lt;").replace(">", "&gt;")
