"""Load an API model document (YAML or JSON) into the linked object graph."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field as SchemaField, ValidationError, field_validator

from apidocs.api.model import (
    CORE_GROUP,
    ApiModel,
    Definition,
    ExampleText,
    Field,
    GroupVersions,
    HttpResponse,
    Operation,
    OperationCategory,
    OperationType,
    Resource,
    ResourceCategory,
    Sample,
    group_sort_key,
    version_sort_key,
)
from apidocs.errors import ApiDocsError

logger = logging.getLogger(__name__)


class ModelLoadError(ApiDocsError):
    """Raised when the API model document cannot be loaded."""

    pass


class ExampleSchema(BaseModel):
    tab: str
    type: str
    text: str
    msg: str = ""


class SampleSchema(BaseModel):
    note: str = ""
    examples: list[ExampleSchema] = SchemaField(default_factory=list)


class FieldSchema(BaseModel):
    name: str
    type: str = ""
    ref: str = ""
    array: bool = False
    description: str = ""
    patch_strategy: str = ""
    patch_merge_key: str = ""


class ResponseSchema(BaseModel):
    code: str
    type: str = ""
    ref: str = ""
    array: bool = False
    description: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def validate_code(cls, v: str | int) -> str:
        """Accept unquoted YAML status codes."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class OperationSchema(BaseModel):
    id: str
    type: str
    http_method: str
    path: str
    description: str = ""
    path_params: list[FieldSchema] = SchemaField(default_factory=list)
    query_params: list[FieldSchema] = SchemaField(default_factory=list)
    body_params: list[FieldSchema] = SchemaField(default_factory=list)
    responses: list[ResponseSchema] = SchemaField(default_factory=list)
    example_requests: list[ExampleSchema] = SchemaField(default_factory=list)
    example_responses: list[ExampleSchema] = SchemaField(default_factory=list)


class OperationCategorySchema(BaseModel):
    name: str
    operations: list[OperationSchema] = SchemaField(default_factory=list)


class DefinitionSchema(BaseModel):
    name: str
    group: str = ""
    version: str
    description: str = ""
    old_version: bool = False
    fields: list[FieldSchema] = SchemaField(default_factory=list)
    sample: SampleSchema | None = None
    inline: list[str] = SchemaField(default_factory=list)
    operation_categories: list[OperationCategorySchema] = SchemaField(
        default_factory=list
    )


class ResourceSchema(BaseModel):
    name: str
    definition: str = ""
    warning: str = ""
    note: str = ""


class ResourceCategorySchema(BaseModel):
    name: str
    include: str
    resources: list[ResourceSchema] = SchemaField(default_factory=list)


class ModelSchema(BaseModel):
    spec_version: str = ""
    group_versions: dict[str, list[str]] = SchemaField(default_factory=dict)
    definitions: list[DefinitionSchema] = SchemaField(default_factory=list)
    resource_categories: list[ResourceCategorySchema] = SchemaField(
        default_factory=list
    )


class DefinitionIndex:
    """Resolves definition references.

    A reference is either ``group/version/Name``, ``version/Name`` or a bare
    ``Name``. Ambiguous references prefer the definition sharing the
    referrer's group and version, then current (not old) versions, then the
    newest version.
    """

    def __init__(self, definitions: list[Definition]) -> None:
        self._by_key: dict[str, Definition] = {}
        self._by_name: dict[str, list[Definition]] = defaultdict(list)
        for d in definitions:
            if d.key() in self._by_key:
                raise ModelLoadError(f"Duplicate definition '{d.key()}'")
            self._by_key[d.key()] = d
            self._by_name[d.name].append(d)

    def resolve(self, ref: str, context: Definition | None = None) -> Definition | None:
        parts = ref.strip("/").split("/")
        if len(parts) > 3:
            logger.warning(f"Malformed definition reference '{ref}'")
            return None
        if len(parts) == 3:
            group, version, name = parts
            return self._by_key.get(f"{group or CORE_GROUP}/{version}/{name}")

        if len(parts) == 2:
            version, name = parts
            candidates = [d for d in self._by_name.get(name, []) if d.version == version]
        else:
            candidates = list(self._by_name.get(parts[0], []))

        if not candidates:
            return None

        def preference(d: Definition) -> tuple:
            same_gv = context is not None and (
                d.group_display_name() == context.group_display_name()
                and d.version == context.version
            )
            return (
                not same_gv,
                d.is_old_version,
                version_sort_key(d.version),
                group_sort_key(d.group_display_name()),
            )

        return min(candidates, key=preference)


def read_document(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON document into a dictionary."""
    if not path.exists():
        raise ModelLoadError(f"Model file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ModelLoadError(f"Could not parse model file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ModelLoadError(f"Model file {path} must contain a mapping")
    return raw


def load_model(path: Path) -> ApiModel:
    """Load and link the API model stored at ``path``."""
    logger.info(f"Loading API model from {path}")
    return build_model(read_document(path))


def build_model(raw: dict[str, Any]) -> ApiModel:
    """Validate a raw model document and link it into an :class:`ApiModel`."""
    bad_keys = [k for k in raw if not isinstance(k, str)]
    if bad_keys:
        raise ModelLoadError(f"Invalid model document: non-string keys {bad_keys}")
    try:
        schema = ModelSchema.model_validate(raw)
    except ValidationError as e:
        raise ModelLoadError(f"Invalid model document: {e}") from e

    definitions = [
        Definition(
            name=d.name,
            group=d.group,
            version=d.version,
            description=d.description,
            sample=_to_sample(d.sample),
            is_old_version=d.old_version,
        )
        for d in schema.definitions
    ]
    index = DefinitionIndex(definitions)

    for d, d_schema in zip(definitions, schema.definitions):
        d.fields = [_to_field(f, index, d) for f in d_schema.fields]
        d.operation_categories = [
            OperationCategory(
                name=c.name,
                operations=[_to_operation(o, index, d) for o in c.operations],
            )
            for c in d_schema.operation_categories
        ]
        for ref in d_schema.inline:
            inlined = index.resolve(ref, context=d)
            if inlined is None:
                raise ModelLoadError(
                    f"Definition '{d.key()}' inlines unknown definition '{ref}'"
                )
            inlined.is_inlined = True
            d.inline.append(inlined)

    _link_appears_in(definitions)
    _link_other_versions(definitions)

    categories = []
    for c in schema.resource_categories:
        resources = []
        for r in c.resources:
            definition = index.resolve(r.definition or r.name)
            if definition is not None:
                definition.in_toc = True
            resources.append(
                Resource(
                    name=r.name,
                    definition=definition,
                    description_warning=r.warning,
                    description_note=r.note,
                )
            )
        categories.append(
            ResourceCategory(name=c.name, include=c.include, resources=resources)
        )

    if schema.group_versions:
        group_versions = GroupVersions(
            {group or CORE_GROUP: list(versions) for group, versions in schema.group_versions.items()}
        )
    else:
        group_versions = _collect_group_versions(definitions)

    logger.debug(
        f"Loaded {len(definitions)} definitions in {len(categories)} resource categories"
    )
    return ApiModel(
        spec_version=schema.spec_version,
        group_versions=group_versions,
        resource_categories=categories,
        definitions=definitions,
    )


def _to_example(e: ExampleSchema) -> ExampleText:
    return ExampleText(tab=e.tab, type=e.type, text=e.text, msg=e.msg)


def _to_sample(s: SampleSchema | None) -> Sample | None:
    if s is None:
        return None
    return Sample(note=s.note, examples=[_to_example(e) for e in s.examples])


def _resolve_type(
    ref: str, index: DefinitionIndex, context: Definition | None
) -> Definition | None:
    if not ref:
        return None
    target = index.resolve(ref, context=context)
    if target is None:
        logger.warning(f"Unresolved definition reference '{ref}'")
    return target


def _to_field(
    f: FieldSchema, index: DefinitionIndex, context: Definition | None
) -> Field:
    target = _resolve_type(f.ref, index, context)
    return Field(
        name=f.name,
        # An unresolved reference is still shown by name.
        type=f.type or (f.ref.rsplit("/", 1)[-1] if target is None else ""),
        ref=f.ref,
        is_array=f.array,
        description=f.description,
        patch_strategy=f.patch_strategy,
        patch_merge_key=f.patch_merge_key,
        definition=target,
    )


def _to_operation(
    o: OperationSchema, index: DefinitionIndex, context: Definition
) -> Operation:
    responses = []
    for r in o.responses:
        field = _to_field(
            FieldSchema(
                name=r.code,
                type=r.type,
                ref=r.ref,
                array=r.array,
                description=r.description,
            ),
            index,
            context,
        )
        responses.append(HttpResponse(name=r.code, field=field))

    return Operation(
        id=o.id,
        type=OperationType(name=o.type),
        http_method=o.http_method,
        path=o.path,
        description=o.description,
        path_params=[_to_field(p, index, context) for p in o.path_params],
        query_params=[_to_field(p, index, context) for p in o.query_params],
        body_params=[_to_field(p, index, context) for p in o.body_params],
        http_responses=responses,
        example_requests=[_to_example(e) for e in o.example_requests],
        example_responses=[_to_example(e) for e in o.example_responses],
    )


def _link_appears_in(definitions: list[Definition]) -> None:
    for d in definitions:
        for f in d.fields:
            target = f.definition
            if target is None or target is d or d in target.appears_in:
                continue
            target.appears_in.append(d)

    for d in definitions:
        d.appears_in.sort(key=lambda a: (a.name, version_sort_key(a.version)))


def _link_other_versions(definitions: list[Definition]) -> None:
    by_name: dict[str, list[Definition]] = defaultdict(list)
    for d in definitions:
        by_name[d.name].append(d)

    for d in definitions:
        others = [o for o in by_name[d.name] if o is not d]
        d.other_versions = sorted(
            others,
            key=lambda o: (version_sort_key(o.version), group_sort_key(o.group_display_name())),
        )


def _collect_group_versions(definitions: list[Definition]) -> GroupVersions:
    collected: dict[str, list[str]] = defaultdict(list)
    for d in definitions:
        versions = collected[d.group_display_name()]
        if d.version not in versions:
            versions.append(d.version)
    return GroupVersions(collected)
