"""API model and model loading."""

from apidocs.api.loader import ModelLoadError, build_model, load_model
from apidocs.api.model import (
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
)

__all__ = [
    "ApiModel",
    "Definition",
    "ExampleText",
    "Field",
    "GroupVersions",
    "HttpResponse",
    "ModelLoadError",
    "Operation",
    "OperationCategory",
    "OperationType",
    "Resource",
    "ResourceCategory",
    "Sample",
    "build_model",
    "load_model",
]
