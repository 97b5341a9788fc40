"""Generator settings: directories, title and copyright configuration."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from apidocs.errors import ApiDocsError

DEFAULT_CONFIG_NAME = "apidocs.yaml"
DEFAULT_MODEL_NAME = "model.yaml"

ENV_CONFIG_DIR = "APIDOCS_CONFIG_DIR"
ENV_BUILD_OPS = "APIDOCS_BUILD_OPS"

_ENV_PATTERN = re.compile(r"\$\{[^}]+\}")
_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigurationError(ApiDocsError):
    """Raised when the generator settings are invalid."""

    pass


class GeneratorSettings(BaseModel):
    """Validated generator settings.

    Directory settings left unset default to subdirectories of
    ``config_dir``; relative paths are resolved against ``config_dir``.
    """

    config_dir: Path = Path(".")
    build_dir: Path | None = None
    includes_dir: Path | None = None
    sections_dir: Path | None = None
    model_file: Path | None = None
    build_operations: bool = False
    project_name: str = "Kubernetes"
    author: str = "Kubernetes Team"
    copyright_holder: str = "The Kubernetes Authors"
    copyright_url: str = "https://github.com/kubernetes/kubernetes"
    copyright_start_year: int = Field(2016, ge=1970)

    @model_validator(mode="after")
    def _fill_directories(self) -> GeneratorSettings:
        self.config_dir = self.config_dir.expanduser()
        defaults = {
            "build_dir": "build",
            "includes_dir": "includes",
            "sections_dir": "static_includes",
            "model_file": DEFAULT_MODEL_NAME,
        }
        for name, default in defaults.items():
            value = getattr(self, name) or Path(default)
            value = value.expanduser()
            if not value.is_absolute():
                value = self.config_dir / value
            setattr(self, name, value)
        return self

    @property
    def title(self) -> str:
        if self.build_operations:
            return f"{self.project_name} API Reference Docs"
        return f"{self.project_name} Resource Reference Docs"


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if _ENV_PATTERN.search(expanded):
            raise ValueError(f"Missing environment variable in value: {value}")
        return expanded
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def load_config(path: Path) -> dict[str, Any]:
    """Load and expand a YAML config file."""
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("Config must be a dictionary")
    return _expand_env(raw)


def load_settings(
    config_dir: Path | None = None,
    config_path: Path | None = None,
    **overrides: Any,
) -> GeneratorSettings:
    """Build generator settings from a config file, the environment and overrides.

    Precedence, lowest first: the YAML config file (``apidocs.yaml`` in the
    config directory unless ``config_path`` is given), ``APIDOCS_*``
    environment variables, then keyword overrides. Overrides set to None are
    ignored.

    Raises:
        ConfigurationError: If the config file is missing, unreadable or invalid.
    """
    if config_dir is None:
        config_dir = Path(os.getenv(ENV_CONFIG_DIR, "."))

    if config_path is None:
        candidate = config_dir / DEFAULT_CONFIG_NAME
        config_path = candidate if candidate.exists() else None
    elif not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    data: dict[str, Any] = {}
    if config_path is not None:
        try:
            data = load_config(config_path)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    build_ops = os.getenv(ENV_BUILD_OPS)
    if build_ops is not None:
        data["build_operations"] = build_ops.strip().lower() in _TRUE_VALUES

    data.update({k: v for k, v in overrides.items() if v is not None})
    data["config_dir"] = config_dir

    try:
        return GeneratorSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid generator settings: {e}") from e
