"""Template rendering for the assembled output documents.

HTML pages use regular Jinja2 syntax. LaTeX uses ``\\VAR{...}`` and
``\\BLOCK{...}`` delimiters because braces and ``%`` are part of LaTeX
markup. User-authored static files such as ``index.md`` only support plain
placeholder replacement.
"""

from __future__ import annotations

import logging
from typing import Any

from jinja2 import (
    Environment,
    PackageLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from apidocs.errors import ApiDocsError

logger = logging.getLogger(__name__)


class TemplateError(ApiDocsError):
    """Base exception for template errors."""

    pass


class TemplateNotFoundError(TemplateError):
    """Raised when a template file is not found."""

    pass


class TemplateRenderError(TemplateError):
    """Raised when template rendering fails."""

    pass


TEX_DELIMITERS: dict[str, str] = {
    "block_start_string": r"\BLOCK{",
    "block_end_string": "}",
    "variable_start_string": r"\VAR{",
    "variable_end_string": "}",
    "comment_start_string": r"\#{",
    "comment_end_string": "}",
}


class TemplateRenderer:
    """Renders the packaged document templates.

    Example:
        >>> renderer = TemplateRenderer()
        >>> page = renderer.render("index.html.j2", {...})
    """

    TEMPLATE_PACKAGE = "apidocs.generators"
    TEMPLATE_DIR = "templates"

    def __init__(self, tex: bool = False) -> None:
        options: dict[str, Any] = TEX_DELIMITERS if tex else {}
        self.tex = tex
        self._env = Environment(
            loader=PackageLoader(self.TEMPLATE_PACKAGE, self.TEMPLATE_DIR),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            **options,
        )

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a packaged template with the given context.

        Raises:
            TemplateNotFoundError: If the template doesn't exist.
            TemplateRenderError: If rendering fails.
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(f"Template not found: {template_name}") from e
        except UndefinedError as e:
            raise TemplateRenderError(
                f"Missing variable in '{template_name}' template: {e}"
            ) from e
        except TemplateSyntaxError as e:
            raise TemplateRenderError(
                f"Syntax error in '{template_name}' template: {e}"
            ) from e


def substitute_placeholders(content: str, values: dict[str, str]) -> str:
    """Replace bare ``KEY`` placeholders in user-authored content."""
    rendered = content
    for key, value in values.items():
        if key in rendered:
            rendered = rendered.replace(key, value)
    return rendered
