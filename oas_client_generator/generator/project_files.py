"""
Project Template Engine

Renders the non-code project files of a generated client (README, Python
package ``__init__`` modules) from Jinja2 templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from oas_client_generator.errors import TemplateError
from oas_client_generator.utils.string_case import snakecase


class ProjectTemplateEngine:
    """Template engine for the project files of a generated client."""

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize the template engine."""
        if template_dir is None:
            current_dir = Path(__file__).parent
            template_dir = current_dir.parent / "templates"

        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,  # noqa: S701
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters.update(
            {
                "snake_case": snakecase,
                "first_line": self._first_line,
            }
        )

    def render_template(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a template with the given context."""
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound as e:
            msg = f"Project template '{template_name}' not found in {self.template_dir}"
            raise TemplateError(msg) from e
        return template.render(**context)

    @staticmethod
    def _first_line(text: str | None) -> str:
        """First non-empty line of ``text``."""
        if not text:
            return ""
        return next((line.strip() for line in text.splitlines() if line.strip()), "")
