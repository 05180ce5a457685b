"""Configuration of a single generation run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from oas_client_generator.utils.string_case import normalize_identifier, snakecase

DEFAULT_DIALECT: Final = "python"
DEFAULT_NAMESPACE: Final = "api_client"


@dataclass(frozen=True)
class GenerationConfig:
    """Where to write the client and how to name it.

    Attributes:
        output_dir: Root of the generated tree; every returned path is below it.
        base_namespace: Package (Python) or package prefix (Kotlin) of the
            generated client, e.g. ``teams_client`` or ``com.example.teams``.
        dialect: Name of the target dialect, ``python`` or ``kotlin``.
        template_dir: Optional directory overriding the bundled Jinja2 project templates.
    """

    output_dir: Path
    base_namespace: str = DEFAULT_NAMESPACE
    dialect: str = DEFAULT_DIALECT
    template_dir: Path | None = None

    def __post_init__(self) -> None:
        if not self.base_namespace or not self.base_namespace.strip():
            msg = "The base namespace must not be empty"
            raise ValueError(msg)
        if any(not part.isidentifier() for part in self.base_namespace.split(".")):
            msg = f"The base namespace '{self.base_namespace}' is not a dotted identifier"
            raise ValueError(msg)
        # Accept plain strings from callers that do not build Paths themselves
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        if self.template_dir is not None:
            object.__setattr__(self, "template_dir", Path(self.template_dir))


def namespace_from_title(title: str) -> str:
    """Derive a package name such as ``teams_api`` from a document title."""
    words = normalize_identifier(snakecase(title.strip())).split("_")
    return normalize_identifier("_".join(word for word in words if word)) or DEFAULT_NAMESPACE
