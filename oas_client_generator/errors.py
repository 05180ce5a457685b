"""
Error taxonomy for the OAS client generator.

Every failure that aborts a generation run derives from ``GeneratorError``.
Generation is fail-fast: nothing catches these inside the pipeline except to
attach the location that was being processed before re-raising.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for every error that aborts a generation run."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def add_context(self, location: str) -> None:
        """Record where the error surfaced, innermost location first."""
        self.context.append(location)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} (while generating {' <- '.join(self.context)})"


# Templating


class TemplateError(GeneratorError):
    """Base class for template parsing and building failures."""


class TemplateSyntaxError(TemplateError):
    """The template text does not follow the placeholder grammar."""

    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


class MissingRequiredVariableError(TemplateError):
    """A placeholder that is neither optional nor nullable was not supplied."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required variable '{name}' not supplied")
        self.name = name


class TypeMismatchError(TemplateError):
    """A value (or a declaration) does not fit the placeholder it targets."""


# Specification documents


class SpecificationError(GeneratorError):
    """Base class for problems with the specification document itself."""


class InvalidSpecificationError(SpecificationError):
    """The document is malformed or is not an OpenAPI 3.0.x document."""


class UnresolvableReferenceError(SpecificationError):
    """A ``$ref`` pointer names an unknown section or a missing entry."""


# Type resolution


class TypeResolutionError(GeneratorError):
    """Base class for schemas that cannot be mapped to an output type."""


class SchemaMissingNameError(TypeResolutionError):
    """An object schema with properties could not be assigned any type name."""


class InvalidAdditionalPropertiesError(TypeResolutionError):
    """``additionalProperties`` is a boolean where a schema was required."""


class UnknownPrimitiveTypeError(TypeResolutionError):
    """The schema ``type`` is not one of the supported primitives."""


class InvalidSchemaError(TypeResolutionError):
    """The schema lacks the fields its ``type`` needs (``items``, ``properties``...)."""
