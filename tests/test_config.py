"""Tests for run configuration and the error taxonomy."""

from pathlib import Path

import pytest

from oas_client_generator.config import DEFAULT_NAMESPACE, GenerationConfig, namespace_from_title
from oas_client_generator.errors import (
    GeneratorError,
    MissingRequiredVariableError,
    TemplateError,
    TemplateSyntaxError,
    TypeResolutionError,
    UnknownPrimitiveTypeError,
)


class TestGenerationConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        config = GenerationConfig(output_dir=tmp_path)
        assert config.base_namespace == DEFAULT_NAMESPACE
        assert config.dialect == "python"
        assert config.template_dir is None

    def test_paths_are_coerced(self, tmp_path: Path) -> None:
        config = GenerationConfig(output_dir=str(tmp_path), template_dir=str(tmp_path))  # type: ignore[arg-type]
        assert config.output_dir == tmp_path
        assert config.template_dir == tmp_path

    def test_dotted_namespace(self, tmp_path: Path) -> None:
        assert GenerationConfig(output_dir=tmp_path, base_namespace="com.example.teams").base_namespace

    @pytest.mark.parametrize("namespace", ["", "   ", "teams-client", "com..example", "1st"])
    def test_invalid_namespace(self, tmp_path: Path, namespace: str) -> None:
        with pytest.raises(ValueError, match="namespace"):
            GenerationConfig(output_dir=tmp_path, base_namespace=namespace)


class TestNamespaceFromTitle:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Teams API", "teams_api"),
            ("Pet Store", "pet_store"),
            ("  ", DEFAULT_NAMESPACE),
        ],
    )
    def test_namespace_from_title(self, title: str, expected: str) -> None:
        assert namespace_from_title(title) == expected


class TestErrors:
    def test_context_is_reported_innermost_first(self) -> None:
        error = UnknownPrimitiveTypeError("Unknown primitive type 'file'")
        error.add_context("Team.avatar")
        error.add_context("GET /teams/{id}")
        assert str(error) == "Unknown primitive type 'file' (while generating Team.avatar <- GET /teams/{id})"

    def test_without_context(self) -> None:
        assert str(GeneratorError("boom")) == "boom"

    def test_hierarchy(self) -> None:
        assert issubclass(MissingRequiredVariableError, TemplateError)
        assert issubclass(UnknownPrimitiveTypeError, TypeResolutionError)
        assert issubclass(TemplateSyntaxError, GeneratorError)

    def test_syntax_error_position(self) -> None:
        error = TemplateSyntaxError("Unterminated placeholder", line=3, column=7)
        assert (error.line, error.column) == (3, 7)
        assert str(error) == "Unterminated placeholder at line 3, column 7"

    def test_missing_variable_message(self) -> None:
        assert str(MissingRequiredVariableError("name")) == "Required variable 'name' not supplied"
