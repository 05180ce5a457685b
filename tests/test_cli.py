"""Tests for the command line interface."""

import json
from pathlib import Path
from typing import Any

import pytest

from oas_client_generator.cli import (
    EXIT_FILE_NOT_FOUND,
    EXIT_GENERATION_ERROR,
    EXIT_INVALID_JSON,
    EXIT_SUCCESS,
    main,
    parse_command_line_args,
)


@pytest.fixture
def existing_output(output_dir: Path) -> Path:
    output_dir.mkdir()
    keep = output_dir / "keep.txt"
    keep.write_text("previous run", encoding="utf-8")
    return keep


class TestArguments:
    def test_defaults(self) -> None:
        args = parse_command_line_args(["spec.json"])
        assert args.spec_file == Path("spec.json")
        assert args.output_dir == Path("./generated")
        assert args.namespace is None
        assert args.dialect == "python"
        assert args.template_dir is None
        assert not args.verbose

    def test_unknown_language_is_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_command_line_args(["spec.json", "--language", "rust"])


class TestMain:
    """Exit codes and output of a complete run."""

    def test_python_client(self, team_spec_file: Path, output_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        exit_code = main([str(team_spec_file), "--output", str(output_dir), "--namespace", "teams_client"])

        assert exit_code == EXIT_SUCCESS
        assert (output_dir / "api.py").is_file()
        assert (output_dir / "schemas" / "Team.py").is_file()
        assert "import teams_client.schemas" in (output_dir / "api.py").read_text(encoding="utf-8")
        assert f"Client generated successfully in {output_dir}" in capsys.readouterr().out

    def test_namespace_defaults_to_title(self, team_spec_file: Path, output_dir: Path) -> None:
        assert main([str(team_spec_file), "-o", str(output_dir)]) == EXIT_SUCCESS
        assert "import teams_api.schemas" in (output_dir / "api.py").read_text(encoding="utf-8")

    def test_kotlin_client(self, team_spec_file: Path, output_dir: Path) -> None:
        exit_code = main([str(team_spec_file), "-o", str(output_dir), "-l", "kotlin", "-n", "com.example.teams"])

        assert exit_code == EXIT_SUCCESS
        assert (output_dir / "API.kt").is_file()
        assert (output_dir / "schemas" / "Team.kt").is_file()
        assert not (output_dir / "api.py").exists()

    def test_previous_output_is_replaced(self, team_spec_file: Path, output_dir: Path, existing_output: Path) -> None:
        assert main([str(team_spec_file), "-o", str(output_dir)]) == EXIT_SUCCESS
        assert not existing_output.exists()

    def test_verbose_summary(self, team_spec_file: Path, output_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(team_spec_file), "-o", str(output_dir), "-v"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Parsed 1 operations" in out
        assert "Found 1 component schemas" in out
        assert "Generated 5 files:" in out

    def test_missing_spec_file(
        self,
        tmp_path: Path,
        output_dir: Path,
        existing_output: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main([str(tmp_path / "missing.json"), "-o", str(output_dir)]) == EXIT_FILE_NOT_FOUND
        assert existing_output.read_text(encoding="utf-8") == "previous run"
        assert "Specification file not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path: Path, output_dir: Path, existing_output: Path) -> None:
        spec_file = tmp_path / "broken.json"
        spec_file.write_text("{not json", encoding="utf-8")

        assert main([str(spec_file), "-o", str(output_dir)]) == EXIT_INVALID_JSON
        assert existing_output.read_text(encoding="utf-8") == "previous run"

    def test_generation_error_restores_output(
        self,
        tmp_path: Path,
        team_spec_dict: dict[str, Any],
        output_dir: Path,
        existing_output: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        team_spec_dict["openapi"] = "2.0"
        spec_file = tmp_path / "swagger.json"
        spec_file.write_text(json.dumps(team_spec_dict), encoding="utf-8")

        assert main([str(spec_file), "-o", str(output_dir)]) == EXIT_GENERATION_ERROR
        assert existing_output.read_text(encoding="utf-8") == "previous run"
        assert not (output_dir / "api.py").exists()
        assert "Unsupported OpenAPI version '2.0'" in capsys.readouterr().err

    def test_invalid_namespace(self, team_spec_file: Path, output_dir: Path) -> None:
        assert main([str(team_spec_file), "-o", str(output_dir), "-n", "not-a-package"]) == EXIT_GENERATION_ERROR
