"""Shared fixtures: small OpenAPI documents and their parsed forms."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from oas_client_generator.config import GenerationConfig
from oas_client_generator.parser.models import ParsedSpec
from oas_client_generator.parser.oas_parser import OASParser

TEAM_SPEC: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Teams API", "version": "1.0.0", "description": "Manage teams."},
    "servers": [{"url": "https://api.example.com/v1"}],
    "paths": {
        "/teams/{id}": {
            "get": {
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                ],
                "responses": {
                    "200": {
                        "description": "The team",
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Team"}}},
                    }
                },
            }
        }
    },
    "components": {
        "schemas": {
            "Team": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                },
                "required": ["name"],
            }
        }
    },
}


@pytest.fixture
def team_spec_dict() -> dict[str, Any]:
    """A fresh copy of the single-endpoint Team document."""
    return copy.deepcopy(TEAM_SPEC)


@pytest.fixture
def parser() -> OASParser:
    return OASParser()


@pytest.fixture
def team_spec(parser: OASParser, team_spec_dict: dict[str, Any]) -> ParsedSpec:
    return parser.parse_dict(team_spec_dict)


@pytest.fixture
def team_spec_file(tmp_path: Path, team_spec_dict: dict[str, Any]) -> Path:
    spec_path = tmp_path / "teams.json"
    spec_path.write_text(json.dumps(team_spec_dict), encoding="utf-8")
    return spec_path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def python_config(output_dir: Path) -> GenerationConfig:
    return GenerationConfig(output_dir=output_dir, base_namespace="teams_client", dialect="python")


@pytest.fixture
def kotlin_config(output_dir: Path) -> GenerationConfig:
    return GenerationConfig(output_dir=output_dir, base_namespace="com.example.teams", dialect="kotlin")
