"""Tests for the Python and Kotlin dialects."""

import pytest

from oas_client_generator.generator.dialects import (
    Endpoint,
    EndpointParameter,
    KotlinDialect,
    PythonDialect,
    Scope,
    get_dialect,
)
from oas_client_generator.generator.type_resolver import Field, NamedType, ResolvedType
from oas_client_generator.parser.models import Schema

INT = ResolvedType("int", "int")


@pytest.fixture
def python() -> PythonDialect:
    return PythonDialect()


@pytest.fixture
def kotlin() -> KotlinDialect:
    return KotlinDialect()


class TestLookup:
    def test_get_dialect(self) -> None:
        assert isinstance(get_dialect("python"), PythonDialect)
        assert isinstance(get_dialect("kotlin"), KotlinDialect)

    def test_unknown_dialect(self) -> None:
        with pytest.raises(ValueError, match="Unknown dialect 'rust'"):
            get_dialect("rust")


class TestPythonDialect:
    """Python spellings and snippets."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("id", "id"), ("teamId", "team_id"), ("X-Request-ID", "x_request_id"), ("from", "from_")],
    )
    def test_parameter_name(self, python: PythonDialect, name: str, expected: str) -> None:
        assert python.parameter_name(name) == expected

    def test_optional_type(self, python: PythonDialect) -> None:
        assert python.optional_type("int") == "Optional[int]"
        assert python.optional_type("Optional[int]") == "Optional[int]"
        assert python.optional_type("None") == "None"

    def test_url_expression(self, python: PythonDialect) -> None:
        assert python.url_expression("/teams/{id}", {"id": "id"}) == 'f"/teams/{id}"'
        assert python.url_expression("/teams", {}) == '"/teams"'
        assert python.url_expression("/teams/{teamId}/x", {"teamId": "team_id"}) == 'f"/teams/{team_id}/x"'

    def test_scope_name(self, python: PythonDialect) -> None:
        assert python.scope_name("{id}") == "Id"
        assert python.scope_name("team-members") == "TeamMembers"

    @pytest.mark.parametrize(("name", "expected"), [("none", "None_"), ("true", "True_"), ("False", "False_")])
    def test_keywords_are_escaped_in_class_names(self, python: PythonDialect, name: str, expected: str) -> None:
        assert python.scope_name(name) == expected
        assert python.type_name(name) == expected

    def test_kotlin_class_names_are_not_escaped(self, kotlin: KotlinDialect) -> None:
        assert kotlin.scope_name("none") == "None"

    def test_render_endpoint(self, python: PythonDialect) -> None:
        endpoint = Endpoint(
            verb="post",
            url="/teams",
            url_expression='"/teams"',
            return_type="Optional[api.schemas.Team]",
            parameters=(
                EndpointParameter("body", "body", "body", "api.schemas.Team", required=True),
                EndpointParameter("dryRun", "dry_run", "query", "Optional[bool]", required=False),
            ),
            summary="Create a team",
        )
        assert python.render_endpoint(endpoint) == (
            "@staticmethod\n"
            "def post(body: api.schemas.Team, dry_run: Optional[bool] = None) -> Optional[api.schemas.Team]:\n"
            '    """Create a team"""\n'
            "    return _request(\n"
            '        "POST",\n'
            '        "/teams",\n'
            '        params={"dryRun": dry_run},\n'
            "        json=body,\n"
            "    )"
        )

    def test_render_scope_with_functions_and_children(self, python: PythonDialect) -> None:
        scope = Scope(name="Teams", url="/teams", functions=["def a():\n    pass"], children=["class Id:\n    pass"])
        assert python.render_scope(scope) == (
            "class Teams:\n"
            '    """Endpoint: /teams"""\n'
            "    def a():\n"
            "        pass\n"
            "\n"
            "    class Id:\n"
            "        pass"
        )

    def test_render_empty_scope(self, python: PythonDialect) -> None:
        assert python.render_scope(Scope(name="Empty")) == "class Empty:\n    pass"

    def test_render_schema_class(self, python: PythonDialect) -> None:
        named = NamedType(
            name="Team",
            qualified_name="api.schemas.Team",
            schema=Schema(type="object", description="A team."),
            fields=[
                Field("id", "id", INT, required=False),
                Field("lead", "lead", ResolvedType("Member", "api.schemas.Member", ("Member",)), required=True),
            ],
        )
        rendered = python.render_schema(named, "api")
        assert "from typing import TYPE_CHECKING, NotRequired, TypedDict\n" in rendered
        assert "if TYPE_CHECKING:\n    from .Member import Member\n" in rendered
        assert 'class Team(TypedDict):\n    """A team."""\n    id: NotRequired[int]\n    lead: Member\n' in rendered

    def test_render_schema_with_non_identifier_keys(self, python: PythonDialect) -> None:
        named = NamedType(
            name="Thing",
            qualified_name="api.schemas.Thing",
            schema=Schema(type="object"),
            fields=[Field("team-id", "team_id", INT, required=False), Field("class", "class_", INT, required=True)],
        )
        rendered = python.render_schema(named, "api")
        assert 'Thing = TypedDict(\n    "Thing",\n    {\n' in rendered
        assert '        "team-id": "NotRequired[int]",\n        "class": "int",\n    },\n)\n' in rendered


class TestKotlinDialect:
    """Kotlin spellings and snippets."""

    @pytest.mark.parametrize(("name", "expected"), [("team-id", "teamId"), ("Id", "id"), ("in", "`in`")])
    def test_parameter_name(self, kotlin: KotlinDialect, name: str, expected: str) -> None:
        assert kotlin.parameter_name(name) == expected

    def test_optional_type(self, kotlin: KotlinDialect) -> None:
        assert kotlin.optional_type("Int") == "Int?"
        assert kotlin.optional_type("Int?") == "Int?"

    def test_url_expression(self, kotlin: KotlinDialect) -> None:
        assert kotlin.url_expression("/teams/{teamId}", {"teamId": "teamId"}) == '"/teams/${teamId}"'
        assert kotlin.url_expression("/price$", {}) == '"/price\\$"'

    def test_render_endpoint(self, kotlin: KotlinDialect) -> None:
        endpoint = Endpoint(
            verb="get",
            url="/teams",
            url_expression='"/teams"',
            return_type="List<com.example.schemas.Team>?",
            parameters=(EndpointParameter("limit", "limit", "query", "Int?", required=False),),
        )
        assert kotlin.render_endpoint(endpoint) == (
            "suspend fun get(limit: Int? = null): List<com.example.schemas.Team>? = "
            'API.client.request("/teams") {\n'
            "    method = HttpMethod.Get\n"
            '    parameter("limit", limit)\n'
            "}.body()"
        )

    def test_render_schema(self, kotlin: KotlinDialect) -> None:
        named = NamedType(
            name="Team",
            qualified_name="com.example.schemas.Team",
            schema=Schema(type="object"),
            fields=[
                Field("id", "id", ResolvedType("Int", "Int"), required=False),
                Field("name", "name", ResolvedType("String", "String"), required=True),
            ],
        )
        assert kotlin.render_schema(named, "com.example") == (
            "package com.example.schemas\n"
            "\n"
            "import kotlinx.serialization.SerialName\n"
            "import kotlinx.serialization.Serializable\n"
            "\n"
            "@Serializable\n"
            "data class Team(\n"
            '    @SerialName("id") val id: Int? = null,\n'
            '    @SerialName("name") val name: String,\n'
            ")\n"
        )
