"""Tests for schema to type resolution."""

import logging

import pytest

from oas_client_generator.errors import (
    InvalidAdditionalPropertiesError,
    InvalidSchemaError,
    SchemaMissingNameError,
    UnknownPrimitiveTypeError,
    UnresolvableReferenceError,
)
from oas_client_generator.generator.dialects import KotlinDialect, PythonDialect
from oas_client_generator.generator.type_resolver import ResolvedType, TypeResolver
from oas_client_generator.parser.models import Components, Reference, Schema
from oas_client_generator.parser.references import ReferenceResolver

TEAM = Schema(
    type="object",
    properties={"id": Schema(type="integer"), "name": Schema(type="string")},
    required=("name",),
)
NODE = Schema(
    type="object",
    properties={
        "label": Schema(type="string"),
        "children": Schema(type="array", items=Reference("#/components/schemas/Node")),
    },
)


def make_resolver(dialect: object = None, **schemas: object) -> TypeResolver:
    components = Components(schemas={"Team": TEAM, "Node": NODE, **schemas})
    return TypeResolver(ReferenceResolver(components), dialect or PythonDialect(), "api")


@pytest.fixture
def types() -> TypeResolver:
    return make_resolver()


class TestPrimitives:
    """Primitive and array schemas."""

    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            (Schema(type="string"), "str"),
            (Schema(type="integer", format="int64"), "int"),
            (Schema(type="number"), "float"),
            (Schema(type="boolean"), "bool"),
            (Schema(type="string", format="binary"), "bytes"),
        ],
    )
    def test_python_scalars(self, types: TypeResolver, schema: Schema, expected: str) -> None:
        assert types.resolve_type(schema) == ResolvedType(expected, expected)

    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            (Schema(type="string"), "String"),
            (Schema(type="integer"), "Int"),
            (Schema(type="integer", format="int64"), "Long"),
            (Schema(type="number"), "Double"),
            (Schema(type="number", format="float"), "Float"),
            (Schema(type="boolean"), "Boolean"),
        ],
    )
    def test_kotlin_scalars(self, schema: Schema, expected: str) -> None:
        assert make_resolver(KotlinDialect()).resolve_type(schema).short_name == expected

    def test_unknown_primitive(self, types: TypeResolver) -> None:
        with pytest.raises(UnknownPrimitiveTypeError, match="'file'"):
            types.resolve_type(Schema(type="file"))

    def test_array_of_primitives(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(Schema(type="array", items=Schema(type="string")))
        assert resolved == ResolvedType("list[str]", "list[str]")

    def test_array_without_items(self, types: TypeResolver) -> None:
        with pytest.raises(InvalidSchemaError, match="'items'"):
            types.resolve_type(Schema(type="array"))

    def test_untyped_schema_with_items_is_an_array(self, types: TypeResolver) -> None:
        assert types.resolve_type(Schema(items=Schema(type="integer"))).short_name == "list[int]"

    def test_array_of_named_type(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(Schema(type="array", items=Reference("#/components/schemas/Team")))
        assert resolved == ResolvedType("list[Team]", "list[api.schemas.Team]", ("Team",))


class TestNamedTypes:
    """Object schemas with properties become registered named types."""

    def test_reference_registers_one_named_type(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(Reference("#/components/schemas/Team"))
        assert resolved == ResolvedType("Team", "api.schemas.Team", ("Team",))
        team = types.registry.get("Team")
        assert [(f.name, f.type.short_name, f.required) for f in team.fields] == [
            ("id", "int", False),
            ("name", "str", True),
        ]

    def test_resolution_is_idempotent(self, types: TypeResolver) -> None:
        first = types.resolve_type(Reference("#/components/schemas/Team"))
        second = types.resolve_type(Reference("#/components/schemas/Team"))
        third = types.resolve_type(TEAM, name="Team")
        assert first == second == third
        assert types.registry.names() == ["Team"]

    def test_reference_name_wins_over_supplied_name(self, types: TypeResolver) -> None:
        assert types.resolve_type(Reference("#/components/schemas/Team"), name="Other").short_name == "Team"

    def test_unnamed_object_with_properties(self, types: TypeResolver) -> None:
        with pytest.raises(SchemaMissingNameError):
            types.resolve_type(Schema(type="object", properties={"a": Schema(type="string")}))

    def test_inline_property_object_is_named_after_parent_and_property(self, types: TypeResolver) -> None:
        schema = Schema(
            type="object",
            properties={"owner-info": Schema(type="object", properties={"name": Schema(type="string")})},
        )
        types.resolve_type(schema, name="Club")
        assert types.registry.names() == ["Club", "ClubOwnerInfo"]
        (owner,) = types.registry.get("Club").fields
        assert owner.type.short_name == "ClubOwnerInfo"
        assert types.registry.get("Club").references == ["ClubOwnerInfo"]

    def test_self_reference_does_not_recurse(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(Reference("#/components/schemas/Node"))
        assert resolved.short_name == "Node"
        node = types.registry.get("Node")
        assert node.fields[1].type.short_name == "list[Node]"
        assert node.references == []
        assert types.registry.names() == ["Node"]

    def test_name_collision_gets_a_suffixed_name(
        self,
        types: TypeResolver,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        other = Schema(type="object", properties={"size": Schema(type="integer")})
        types.resolve_type(TEAM, name="Team")
        with caplog.at_level(logging.WARNING):
            resolved = types.resolve_type(other, name="Team")
        assert resolved == ResolvedType("Team2", "api.schemas.Team2", ("Team2",))
        assert types.registry.get("Team").schema == TEAM
        assert types.registry.get("Team2").schema == other
        assert "using 'Team2'" in caplog.text

    def test_suffixed_name_is_reused_for_the_same_schema(self, types: TypeResolver) -> None:
        other = Schema(type="object", properties={"size": Schema(type="integer")})
        first = types.resolve_type(other, name="Team")
        second = types.resolve_type(other, name="Team")
        assert first.short_name == second.short_name == "Team2"
        assert types.registry.names() == ["Team2"]

    def test_component_names_are_reserved_before_resolution(self, types: TypeResolver) -> None:
        inline = Schema(type="object", properties={"label": Schema(type="integer")})
        assert types.resolve_type(inline, name="Node").short_name == "Node2"
        types.resolve_components()
        assert types.registry.get("Node").schema == NODE
        assert types.resolve_type(Reference("#/components/schemas/Node")).short_name == "Node"

    def test_resolve_components_registers_every_object_schema(self) -> None:
        types = make_resolver(Count=Schema(type="integer"))
        types.resolve_components()
        assert types.registry.names() == ["Team", "Node"]

    def test_failing_property_records_its_location(self, types: TypeResolver) -> None:
        schema = Schema(type="object", properties={"bad": Schema(type="mystery")})
        with pytest.raises(UnknownPrimitiveTypeError) as exc_info:
            types.resolve_type(schema, name="Broken")
        assert "Broken.bad" in str(exc_info.value)

    def test_unresolvable_reference(self, types: TypeResolver) -> None:
        with pytest.raises(UnresolvableReferenceError):
            types.resolve_type(Reference("#/components/schemas/Missing"))


class TestObjectsWithoutNamedTypes:
    """Objects that resolve to unit or map types."""

    def test_empty_properties_is_unit(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(Schema(type="object", properties={}), name="Empty")
        assert resolved.short_name == "dict[str, Any]"
        assert len(types.registry) == 0

    def test_additional_properties_schema_is_a_map(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(Schema(type="object", additional_properties=Schema(type="integer")))
        assert resolved == ResolvedType("dict[str, int]", "dict[str, int]")

    def test_additional_properties_reference_keeps_qualified_value(self, types: TypeResolver) -> None:
        resolved = types.resolve_type(
            Schema(type="object", additional_properties=Reference("#/components/schemas/Team"))
        )
        assert resolved.short_name == "dict[str, Team]"
        assert resolved.qualified_name == "dict[str, api.schemas.Team]"

    def test_boolean_additional_properties(self, types: TypeResolver) -> None:
        with pytest.raises(InvalidAdditionalPropertiesError):
            types.resolve_type(Schema(type="object", additional_properties=True))

    def test_description_only_object_is_unit(self, types: TypeResolver) -> None:
        assert types.resolve_type(Schema(type="object", description="Free form")).short_name == "dict[str, Any]"

    def test_bare_object(self, types: TypeResolver) -> None:
        with pytest.raises(InvalidSchemaError, match="no 'properties' or 'additionalProperties'"):
            types.resolve_type(Schema(type="object"))

    def test_kotlin_unit_and_map(self) -> None:
        types = make_resolver(KotlinDialect())
        assert types.resolve_type(Schema(type="object", properties={}), name="E").short_name == "Unit"
        map_type = types.resolve_type(Schema(type="object", additional_properties=Schema(type="string")))
        assert map_type.short_name == "Map<String, String>"
