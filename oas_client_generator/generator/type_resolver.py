"""
Schema to type resolution.

:class:`TypeResolver` maps schemas of a parsed document to the type spellings
of a target :class:`~oas_client_generator.generator.dialects.Dialect`. Object
schemas with properties become named types, collected once each in a
:class:`TypeRegistry` from which the emitter writes one file per type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from oas_client_generator.errors import (
    GeneratorError,
    InvalidAdditionalPropertiesError,
    InvalidSchemaError,
    SchemaMissingNameError,
    UnknownPrimitiveTypeError,
)
from oas_client_generator.parser.models import Reference, RefOr, Schema
from oas_client_generator.parser.references import ReferenceResolver, follow
from oas_client_generator.utils.string_case import class_name

if TYPE_CHECKING:
    from oas_client_generator.generator.dialects import Dialect

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES: Final = frozenset({"string", "integer", "boolean", "number"})


@dataclass(frozen=True)
class ResolvedType:
    """Spellings of one resolved schema.

    ``short_name`` is valid next to the named types (inside the schemas
    package), ``qualified_name`` anywhere in the generated client.
    ``named_types`` lists the registered types the spelling mentions.
    """

    short_name: str
    qualified_name: str
    named_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class Field:
    """A property of a named type."""

    name: str
    identifier: str
    type: ResolvedType
    required: bool
    description: str | None = None


@dataclass
class NamedType:
    """An object schema emitted as its own type.

    Registered before its fields are resolved so that self references and
    repeated resolutions find it instead of recursing.
    """

    name: str
    qualified_name: str
    schema: Schema
    fields: list[Field] = field(default_factory=list)

    @property
    def description(self) -> str | None:
        return self.schema.description or self.schema.title

    @property
    def references(self) -> list[str]:
        """Other named types the fields mention, in first-use order."""
        names: dict[str, None] = {}
        for f in self.fields:
            for name in f.type.named_types:
                if name != self.name:
                    names.setdefault(name)
        return list(names)


class TypeRegistry:
    """Ordered, write-once collection of named types keyed by name."""

    def __init__(self) -> None:
        self._types: dict[str, NamedType] = {}

    def register(self, named_type: NamedType) -> None:
        if named_type.name in self._types:
            msg = f"Type '{named_type.name}' is already registered"
            raise ValueError(msg)
        self._types[named_type.name] = named_type

    def get(self, name: str) -> NamedType | None:
        return self._types.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[NamedType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def names(self) -> list[str]:
        return list(self._types)


class TypeResolver:
    """Resolves schemas to dialect types, registering named object types."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        dialect: Dialect,
        namespace: str,
        registry: TypeRegistry | None = None,
    ) -> None:
        self.resolver = resolver
        self.dialect = dialect
        self.namespace = namespace
        self.registry = registry if registry is not None else TypeRegistry()
        # Names of the component schemas; inline schemas may not take them
        self._reserved: dict[str, Schema] = {}
        if resolver.components is not None:
            for key, schema in resolver.components.schemas.items():
                if isinstance(schema, Schema):
                    self._reserved.setdefault(dialect.type_name(class_name(key)), schema)

    def resolve_type(
        self,
        schema: RefOr[Schema],
        name: str | None = None,
        parent_name: str | None = None,
        property_name: str | None = None,
    ) -> ResolvedType:
        """Resolve ``schema`` to the type the generated client uses for it.

        Args:
            schema: The schema or a reference to one.
            name: Name for the type when ``schema`` is inline. A reference
                always names the type after its target instead.
            parent_name: Name of the enclosing named type, for inline
                property schemas.
            property_name: Property the inline schema belongs to.

        Returns:
            The short and qualified spellings of the type.

        Raises:
            TypeResolutionError: The schema cannot be mapped to a type.
            UnresolvableReferenceError: A reference on the way cannot be resolved.
        """
        ref_name, resolved = follow(self.resolver, schema, None, Schema)
        if ref_name is not None:
            name = ref_name
        elif name is None and parent_name and property_name:
            name = parent_name + class_name(property_name)
        if name:
            name = self.dialect.type_name(name)

        kind = self._kind(resolved)
        if kind == "object":
            return self._resolve_object(resolved, name)
        if kind == "array":
            return self._resolve_array(resolved, name, parent_name, property_name)
        return self._resolve_primitive(resolved, kind)

    def resolve_components(self) -> None:
        """Resolve every schema under ``components.schemas``, named after its key."""
        components = self.resolver.components
        if components is None:
            return
        for key, schema in components.schemas.items():
            try:
                self.resolve_type(schema, name=class_name(key))
            except GeneratorError as e:
                e.add_context(f"components.schemas.{key}")
                raise

    @staticmethod
    def _kind(schema: Schema) -> str:
        if schema.type is not None:
            return schema.type
        if schema.items is not None:
            return "array"
        # Untyped schemas are read as objects, then judged by the object rules
        return "object"

    def _resolve_object(self, schema: Schema, name: str | None) -> ResolvedType:
        if schema.properties is not None:
            if not schema.properties:
                return self._unit()
            return self._resolve_named(schema, name)

        additional = schema.additional_properties
        if additional is not None:
            if isinstance(additional, bool):
                msg = "Boolean supplied for 'additionalProperties', where a schema was expected"
                raise InvalidAdditionalPropertiesError(msg)
            value = self.resolve_type(additional, parent_name=name, property_name="Value" if name else None)
            return ResolvedType(
                short_name=self.dialect.map_type(value.short_name),
                qualified_name=self.dialect.map_type(value.qualified_name),
                named_types=value.named_types,
            )

        if schema.description is not None:
            return self._unit()
        msg = "Schema is of type 'object' but no 'properties' or 'additionalProperties' were supplied"
        raise InvalidSchemaError(msg)

    def _resolve_named(self, schema: Schema, name: str | None) -> ResolvedType:
        if not name:
            msg = "Object schema with properties needs a name: reference it from components or nest it in a named type"
            raise SchemaMissingNameError(msg)

        name, existing = self._claim(name, schema)
        if existing is not None:
            return self._named(existing)

        named_type = NamedType(name=name, qualified_name=self.dialect.qualify(self.namespace, name), schema=schema)
        self.registry.register(named_type)
        logger.debug("Registered type %s", name)

        for property_name, property_schema in schema.properties.items():
            try:
                resolved = self.resolve_type(property_schema, parent_name=name, property_name=property_name)
            except GeneratorError as e:
                e.add_context(f"{name}.{property_name}")
                raise
            named_type.fields.append(
                Field(
                    name=property_name,
                    identifier=self.dialect.field_name(property_name),
                    type=resolved,
                    required=property_name in schema.required,
                    description=self._description(property_schema),
                )
            )
        return self._named(named_type)

    def _claim(self, name: str, schema: Schema) -> tuple[str, NamedType | None]:
        """Pick the type name for ``schema``: ``name``, or ``name`` with a numeric suffix.

        A name is available to ``schema`` when it is registered for an equal
        schema, or unregistered and not reserved for a different component
        schema. Returns the name and the already registered type, if any.
        """
        candidate = name
        suffix = 1
        while True:
            existing = self.registry.get(candidate)
            if existing is not None:
                if existing.schema == schema:
                    return candidate, existing
            else:
                reserved = self._reserved.get(candidate)
                if reserved is None or reserved == schema:
                    if candidate != name:
                        logger.warning("Type name '%s' is taken by another schema, using '%s'", name, candidate)
                    return candidate, None
            suffix += 1
            candidate = f"{name}{suffix}"

    def _resolve_array(
        self,
        schema: Schema,
        name: str | None,
        parent_name: str | None,
        property_name: str | None,
    ) -> ResolvedType:
        if schema.items is None:
            msg = "Schema is of type 'array' but no 'items' were supplied"
            raise InvalidSchemaError(msg)
        # An inline item schema is named like the array would have been
        item = self.resolve_type(schema.items, name=name, parent_name=parent_name, property_name=property_name)
        return ResolvedType(
            short_name=self.dialect.sequence_type(item.short_name),
            qualified_name=self.dialect.sequence_type(item.qualified_name),
            named_types=item.named_types,
        )

    def _resolve_primitive(self, schema: Schema, kind: str) -> ResolvedType:
        spelling = self.dialect.scalar_type(kind, schema.format) if kind in PRIMITIVE_TYPES else None
        if spelling is None:
            msg = f"Unknown primitive type '{kind}'"
            raise UnknownPrimitiveTypeError(msg)
        return ResolvedType(short_name=spelling, qualified_name=spelling)

    def _named(self, named_type: NamedType) -> ResolvedType:
        return ResolvedType(
            short_name=named_type.name,
            qualified_name=named_type.qualified_name,
            named_types=(named_type.name,),
        )

    def _unit(self) -> ResolvedType:
        return ResolvedType(short_name=self.dialect.unit_type, qualified_name=self.dialect.unit_type)

    def _description(self, schema: RefOr[Schema]) -> str | None:
        if isinstance(schema, Reference):
            return None
        return schema.description
