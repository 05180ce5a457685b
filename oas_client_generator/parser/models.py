"""
Typed in-memory model of an OpenAPI 3.0.3 document.

Every field the specification allows to be a ``$ref`` is typed
``RefOr[T]``: either a :class:`Reference` or the inline value. The model is
immutable once parsed. https://spec.openapis.org/oas/v3.0.3.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, TypeVar, Union

T = TypeVar("T")

# Order in which a path item's operations are visited and emitted
HTTP_METHODS: Final = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


@dataclass(frozen=True)
class Reference:
    """A ``$ref`` pointer such as ``#/components/schemas/Team``."""

    ref: str


RefOr = Union[Reference, T]


@dataclass(frozen=True)
class Contact:
    name: str | None = None
    url: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class License:
    name: str
    url: str | None = None


@dataclass(frozen=True)
class Info:
    title: str
    version: str
    description: str | None = None
    terms_of_service: str | None = None
    contact: Contact | None = None
    license: License | None = None


@dataclass(frozen=True)
class ServerVariable:
    default: str
    enum: tuple[str, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class Server:
    url: str
    description: str | None = None
    variables: dict[str, ServerVariable] = field(default_factory=dict)


@dataclass(frozen=True)
class ExternalDocumentation:
    url: str
    description: str | None = None


@dataclass(frozen=True)
class Tag:
    name: str
    description: str | None = None
    external_docs: ExternalDocumentation | None = None


@dataclass(frozen=True)
class Discriminator:
    property_name: str
    mapping: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Schema:
    """A Schema Object.

    ``additional_properties`` keeps the boolean / schema duality of the
    document: ``True``/``False``, an inline schema, a reference, or ``None``
    when absent.
    """

    type: str | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None
    properties: dict[str, RefOr[Schema]] | None = None
    required: tuple[str, ...] = ()
    items: RefOr[Schema] | None = None
    additional_properties: bool | RefOr[Schema] | None = None
    enum: tuple[Any, ...] | None = None
    default: Any = None
    example: Any = None
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False
    all_of: tuple[RefOr[Schema], ...] = ()
    one_of: tuple[RefOr[Schema], ...] = ()
    any_of: tuple[RefOr[Schema], ...] = ()
    not_: RefOr[Schema] | None = None
    discriminator: Discriminator | None = None


@dataclass(frozen=True)
class Example:
    summary: str | None = None
    description: str | None = None
    value: Any = None
    external_value: str | None = None


@dataclass(frozen=True)
class Header:
    description: str | None = None
    required: bool = False
    deprecated: bool = False
    schema: RefOr[Schema] | None = None
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass(frozen=True)
class Encoding:
    content_type: str | None = None
    headers: dict[str, RefOr[Header]] = field(default_factory=dict)
    style: str | None = None
    explode: bool = True
    allow_reserved: bool = False


@dataclass(frozen=True)
class MediaType:
    schema: RefOr[Schema] | None = None
    example: Any = None
    examples: dict[str, RefOr[Example]] = field(default_factory=dict)
    encoding: dict[str, Encoding] = field(default_factory=dict)


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    description: str | None = None
    required: bool = False
    deprecated: bool = False
    allow_empty_value: bool = False
    style: str | None = None
    explode: bool = True
    allow_reserved: bool = False
    schema: RefOr[Schema] | None = None
    content: dict[str, MediaType] = field(default_factory=dict)
    example: Any = None


@dataclass(frozen=True)
class RequestBody:
    content: dict[str, MediaType]
    description: str | None = None
    required: bool = False


@dataclass(frozen=True)
class Link:
    operation_ref: str | None = None
    operation_id: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    request_body: Any = None
    description: str | None = None
    server: Server | None = None


@dataclass(frozen=True)
class Response:
    description: str
    headers: dict[str, RefOr[Header]] = field(default_factory=dict)
    content: dict[str, MediaType] = field(default_factory=dict)
    links: dict[str, RefOr[Link]] = field(default_factory=dict)


@dataclass(frozen=True)
class Responses:
    """Responses of an operation, ``default`` kept apart from the status codes."""

    default: RefOr[Response] | None = None
    status_codes: dict[str, RefOr[Response]] = field(default_factory=dict)


@dataclass(frozen=True)
class OAuthFlow:
    scopes: dict[str, str]
    authorization_url: str | None = None
    token_url: str | None = None
    refresh_url: str | None = None


@dataclass(frozen=True)
class OAuthFlows:
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None


@dataclass(frozen=True)
class SecurityScheme:
    type: str
    description: str | None = None
    name: str | None = None
    location: str | None = None
    scheme: str | None = None
    bearer_format: str | None = None
    flows: OAuthFlows | None = None
    open_id_connect_url: str | None = None


@dataclass(frozen=True)
class Operation:
    responses: Responses
    tags: tuple[str, ...] = ()
    summary: str | None = None
    description: str | None = None
    external_docs: ExternalDocumentation | None = None
    operation_id: str | None = None
    parameters: tuple[RefOr[Parameter], ...] = ()
    request_body: RefOr[RequestBody] | None = None
    callbacks: dict[str, RefOr[Callback]] = field(default_factory=dict)
    deprecated: bool = False
    security: tuple[dict[str, tuple[str, ...]], ...] | None = None
    servers: tuple[Server, ...] = ()


@dataclass(frozen=True)
class PathItem:
    """A Path Item Object; ``operations`` is keyed by lowercase HTTP verb in ``HTTP_METHODS`` order."""

    ref: str | None = None
    summary: str | None = None
    description: str | None = None
    operations: dict[str, Operation] = field(default_factory=dict)
    servers: tuple[Server, ...] = ()
    parameters: tuple[RefOr[Parameter], ...] = ()


@dataclass(frozen=True)
class Callback:
    """Runtime expression to the path item invoked for it."""

    expressions: dict[str, PathItem] = field(default_factory=dict)


# Reference pointer section -> Components attribute
COMPONENT_SECTIONS: Final = {
    "schemas": "schemas",
    "responses": "responses",
    "parameters": "parameters",
    "examples": "examples",
    "requestBodies": "request_bodies",
    "headers": "headers",
    "securitySchemes": "security_schemes",
    "links": "links",
    "callbacks": "callbacks",
}


@dataclass(frozen=True)
class Components:
    schemas: dict[str, RefOr[Schema]] = field(default_factory=dict)
    responses: dict[str, RefOr[Response]] = field(default_factory=dict)
    parameters: dict[str, RefOr[Parameter]] = field(default_factory=dict)
    examples: dict[str, RefOr[Example]] = field(default_factory=dict)
    request_bodies: dict[str, RefOr[RequestBody]] = field(default_factory=dict)
    headers: dict[str, RefOr[Header]] = field(default_factory=dict)
    security_schemes: dict[str, RefOr[SecurityScheme]] = field(default_factory=dict)
    links: dict[str, RefOr[Link]] = field(default_factory=dict)
    callbacks: dict[str, RefOr[Callback]] = field(default_factory=dict)

    def section(self, pointer_section: str) -> dict[str, Any] | None:
        """Return the table a ``#/components/<section>/...`` pointer addresses, if the section exists."""
        attribute = COMPONENT_SECTIONS.get(pointer_section)
        return getattr(self, attribute) if attribute else None


@dataclass(frozen=True)
class ParsedSpec:
    """Represents a parsed OpenAPI specification."""

    openapi: str
    info: Info
    paths: dict[str, PathItem]
    servers: tuple[Server, ...] = ()
    components: Components = field(default_factory=Components)
    tags: tuple[Tag, ...] = ()
    external_docs: ExternalDocumentation | None = None
    security: tuple[dict[str, tuple[str, ...]], ...] = ()

    @property
    def operation_count(self) -> int:
        return sum(len(path_item.operations) for path_item in self.paths.values())
