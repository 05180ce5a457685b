"""
OpenAPI Specification Parser.

This module turns a decoded OpenAPI 3.0.x JSON document into the typed model of
:mod:`oas_client_generator.parser.models`. Parsing is lenient towards unknown
fields and strict about the fields the specification requires: a malformed
document raises :class:`InvalidSpecificationError` instead of being patched up.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Final

from oas_client_generator.errors import InvalidSpecificationError
from oas_client_generator.parser.models import (
    HTTP_METHODS,
    Callback,
    Components,
    Contact,
    Discriminator,
    Encoding,
    Example,
    ExternalDocumentation,
    Header,
    Info,
    License,
    Link,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    Operation,
    Parameter,
    ParsedSpec,
    PathItem,
    Reference,
    RefOr,
    RequestBody,
    Response,
    Responses,
    Schema,
    SecurityScheme,
    Server,
    ServerVariable,
    Tag,
)

logger = logging.getLogger(__name__)

_SUPPORTED_VERSION_PREFIX: Final = "3.0."
_EXTENSION_PREFIX: Final = "x-"


def _mapping(value: Any, where: str) -> dict[str, Any]:  # noqa: ANN401
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"Expected an object at {where}, got {type(value).__name__}"
        raise InvalidSpecificationError(msg)
    return value


def _sequence(value: Any, where: str) -> list[Any]:  # noqa: ANN401
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"Expected an array at {where}, got {type(value).__name__}"
        raise InvalidSpecificationError(msg)
    return value


def _required(data: dict[str, Any], key: str, where: str) -> Any:  # noqa: ANN401
    if key not in data or data[key] is None:
        msg = f"Missing required field '{key}' at {where}"
        raise InvalidSpecificationError(msg)
    return data[key]


def _fields(data: dict[str, Any]) -> dict[str, Any]:
    """Drop specification extensions (``x-*``) from a patterned object."""
    return {key: value for key, value in data.items() if not key.startswith(_EXTENSION_PREFIX)}


def _reference(data: dict[str, Any]) -> Reference | None:
    ref = data.get("$ref")
    if ref is None:
        return None
    if not isinstance(ref, str):
        msg = f"Expected a string $ref, got {type(ref).__name__}"
        raise InvalidSpecificationError(msg)
    return Reference(ref)


class OASParser:
    """Parser for OpenAPI 3.0.x specifications."""

    def parse_file(self, file_path: str | Path) -> ParsedSpec:
        """Parse OpenAPI specification from a JSON file."""
        path = Path(file_path)
        logger.info("Parsing %s into an object per the OpenAPI 3.0.3 specification", path)
        with path.open(encoding="utf-8") as f:
            spec_data = json.load(f)
        return self.parse_dict(spec_data)

    def parse_dict(self, spec_dict: dict[str, Any]) -> ParsedSpec:
        """Parse OpenAPI specification from dictionary."""
        if not isinstance(spec_dict, dict) or not spec_dict:
            msg = "No specification data loaded"
            raise InvalidSpecificationError(msg)

        version = str(_required(spec_dict, "openapi", "the document root"))
        if not version.startswith(_SUPPORTED_VERSION_PREFIX):
            msg = f"Unsupported OpenAPI version '{version}', only 3.0.x documents are supported"
            raise InvalidSpecificationError(msg)

        spec = ParsedSpec(
            openapi=version,
            info=self._parse_info(_mapping(_required(spec_dict, "info", "the document root"), "info")),
            paths=self._parse_paths(_mapping(_required(spec_dict, "paths", "the document root"), "paths")),
            servers=tuple(self._parse_server(s) for s in _sequence(spec_dict.get("servers"), "servers")),
            components=self._parse_components(_mapping(spec_dict.get("components"), "components")),
            tags=tuple(self._parse_tag(t) for t in _sequence(spec_dict.get("tags"), "tags")),
            external_docs=self._parse_external_docs(spec_dict.get("externalDocs")),
            security=self._parse_security(spec_dict.get("security"), "security") or (),
        )
        logger.info(
            "Parsed '%s' v%s: %d paths, %d operations, %d schemas",
            spec.info.title,
            spec.info.version,
            len(spec.paths),
            spec.operation_count,
            len(spec.components.schemas),
        )
        return spec

    # Document metadata

    def _parse_info(self, data: dict[str, Any]) -> Info:
        contact = _mapping(data.get("contact"), "info.contact")
        license_data = _mapping(data.get("license"), "info.license")
        return Info(
            title=str(_required(data, "title", "info")),
            version=str(_required(data, "version", "info")),
            description=data.get("description"),
            terms_of_service=data.get("termsOfService"),
            contact=Contact(name=contact.get("name"), url=contact.get("url"), email=contact.get("email"))
            if contact
            else None,
            license=License(name=_required(license_data, "name", "info.license"), url=license_data.get("url"))
            if license_data
            else None,
        )

    def _parse_server(self, data: Any) -> Server:  # noqa: ANN401
        data = _mapping(data, "server")
        variables = {
            name: ServerVariable(
                default=str(_required(_mapping(variable, f"server variable '{name}'"), "default", name)),
                enum=tuple(str(v) for v in _sequence(variable.get("enum"), f"server variable '{name}'.enum")),
                description=variable.get("description"),
            )
            for name, variable in _mapping(data.get("variables"), "server.variables").items()
        }
        return Server(url=_required(data, "url", "server"), description=data.get("description"), variables=variables)

    def _parse_tag(self, data: Any) -> Tag:  # noqa: ANN401
        data = _mapping(data, "tag")
        return Tag(
            name=_required(data, "name", "tag"),
            description=data.get("description"),
            external_docs=self._parse_external_docs(data.get("externalDocs")),
        )

    def _parse_external_docs(self, data: Any) -> ExternalDocumentation | None:  # noqa: ANN401
        if data is None:
            return None
        data = _mapping(data, "externalDocs")
        return ExternalDocumentation(url=_required(data, "url", "externalDocs"), description=data.get("description"))

    def _parse_security(self, data: Any, where: str) -> tuple[dict[str, tuple[str, ...]], ...] | None:  # noqa: ANN401
        if data is None:
            return None
        return tuple(
            {name: tuple(scopes) for name, scopes in _mapping(requirement, where).items()}
            for requirement in _sequence(data, where)
        )

    # Paths and operations

    def _parse_paths(self, data: dict[str, Any]) -> dict[str, PathItem]:
        paths = {}
        for url, path_data in _fields(data).items():
            if not url.startswith("/"):
                msg = f"Path '{url}' must begin with '/'"
                raise InvalidSpecificationError(msg)
            paths[url] = self._parse_path_item(_mapping(path_data, f"paths['{url}']"), url)
        return paths

    def _parse_path_item(self, data: dict[str, Any], where: str) -> PathItem:
        operations = {
            method: self._parse_operation(_mapping(data[method], f"{method.upper()} {where}"), f"{method.upper()} {where}")
            for method in HTTP_METHODS
            if data.get(method) is not None
        }
        return PathItem(
            ref=data.get("$ref"),
            summary=data.get("summary"),
            description=data.get("description"),
            operations=operations,
            servers=tuple(self._parse_server(s) for s in _sequence(data.get("servers"), f"{where}.servers")),
            parameters=self._parse_parameter_list(data.get("parameters"), where),
        )

    def _parse_operation(self, data: dict[str, Any], where: str) -> Operation:
        request_body = data.get("requestBody")
        return Operation(
            responses=self._parse_responses(_mapping(_required(data, "responses", where), f"{where}.responses"), where),
            tags=tuple(_sequence(data.get("tags"), f"{where}.tags")),
            summary=data.get("summary"),
            description=data.get("description"),
            external_docs=self._parse_external_docs(data.get("externalDocs")),
            operation_id=data.get("operationId"),
            parameters=self._parse_parameter_list(data.get("parameters"), where),
            request_body=self._parse_request_body(request_body, f"{where}.requestBody")
            if request_body is not None
            else None,
            callbacks={
                name: self._parse_callback(callback, f"{where}.callbacks.{name}")
                for name, callback in _fields(_mapping(data.get("callbacks"), f"{where}.callbacks")).items()
            },
            deprecated=bool(data.get("deprecated", False)),
            security=self._parse_security(data.get("security"), f"{where}.security"),
            servers=tuple(self._parse_server(s) for s in _sequence(data.get("servers"), f"{where}.servers")),
        )

    def _parse_parameter_list(self, data: Any, where: str) -> tuple[RefOr[Parameter], ...]:  # noqa: ANN401
        return tuple(
            self._parse_parameter(param, f"{where}.parameters[{index}]")
            for index, param in enumerate(_sequence(data, f"{where}.parameters"))
        )

    def _parse_parameter(self, data: Any, where: str) -> RefOr[Parameter]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        return Parameter(
            name=_required(data, "name", where),
            location=_required(data, "in", where),
            description=data.get("description"),
            required=bool(data.get("required", False)),
            deprecated=bool(data.get("deprecated", False)),
            allow_empty_value=bool(data.get("allowEmptyValue", False)),
            style=data.get("style"),
            explode=bool(data.get("explode", True)),
            allow_reserved=bool(data.get("allowReserved", False)),
            schema=self._parse_schema(data["schema"], f"{where}.schema") if data.get("schema") is not None else None,
            content=self._parse_content(data.get("content"), where),
            example=data.get("example"),
        )

    def _parse_request_body(self, data: Any, where: str) -> RefOr[RequestBody]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        return RequestBody(
            content=self._parse_content(_required(data, "content", where), where),
            description=data.get("description"),
            required=bool(data.get("required", False)),
        )

    def _parse_responses(self, data: dict[str, Any], where: str) -> Responses:
        default = data.get("default")
        return Responses(
            default=self._parse_response(default, f"{where} default response") if default is not None else None,
            status_codes={
                str(code): self._parse_response(response, f"{where} response {code}")
                for code, response in _fields(data).items()
                if code != "default"
            },
        )

    def _parse_response(self, data: Any, where: str) -> RefOr[Response]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        return Response(
            description=data.get("description", ""),
            headers={
                name: self._parse_header(header, f"{where}.headers.{name}")
                for name, header in _mapping(data.get("headers"), f"{where}.headers").items()
            },
            content=self._parse_content(data.get("content"), where),
            links={
                name: self._parse_link(link, f"{where}.links.{name}")
                for name, link in _mapping(data.get("links"), f"{where}.links").items()
            },
        )

    def _parse_content(self, data: Any, where: str) -> dict[str, MediaType]:  # noqa: ANN401
        return {
            content_type: self._parse_media_type(_mapping(media, f"{where} '{content_type}'"), f"{where} '{content_type}'")
            for content_type, media in _mapping(data, f"{where}.content").items()
        }

    def _parse_media_type(self, data: dict[str, Any], where: str) -> MediaType:
        return MediaType(
            schema=self._parse_schema(data["schema"], f"{where}.schema") if data.get("schema") is not None else None,
            example=data.get("example"),
            examples={
                name: self._parse_example(example, f"{where}.examples.{name}")
                for name, example in _mapping(data.get("examples"), f"{where}.examples").items()
            },
            encoding={
                name: Encoding(
                    content_type=encoding.get("contentType"),
                    headers={
                        header_name: self._parse_header(header, f"{where}.encoding.{name}.headers.{header_name}")
                        for header_name, header in _mapping(encoding.get("headers"), f"{where}.encoding").items()
                    },
                    style=encoding.get("style"),
                    explode=bool(encoding.get("explode", True)),
                    allow_reserved=bool(encoding.get("allowReserved", False)),
                )
                for name, encoding in _mapping(data.get("encoding"), f"{where}.encoding").items()
            },
        )

    def _parse_header(self, data: Any, where: str) -> RefOr[Header]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        return Header(
            description=data.get("description"),
            required=bool(data.get("required", False)),
            deprecated=bool(data.get("deprecated", False)),
            schema=self._parse_schema(data["schema"], f"{where}.schema") if data.get("schema") is not None else None,
            content=self._parse_content(data.get("content"), where),
        )

    def _parse_example(self, data: Any, where: str) -> RefOr[Example]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        return Example(
            summary=data.get("summary"),
            description=data.get("description"),
            value=data.get("value"),
            external_value=data.get("externalValue"),
        )

    def _parse_link(self, data: Any, where: str) -> RefOr[Link]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        server = data.get("server")
        return Link(
            operation_ref=data.get("operationRef"),
            operation_id=data.get("operationId"),
            parameters=_mapping(data.get("parameters"), f"{where}.parameters"),
            request_body=data.get("requestBody"),
            description=data.get("description"),
            server=self._parse_server(server) if server is not None else None,
        )

    def _parse_callback(self, data: Any, where: str) -> RefOr[Callback]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        return Callback(
            expressions={
                expression: self._parse_path_item(_mapping(path_item, f"{where}['{expression}']"), expression)
                for expression, path_item in _fields(data).items()
            }
        )

    # Schemas

    def _parse_schema(self, data: Any, where: str) -> RefOr[Schema]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref

        properties = data.get("properties")
        additional = data.get("additionalProperties")
        items = data.get("items")
        not_schema = data.get("not")
        discriminator = data.get("discriminator")
        enum = data.get("enum")

        return Schema(
            type=data.get("type"),
            format=data.get("format"),
            title=data.get("title"),
            description=data.get("description"),
            properties={
                name: self._parse_schema(prop, f"{where}.properties.{name}")
                for name, prop in _mapping(properties, f"{where}.properties").items()
            }
            if properties is not None
            else None,
            required=tuple(_sequence(data.get("required"), f"{where}.required")),
            items=self._parse_schema(items, f"{where}.items") if items is not None else None,
            additional_properties=self._parse_additional_properties(additional, f"{where}.additionalProperties"),
            enum=tuple(_sequence(enum, f"{where}.enum")) if enum is not None else None,
            default=data.get("default"),
            example=data.get("example"),
            nullable=bool(data.get("nullable", False)),
            read_only=bool(data.get("readOnly", False)),
            write_only=bool(data.get("writeOnly", False)),
            deprecated=bool(data.get("deprecated", False)),
            all_of=self._parse_schema_list(data.get("allOf"), f"{where}.allOf"),
            one_of=self._parse_schema_list(data.get("oneOf"), f"{where}.oneOf"),
            any_of=self._parse_schema_list(data.get("anyOf"), f"{where}.anyOf"),
            not_=self._parse_schema(not_schema, f"{where}.not") if not_schema is not None else None,
            discriminator=Discriminator(
                property_name=_required(discriminator, "propertyName", f"{where}.discriminator"),
                mapping=_mapping(discriminator.get("mapping"), f"{where}.discriminator.mapping"),
            )
            if isinstance(discriminator, dict)
            else None,
        )

    def _parse_additional_properties(self, data: Any, where: str) -> bool | RefOr[Schema] | None:  # noqa: ANN401
        if data is None or isinstance(data, bool):
            return data
        return self._parse_schema(data, where)

    def _parse_schema_list(self, data: Any, where: str) -> tuple[RefOr[Schema], ...]:  # noqa: ANN401
        return tuple(self._parse_schema(item, f"{where}[{index}]") for index, item in enumerate(_sequence(data, where)))

    # Components

    def _parse_components(self, data: dict[str, Any]) -> Components:
        def table(key: str, parse: Any) -> dict[str, Any]:  # noqa: ANN401
            return {
                name: parse(value, f"components.{key}.{name}")
                for name, value in _fields(_mapping(data.get(key), f"components.{key}")).items()
            }

        return Components(
            schemas=table("schemas", self._parse_schema),
            responses=table("responses", self._parse_response),
            parameters=table("parameters", self._parse_parameter),
            examples=table("examples", self._parse_example),
            request_bodies=table("requestBodies", self._parse_request_body),
            headers=table("headers", self._parse_header),
            security_schemes=table("securitySchemes", self._parse_security_scheme),
            links=table("links", self._parse_link),
            callbacks=table("callbacks", self._parse_callback),
        )

    def _parse_security_scheme(self, data: Any, where: str) -> RefOr[SecurityScheme]:  # noqa: ANN401
        data = _mapping(data, where)
        if (ref := _reference(data)) is not None:
            return ref
        flows = _mapping(data.get("flows"), f"{where}.flows")
        return SecurityScheme(
            type=_required(data, "type", where),
            description=data.get("description"),
            name=data.get("name"),
            location=data.get("in"),
            scheme=data.get("scheme"),
            bearer_format=data.get("bearerFormat"),
            flows=OAuthFlows(
                implicit=self._parse_oauth_flow(flows.get("implicit"), f"{where}.flows.implicit"),
                password=self._parse_oauth_flow(flows.get("password"), f"{where}.flows.password"),
                client_credentials=self._parse_oauth_flow(
                    flows.get("clientCredentials"), f"{where}.flows.clientCredentials"
                ),
                authorization_code=self._parse_oauth_flow(
                    flows.get("authorizationCode"), f"{where}.flows.authorizationCode"
                ),
            )
            if flows
            else None,
            open_id_connect_url=data.get("openIdConnectUrl"),
        )

    def _parse_oauth_flow(self, data: Any, where: str) -> OAuthFlow | None:  # noqa: ANN401
        if data is None:
            return None
        data = _mapping(data, where)
        return OAuthFlow(
            scopes=_mapping(_required(data, "scopes", where), f"{where}.scopes"),
            authorization_url=data.get("authorizationUrl"),
            token_url=data.get("tokenUrl"),
            refresh_url=data.get("refreshUrl"),
        )
