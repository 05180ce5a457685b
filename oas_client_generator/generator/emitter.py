"""
Client Code Generator

Walks the route tree of a parsed document and emits the generated client: one
scope per URL segment, one callable per operation, one file per named type
and the project files around them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Final

from oas_client_generator.config import GenerationConfig
from oas_client_generator.errors import GeneratorError, InvalidSpecificationError
from oas_client_generator.generator.dialects import (
    Dialect,
    Endpoint,
    EndpointParameter,
    RootContext,
    Scope,
    get_dialect,
)
from oas_client_generator.generator.project_files import ProjectTemplateEngine
from oas_client_generator.generator.route_tree import PathNode, build_route_tree, format_tree
from oas_client_generator.generator.type_resolver import ResolvedType, TypeRegistry, TypeResolver
from oas_client_generator.parser.models import (
    HTTP_METHODS,
    MediaType,
    Operation,
    Parameter,
    ParsedSpec,
    RequestBody,
    Response,
)
from oas_client_generator.parser.references import ReferenceResolver, follow
from oas_client_generator.utils.string_case import class_name

logger = logging.getLogger(__name__)

ROOT_SCOPE: Final = "API"
JSON_MEDIA_TYPE: Final = "application/json"
BODY_PARAMETER: Final = "body"


def _unique(name: str, taken: set[str]) -> str:
    """``name``, or ``name`` with the first numeric suffix not in ``taken``; records the result."""
    candidate = name
    suffix = 1
    while candidate in taken:
        suffix += 1
        candidate = f"{name}{suffix}"
    taken.add(candidate)
    return candidate


def _preferred_media(content: dict[str, MediaType]) -> MediaType | None:
    if not content:
        return None
    return content.get(JSON_MEDIA_TYPE) or next(iter(content.values()))


@dataclass
class _Emission:
    """State of one generation run."""

    spec: ParsedSpec
    config: GenerationConfig
    dialect: Dialect
    resolver: ReferenceResolver
    types: TypeResolver
    endpoints: list[dict[str, Any]] = field(default_factory=list)


class ClientCodeGenerator:
    """Main code generator for typed API clients."""

    def __init__(self, template_engine: ProjectTemplateEngine | None = None) -> None:
        """Initialize the code generator."""
        self.template_engine = template_engine

    def generate_client(self, spec: ParsedSpec, config: GenerationConfig) -> dict[Path, str]:
        """Generate the complete client for ``spec``.

        Args:
            spec: The parsed document.
            config: Output directory, namespace and dialect of this run.

        Returns:
            Every generated file keyed by its path below ``config.output_dir``.
            Nothing is written to disk.

        Raises:
            GeneratorError: The first problem found; the operation or schema it
                was found in is recorded with ``add_context``.
        """
        dialect = get_dialect(config.dialect)
        resolver = ReferenceResolver(spec.components)
        run = _Emission(
            spec=spec,
            config=config,
            dialect=dialect,
            resolver=resolver,
            types=TypeResolver(resolver, dialect, config.base_namespace, TypeRegistry()),
        )
        logger.info("Generating %s client '%s' in %s", dialect.name, config.base_namespace, config.output_dir)

        tree = build_route_tree(spec.paths)
        logger.debug("Route tree:\n%s", format_tree(tree))

        # Component schemas claim their names before any inline schema
        run.types.resolve_components()
        root_scope = self._build_scope(run, tree, [])

        files: dict[Path, str] = {}
        files.update(self._generate_root_file(run, root_scope))
        files.update(self._generate_schema_files(run))
        files.update(self._generate_project_files(run, tree))

        logger.info(
            "Generated %d files: %d operations, %d schemas",
            len(files),
            len(run.endpoints),
            len(run.types.registry),
        )
        return files

    # Route tree

    def _build_scope(self, run: _Emission, node: PathNode, scope_path: list[str]) -> Scope:
        functions = [
            self._write_endpoint(run, node, verb, node.operations[verb], scope_path)
            for verb in HTTP_METHODS
            if verb in node.operations
        ]
        children = []
        taken: set[str] = set()
        for segment, child in node.children.items():
            preferred = run.dialect.scope_name(segment)
            scope_name = _unique(preferred, taken)
            if scope_name != preferred:
                logger.warning("Scope of segment '%s' is named '%s', '%s' is taken", segment, scope_name, preferred)
            child_scope = self._build_scope(run, child, [*scope_path, scope_name])
            children.append(run.dialect.render_scope(child_scope))
        return Scope(
            name=scope_path[-1] if scope_path else ROOT_SCOPE,
            url=node.url,
            functions=functions,
            children=children,
        )

    def _write_endpoint(
        self,
        run: _Emission,
        node: PathNode,
        verb: str,
        operation: Operation,
        scope_path: list[str],
    ) -> str:
        url = node.url or "/"
        try:
            endpoint = self._build_endpoint(run, node, url, verb, operation, scope_path)
            rendered = run.dialect.render_endpoint(endpoint)
        except GeneratorError as e:
            e.add_context(f"{verb.upper()} {url}")
            raise

        run.endpoints.append(
            {
                "verb": verb.upper(),
                "url": url,
                "call": ".".join([ROOT_SCOPE, *scope_path, endpoint.name]),
                "summary": operation.summary,
                "return_type": endpoint.return_type,
            }
        )
        return rendered

    def _build_endpoint(
        self,
        run: _Emission,
        node: PathNode,
        url: str,
        verb: str,
        operation: Operation,
        scope_path: list[str],
    ) -> Endpoint:
        if operation.operation_id:
            base_name = class_name(operation.operation_id)
        else:
            base_name = "".join(scope_path) + class_name(verb)

        parameters = [
            self._parameter(run, parameter, base_name) for parameter in self._merged_parameters(run, node, operation)
        ]
        body = self._request_body(run, operation, base_name)
        if body is not None:
            parameters.append(body)
        parameters = self._distinct_identifiers(run, parameters)
        # Required parameters first, each group in declaration order
        parameters.sort(key=lambda p: not p.required)

        identifiers = {p.name: p.identifier for p in parameters if p.location == "path"}
        return Endpoint(
            verb=verb,
            url=url,
            url_expression=run.dialect.url_expression(url, identifiers),
            return_type=run.dialect.optional_type(self._response_type(run, operation, base_name)),
            parameters=tuple(parameters),
            summary=operation.summary or operation.description,
            deprecated=operation.deprecated,
        )

    @staticmethod
    def _distinct_identifiers(run: _Emission, parameters: list[EndpointParameter]) -> list[EndpointParameter]:
        """Rename parameters whose identifier an earlier parameter already uses."""
        taken: set[str] = set()
        distinct = []
        for parameter in parameters:
            identifier = parameter.identifier
            suffix = 1
            while identifier in taken:
                suffix += 1
                identifier = run.dialect.parameter_name(f"{parameter.name}{suffix}")
            taken.add(identifier)
            distinct.append(replace(parameter, identifier=identifier))
        return distinct

    @staticmethod
    def _merged_parameters(run: _Emission, node: PathNode, operation: Operation) -> list[Parameter]:
        """Path level parameters overridden by operation level ones on ``(name, in)``."""
        shared = node.path_item.parameters if node.path_item is not None else ()
        merged: dict[tuple[str, str], Parameter] = {}
        for value in (*shared, *operation.parameters):
            _, parameter = follow(run.resolver, value, None, Parameter)
            merged[(parameter.name, parameter.location)] = parameter
        return list(merged.values())

    def _parameter(self, run: _Emission, parameter: Parameter, base_name: str) -> EndpointParameter:
        schema = parameter.schema
        if schema is None:
            media = _preferred_media(parameter.content)
            schema = media.schema if media is not None else None
        if schema is None:
            msg = f"Parameter '{parameter.name}' has neither a schema nor a content schema"
            raise InvalidSpecificationError(msg)

        try:
            resolved = run.types.resolve_type(schema, parent_name=base_name, property_name=parameter.name)
        except GeneratorError as e:
            e.add_context(f"parameter '{parameter.name}'")
            raise

        required = parameter.required or parameter.location == "path"
        return EndpointParameter(
            name=parameter.name,
            identifier=run.dialect.parameter_name(parameter.name),
            location=parameter.location,
            type_name=self._spelling(run, resolved, required=required),
            required=required,
        )

    def _request_body(self, run: _Emission, operation: Operation, base_name: str) -> EndpointParameter | None:
        if operation.request_body is None:
            return None
        _, request_body = follow(run.resolver, operation.request_body, None, RequestBody)
        media = _preferred_media(request_body.content)
        if media is None:
            return None

        if media.schema is None:
            resolved = ResolvedType(run.dialect.unit_type, run.dialect.unit_type)
        else:
            try:
                resolved = run.types.resolve_type(media.schema, name=f"{base_name}Request")
            except GeneratorError as e:
                e.add_context("request body")
                raise

        return EndpointParameter(
            name=BODY_PARAMETER,
            identifier=BODY_PARAMETER,
            location="body",
            type_name=self._spelling(run, resolved, required=request_body.required),
            required=request_body.required,
        )

    def _response_type(self, run: _Emission, operation: Operation, base_name: str) -> str:
        """Qualified type of the first 2xx response, or the no content type."""
        success = next(
            (response for code, response in operation.responses.status_codes.items() if code.startswith("2")),
            None,
        )
        if success is None:
            return run.dialect.no_content_type

        _, response = follow(run.resolver, success, None, Response)
        if not response.content:
            return run.dialect.no_content_type
        media = next(iter(response.content.values()))
        if media.schema is None:
            return run.dialect.no_content_type

        try:
            return run.types.resolve_type(media.schema, name=f"{base_name}Response").qualified_name
        except GeneratorError as e:
            e.add_context("response")
            raise

    @staticmethod
    def _spelling(run: _Emission, resolved: ResolvedType, *, required: bool) -> str:
        if required:
            return resolved.qualified_name
        return run.dialect.optional_type(resolved.qualified_name)

    # Files

    def _generate_root_file(self, run: _Emission, root_scope: Scope) -> dict[Path, str]:
        """Generate the root file holding every scope and callable."""
        info = run.spec.info
        context = RootContext(
            namespace=run.config.base_namespace,
            title=info.title,
            version=info.version,
            description=info.description,
            servers=tuple(server.url for server in run.spec.servers),
            scope=root_scope,
            has_schemas=len(run.types.registry) > 0,
        )
        return {run.config.output_dir / run.dialect.root_file: run.dialect.render_root(context)}

    def _generate_schema_files(self, run: _Emission) -> dict[Path, str]:
        """Generate one file per named type."""
        files = {}
        for named_type in run.types.registry:
            try:
                content = run.dialect.render_schema(named_type, run.config.base_namespace)
            except GeneratorError as e:
                e.add_context(f"schema {named_type.name}")
                raise
            files[run.config.output_dir / run.dialect.schema_file(named_type.name)] = content
        return files

    def _generate_project_files(self, run: _Emission, tree: PathNode) -> dict[Path, str]:
        """Generate project files from the Jinja2 templates of the dialect."""
        engine = self.template_engine or ProjectTemplateEngine(run.config.template_dir)
        info = run.spec.info
        context = {
            "title": info.title,
            "version": info.version,
            "description": info.description,
            "namespace": run.config.base_namespace,
            "dialect": run.dialect.name,
            "root_file": run.dialect.root_file,
            "root_module": Path(run.dialect.root_file).stem,
            "servers": [server.url for server in run.spec.servers],
            "schemas": run.types.registry.names(),
            "schemas_dir": run.dialect.schemas_dir,
            "endpoints": run.endpoints,
            "route_tree": format_tree(tree),
        }
        return {
            run.config.output_dir / relative: engine.render_template(template_name, context)
            for relative, template_name in run.dialect.project_templates.items()
        }
