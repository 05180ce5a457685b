"""
Target language dialects.

A :class:`Dialect` supplies everything that depends on the language of the
generated client: type spellings, identifier conventions and the placeholder
templates for callables, scopes, the root file and schema files. The emitter
only ever talks to this interface.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from oas_client_generator.templating import Template, Variable
from oas_client_generator.utils.string_case import (
    class_name,
    escape_kotlin_keyword,
    escape_python_keyword,
    is_python_identifier,
    parameter_name,
    python_identifier,
)

if TYPE_CHECKING:
    from oas_client_generator.generator.type_resolver import NamedType

_PATH_PARAMETER_PATTERN: Final = re.compile(r"^\{(.+)\}$")


@dataclass(frozen=True)
class EndpointParameter:
    """A parameter of a generated callable.

    ``type_name`` is already optional when the parameter is not required.
    ``location`` is the OpenAPI ``in`` value, or ``body`` for the request body.
    """

    name: str
    identifier: str
    location: str
    type_name: str
    required: bool


@dataclass(frozen=True)
class Endpoint:
    """One HTTP operation, ready to be rendered as a callable."""

    verb: str
    url: str
    url_expression: str
    return_type: str
    parameters: tuple[EndpointParameter, ...] = ()
    summary: str | None = None
    deprecated: bool = False

    @property
    def name(self) -> str:
        return self.verb.lower()

    @property
    def body(self) -> EndpointParameter | None:
        return next((p for p in self.parameters if p.location == "body"), None)

    @property
    def has_body(self) -> bool:
        return self.body is not None

    def located(self, location: str) -> list[EndpointParameter]:
        return [p for p in self.parameters if p.location == location]


@dataclass
class Scope:
    """A node of the route tree with its rendered callables and child scopes."""

    name: str
    url: str | None = None
    functions: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)

    def conditions(self) -> dict[str, bool]:
        is_endpoint = bool(self.functions)
        has_children = bool(self.children)
        return {
            "has_url": self.url is not None,
            "is_endpoint": is_endpoint,
            "space": is_endpoint and has_children,
            "has_children": has_children,
            "is_empty": not is_endpoint and not has_children,
        }


@dataclass(frozen=True)
class RootContext:
    """Document level values for the root file of the client."""

    namespace: str
    title: str
    version: str
    description: str | None
    servers: tuple[str, ...]
    scope: Scope
    has_schemas: bool

    @property
    def base_url(self) -> str:
        return self.servers[0] if self.servers else ""


def _lines(name: str, separator: str = "\n") -> Variable:
    return Variable(name, value_type=list, formatter=separator.join)


def _doc(name: str, formatter: Callable[[Any], str] = str) -> Variable:
    return Variable(name, formatter=formatter, nullable=True, whole_line=True)


def _collapse(text: str) -> str:
    return " ".join(text.split())


class Dialect(ABC):
    """Lexical syntax of one target language."""

    name: str
    file_extension: str
    root_file: str
    schemas_dir: str = "schemas"
    # Output path -> Jinja2 template rendering it
    project_templates: dict[str, str]

    unit_type: str
    no_content_type: str

    def type_name(self, name: str) -> str:
        """Name of a generated type."""
        return class_name(name)

    def scope_name(self, segment: str) -> str:
        """Name of the scope generated for one URL segment (``{id}`` becomes ``Id``)."""
        return class_name(segment) or "Root"

    @abstractmethod
    def field_name(self, name: str) -> str: ...

    @abstractmethod
    def parameter_name(self, name: str) -> str: ...

    @abstractmethod
    def scalar_type(self, type_: str, format_: str | None) -> str | None:
        """Spelling of a primitive, or ``None`` when ``type_`` is not one."""

    @abstractmethod
    def sequence_type(self, item: str) -> str: ...

    @abstractmethod
    def map_type(self, value: str) -> str: ...

    @abstractmethod
    def optional_type(self, type_name: str) -> str: ...

    @abstractmethod
    def qualify(self, namespace: str, name: str) -> str:
        """Spelling of named type ``name`` usable outside the schemas package."""

    @abstractmethod
    def url_expression(self, url: str, identifiers: dict[str, str]) -> str:
        """Expression building ``url`` with every ``{param}`` substituted."""

    @abstractmethod
    def render_endpoint(self, endpoint: Endpoint) -> str: ...

    @abstractmethod
    def render_scope(self, scope: Scope) -> str: ...

    @abstractmethod
    def render_root(self, context: RootContext) -> str: ...

    @abstractmethod
    def render_schema(self, named_type: NamedType, namespace: str) -> str: ...

    def schema_file(self, name: str) -> str:
        return f"{self.schemas_dir}/{name}.{self.file_extension}"

    @staticmethod
    def _segments(url: str) -> list[tuple[str, str | None]]:
        """Split ``url`` into ``(segment, parameter)`` pairs, keeping empty segments."""
        segments = []
        for segment in url.split("/"):
            match = _PATH_PARAMETER_PATTERN.match(segment)
            segments.append((segment, match.group(1) if match else None))
        return segments


# Python

_PY_ENDPOINT: Final = r'''@staticmethod
def %name%(%parameters%) -> %return_type%:
    %doc%
    return _request(
        "%method%",
        %url%,
        params=%query%,
        headers=%headers%,
        %~has_body -> "json=%body%,"~%
    )'''

_PY_SCOPE: Final = r'''class %name%:
    %doc%
    %~is_endpoint -> "%functions%"~%
%~space -> ""~%
    %~has_children -> "%children%"~%
    %~is_empty -> "pass"~%'''

_PY_ROOT: Final = r'''"""
%title% %version%

%description%
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import httpx

%~has_schemas -> "if TYPE_CHECKING:\n    import %namespace%.schemas\n"~%
BASE_URL = %base_url%

_client = httpx.Client(base_url=BASE_URL)


def configure(base_url: str = BASE_URL, **client_options: Any) -> None:
    """Replace the HTTP client every endpoint uses."""
    global _client  # noqa: PLW0603
    _client.close()
    _client = httpx.Client(base_url=base_url, **client_options)


def _present(values: Optional[dict[str, Any]]) -> dict[str, Any]:
    return {key: value for key, value in (values or {}).items() if value is not None}


def _request(
    method: str,
    url: str,
    *,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, Any]] = None,
    json: Any = None,
) -> Any:
    response = _client.request(
        method,
        url,
        params=_present(params),
        headers={key: str(value) for key, value in _present(headers).items()},
        json=json,
    )
    response.raise_for_status()
    if not response.content:
        return None
    return response.json()


class API:
    """Entry point of the %title% client; nested classes mirror the URL tree."""

    %~is_endpoint -> "%functions%"~%
%~space -> ""~%
    %~has_children -> "%children%"~%
'''

_PY_SCHEMA_CLASS: Final = r'''%module_doc%

from __future__ import annotations

from typing import %typing_names%
%~has_references -> "\nif TYPE_CHECKING:\n%references%"~%


class %name%(TypedDict):
    %doc%
    %fields%
'''

_PY_SCHEMA_FUNCTIONAL: Final = r'''%module_doc%

from __future__ import annotations

from typing import %typing_names%
%~has_references -> "\nif TYPE_CHECKING:\n%references%"~%

%name% = TypedDict(
    "%name%",
    {
        %fields%
    },
)
'''


def _python_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _python_docstring(text: str, indent: int = 4) -> str:
    text = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    lines = text.splitlines()
    if len(lines) == 1:
        return f'"""{lines[0]}"""'
    pad = " " * indent
    body = "\n".join(pad + line if line.strip() else "" for line in lines[1:])
    return f'"""{lines[0]}\n{body}\n{pad}"""'


def _python_dict(entries: list[EndpointParameter]) -> str | None:
    if not entries:
        return None
    return "{" + ", ".join(f"{_python_string(p.name)}: {p.identifier}" for p in entries) + "}"


class PythonDialect(Dialect):
    """TypedDict schemas and an httpx based client module."""

    name = "python"
    file_extension = "py"
    root_file = "api.py"
    project_templates = {
        "__init__.py": "python/__init__.py.j2",
        "schemas/__init__.py": "python/schemas_init.py.j2",
        "README.md": "README.md.j2",
    }
    unit_type = "dict[str, Any]"
    no_content_type = "None"

    _SCALARS: Final = {"string": "str", "integer": "int", "number": "float", "boolean": "bool"}

    def type_name(self, name: str) -> str:
        return escape_python_keyword(super().type_name(name))

    def scope_name(self, segment: str) -> str:
        return escape_python_keyword(super().scope_name(segment))

    def __init__(self) -> None:
        self._endpoint = Template(
            _PY_ENDPOINT,
            variables=[
                _lines("parameters", ", "),
                _doc("doc", _python_docstring),
                Variable("query", nullable=True, whole_line=True),
                Variable("headers", nullable=True, whole_line=True),
            ],
        )
        scope_variables = [
            _lines("functions", "\n\n"),
            _lines("children", "\n\n"),
            _doc("doc"),
        ]
        self._scope = Template(_PY_SCOPE, variables=scope_variables)
        self._root = Template(
            _PY_ROOT,
            variables=[
                *scope_variables,
                _doc("description", lambda text: text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')),
                Variable("base_url", formatter=_python_string),
            ],
        )
        schema_variables = [
            Variable("module_doc", formatter=lambda text: _python_docstring(text, indent=0)),
            _lines("typing_names", ", "),
            _lines("references"),
            _doc("doc", _python_docstring),
        ]
        self._schema_class = Template(
            _PY_SCHEMA_CLASS, variables=[*schema_variables, _lines("fields", "\n    ")]
        )
        self._schema_functional = Template(
            _PY_SCHEMA_FUNCTIONAL, variables=[*schema_variables, _lines("fields", "\n        ")]
        )

    def field_name(self, name: str) -> str:
        return python_identifier(name)

    def parameter_name(self, name: str) -> str:
        return python_identifier(name)

    def scalar_type(self, type_: str, format_: str | None) -> str | None:
        if type_ == "string" and format_ == "binary":
            return "bytes"
        return self._SCALARS.get(type_)

    def sequence_type(self, item: str) -> str:
        return f"list[{item}]"

    def map_type(self, value: str) -> str:
        return f"dict[str, {value}]"

    def optional_type(self, type_name: str) -> str:
        if type_name == self.no_content_type or type_name.startswith("Optional["):
            return type_name
        return f"Optional[{type_name}]"

    def qualify(self, namespace: str, name: str) -> str:
        return f"{namespace}.{self.schemas_dir}.{name}"

    def url_expression(self, url: str, identifiers: dict[str, str]) -> str:
        parts = []
        substituted = False
        for segment, parameter in self._segments(url):
            if parameter is not None and parameter in identifiers:
                parts.append(f"{{{identifiers[parameter]}}}")
                substituted = True
            else:
                parts.append(segment.replace("{", "{{").replace("}", "}}") if identifiers else segment)
        literal = _python_string("/".join(parts))
        return f"f{literal}" if substituted else _python_string(url)

    def render_parameter(self, parameter: EndpointParameter) -> str:
        if parameter.required:
            return f"{parameter.identifier}: {parameter.type_name}"
        return f"{parameter.identifier}: {parameter.type_name} = None"

    def render_endpoint(self, endpoint: Endpoint) -> str:
        doc = endpoint.summary
        if endpoint.deprecated:
            doc = f"{doc}\n\nDeprecated." if doc else "Deprecated."
        return self._endpoint.build(
            {
                "name": endpoint.name,
                "parameters": [self.render_parameter(p) for p in endpoint.parameters],
                "return_type": endpoint.return_type,
                "doc": doc,
                "method": endpoint.verb.upper(),
                "url": endpoint.url_expression,
                "query": _python_dict(endpoint.located("query")),
                "headers": _python_dict(endpoint.located("header")),
                "has_body": endpoint.has_body,
                "body": endpoint.body.identifier if endpoint.body is not None else None,
            }
        )

    def render_scope(self, scope: Scope) -> str:
        return self._scope.build(
            {
                "name": scope.name,
                "doc": _python_docstring(f"Endpoint: {scope.url}") if scope.url is not None else None,
                "functions": scope.functions,
                "children": scope.children,
                **scope.conditions(),
            }
        )

    def render_root(self, context: RootContext) -> str:
        return self._root.build(
            {
                "title": context.title,
                "version": context.version,
                "description": context.description,
                "namespace": context.namespace,
                "base_url": context.base_url,
                "has_schemas": context.has_schemas,
                "functions": context.scope.functions,
                "children": context.scope.children,
                **context.scope.conditions(),
            }
        )

    def render_schema(self, named_type: NamedType, namespace: str) -> str:
        functional = not all(is_python_identifier(f.name) for f in named_type.fields)
        if functional:
            fields = [
                f"{_python_string(f.name)}: "
                f"{_python_string(f.type.short_name if f.required else f'NotRequired[{f.type.short_name}]')},"
                for f in named_type.fields
            ]
        else:
            fields = []
            for f in named_type.fields:
                if f.description:
                    fields.append(f"#: {_collapse(f.description)}")
                fields.append(f"{f.name}: {f.type.short_name if f.required else f'NotRequired[{f.type.short_name}]'}")

        references = named_type.references
        typing_names = {"TypedDict"}
        if references:
            typing_names.add("TYPE_CHECKING")
        if any(not f.required for f in named_type.fields):
            typing_names.add("NotRequired")
        spellings = " ".join(f.type.short_name for f in named_type.fields)
        for name in ("Any", "Optional"):
            if re.search(rf"\b{name}\b", spellings):
                typing_names.add(name)

        template = self._schema_functional if functional else self._schema_class
        return template.build(
            {
                "module_doc": f"{named_type.name} schema of the {namespace} client.",
                "typing_names": sorted(typing_names, key=lambda n: (not n.isupper(), n)),
                "has_references": bool(references),
                "references": [f"    from .{name} import {name}" for name in references],
                "name": named_type.name,
                "doc": named_type.description,
                "fields": fields,
            }
        )


# Kotlin

_KT_ENDPOINT: Final = r"""%doc%
suspend fun %name%(%parameters%): %return_type% = API.client.request(%url%) {
    method = %method%
    %~has_query -> "%query%"~%
    %~has_headers -> "%headers%"~%
    %~has_body -> "contentType(ContentType.Application.Json)"~%
    %~has_body -> "setBody(%body%)"~%
}.body()"""

_KT_SCOPE: Final = r"""%doc%
object %name% {
    %~is_endpoint -> "%functions%"~%
%~space -> ""~%
    %~has_children -> "%children%"~%
}"""

_KT_ROOT: Final = r"""package %namespace%

import io.ktor.client.HttpClient
import io.ktor.client.call.body
import io.ktor.client.plugins.defaultRequest
import io.ktor.client.request.header
import io.ktor.client.request.parameter
import io.ktor.client.request.request
import io.ktor.client.request.setBody
import io.ktor.http.ContentType
import io.ktor.http.HttpMethod
import io.ktor.http.contentType

/**
 * %title% %version%
 * %description%
 */
object API {
    const val BASE_URL: String = %base_url%

    var client: HttpClient = HttpClient {
        defaultRequest { url(BASE_URL) }
    }

    %~is_endpoint -> "%functions%"~%
%~space -> ""~%
    %~has_children -> "%children%"~%
}
"""

_KT_SCHEMA: Final = r"""package %namespace%.schemas

import kotlinx.serialization.SerialName
import kotlinx.serialization.Serializable

%doc%
@Serializable
data class %name%(
    %fields%
)
"""

_KT_METHODS: Final = {
    "get": "HttpMethod.Get",
    "put": "HttpMethod.Put",
    "post": "HttpMethod.Post",
    "delete": "HttpMethod.Delete",
    "options": "HttpMethod.Options",
    "head": "HttpMethod.Head",
    "patch": "HttpMethod.Patch",
}


def _kotlin_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def _kotlin_doc(text: str) -> str:
    lines = text.strip().replace("*/", "* /").splitlines()
    if len(lines) == 1:
        return f"/** {lines[0]} */"
    return "/**\n" + "\n".join(f" * {line}".rstrip() for line in lines) + "\n */"


class KotlinDialect(Dialect):
    """kotlinx.serialization data classes and a ktor client object."""

    name = "kotlin"
    file_extension = "kt"
    root_file = "API.kt"
    project_templates = {"README.md": "README.md.j2"}
    unit_type = "Unit"
    no_content_type = "Unit"

    def __init__(self) -> None:
        self._endpoint = Template(
            _KT_ENDPOINT,
            variables=[
                _lines("parameters", ", "),
                _doc("doc", _kotlin_doc),
                _lines("query"),
                _lines("headers"),
            ],
        )
        scope_variables = [
            _lines("functions", "\n\n"),
            _lines("children", "\n\n"),
            _doc("doc", _kotlin_doc),
        ]
        self._scope = Template(_KT_SCOPE, variables=scope_variables)
        self._root = Template(
            _KT_ROOT,
            variables=[
                *scope_variables,
                _doc("description", lambda text: text.strip().replace("*/", "* /").replace("\n", "\n * ")),
                Variable("base_url", formatter=_kotlin_string),
            ],
        )
        self._schema = Template(_KT_SCHEMA, variables=[_doc("doc", _kotlin_doc), _lines("fields", "\n    ")])

    def field_name(self, name: str) -> str:
        return escape_kotlin_keyword(parameter_name(name))

    def parameter_name(self, name: str) -> str:
        return escape_kotlin_keyword(parameter_name(name))

    def scalar_type(self, type_: str, format_: str | None) -> str | None:
        if type_ == "string":
            return "ByteArray" if format_ == "binary" else "String"
        if type_ == "integer":
            return "Long" if format_ == "int64" else "Int"
        if type_ == "number":
            return "Float" if format_ == "float" else "Double"
        if type_ == "boolean":
            return "Boolean"
        return None

    def sequence_type(self, item: str) -> str:
        return f"List<{item}>"

    def map_type(self, value: str) -> str:
        return f"Map<String, {value}>"

    def optional_type(self, type_name: str) -> str:
        return type_name if type_name.endswith("?") else f"{type_name}?"

    def qualify(self, namespace: str, name: str) -> str:
        return f"{namespace}.{self.schemas_dir}.{name}"

    def url_expression(self, url: str, identifiers: dict[str, str]) -> str:
        parts = []
        for segment, parameter in self._segments(url):
            if parameter is not None and parameter in identifiers:
                parts.append(f"${{{identifiers[parameter]}}}")
            else:
                parts.append(_kotlin_string(segment)[1:-1])
        return '"' + "/".join(parts) + '"'

    def render_parameter(self, parameter: EndpointParameter) -> str:
        if parameter.required:
            return f"{parameter.identifier}: {parameter.type_name}"
        return f"{parameter.identifier}: {parameter.type_name} = null"

    def render_endpoint(self, endpoint: Endpoint) -> str:
        query = [f"parameter({_kotlin_string(p.name)}, {p.identifier})" for p in endpoint.located("query")]
        headers = [f"header({_kotlin_string(p.name)}, {p.identifier})" for p in endpoint.located("header")]
        doc = endpoint.summary
        if endpoint.deprecated:
            doc = f"{doc}\n\n@deprecated" if doc else "@deprecated"
        return self._endpoint.build(
            {
                "name": endpoint.name,
                "parameters": [self.render_parameter(p) for p in endpoint.parameters],
                "return_type": endpoint.return_type,
                "doc": doc,
                "url": endpoint.url_expression,
                "method": _KT_METHODS.get(endpoint.verb, f"HttpMethod({_kotlin_string(endpoint.verb.upper())})"),
                "has_query": bool(query),
                "query": query,
                "has_headers": bool(headers),
                "headers": headers,
                "has_body": endpoint.has_body,
                "body": endpoint.body.identifier if endpoint.body is not None else None,
            }
        )

    def render_scope(self, scope: Scope) -> str:
        return self._scope.build(
            {
                "name": scope.name,
                "doc": f"Endpoint: {scope.url}" if scope.url is not None else None,
                "functions": scope.functions,
                "children": scope.children,
                **scope.conditions(),
            }
        )

    def render_root(self, context: RootContext) -> str:
        return self._root.build(
            {
                "namespace": context.namespace,
                "title": context.title,
                "version": context.version,
                "description": context.description,
                "base_url": context.base_url,
                "functions": context.scope.functions,
                "children": context.scope.children,
                **context.scope.conditions(),
            }
        )

    def render_schema(self, named_type: NamedType, namespace: str) -> str:
        fields = [
            f"@SerialName({_kotlin_string(f.name)}) val {f.identifier}: "
            + (f.type.short_name if f.required else f"{self.optional_type(f.type.short_name)} = null")
            + ","
            for f in named_type.fields
        ]
        return self._schema.build(
            {
                "namespace": namespace,
                "name": named_type.name,
                "doc": named_type.description,
                "fields": fields,
            }
        )


DIALECTS: Final = {
    PythonDialect.name: PythonDialect,
    KotlinDialect.name: KotlinDialect,
}


def get_dialect(name: str) -> Dialect:
    """Instantiate the dialect registered under ``name``."""
    try:
        return DIALECTS[name]()
    except KeyError:
        msg = f"Unknown dialect '{name}', expected one of: {', '.join(DIALECTS)}"
        raise ValueError(msg) from None
