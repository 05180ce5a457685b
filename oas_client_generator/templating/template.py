r"""
Placeholder templates with optional, nullable and conditional substitution.

A :class:`Template` is parsed once from its text and can be built any number
of times with different value mappings::

    template = Template(
        'def %name%(%parameters%):\n    %~has_body -> "return %body%"~%',
        variables=[Variable("parameters", value_type=list, formatter=", ".join)],
    )
    template.build({"name": "get", "parameters": ["id"], "has_body": False})

Building checks every placeholder against its declaration, substitutes the
formatted values, removes the lines of falsy whole-line conditionals and finally
indents every line after the first.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from oas_client_generator.errors import MissingRequiredVariableError, TypeMismatchError
from oas_client_generator.templating.tokenizer import ConditionalNode, PlaceholderNode, TextNode, tokenize

# Marks an output line for removal; never produced by template text or values.
_DROP_LINE: Final = "\x00drop-line\x00"
_ABSENT: Final = object()


class VariableKind(enum.Enum):
    """Syntactic form a placeholder takes in the template text."""

    PLAIN = "plain"
    CONDITIONAL = "conditional"
    WHOLE_LINE = "whole_line"


@dataclass(frozen=True)
class Variable:
    """Declaration of one placeholder.

    ``value_type`` defaults to ``str`` for plain placeholders and is always
    ``bool`` for conditionals. ``optional`` tolerates a missing value,
    ``nullable`` tolerates an explicit ``None`` (and a missing value).
    ``whole_line`` makes an absent plain value drop its whole line instead of
    rendering as empty text.
    """

    name: str
    value_type: type | tuple[type, ...] | None = None
    formatter: Callable[[Any], str] = str
    optional: bool = False
    nullable: bool = False
    whole_line: bool = False
    kind: VariableKind = VariableKind.PLAIN

    @property
    def expected_type(self) -> type | tuple[type, ...]:
        if self.kind is not VariableKind.PLAIN:
            return bool
        return self.value_type if self.value_type is not None else str

    @property
    def expected_type_name(self) -> str:
        expected = self.expected_type
        if isinstance(expected, tuple):
            return " | ".join(t.__name__ for t in expected)
        return expected.__name__


def _indent_lines(lines: list[str], indent: int) -> str:
    if indent <= 0:
        return "\n".join(lines)
    prefix = " " * indent
    return "\n".join(
        line if index == 0 or not line.strip() else prefix + line for index, line in enumerate(lines)
    )


class Template:
    """A parsed template ready to be built with a mapping of values."""

    def __init__(
        self,
        source: str,
        *,
        variables: Iterable[Variable] = (),
        indent: int = 0,
    ) -> None:
        self.source = source
        self.indent = indent
        self._declarations: dict[str, Variable] = {v.name: v for v in variables}
        self._nodes: list[TextNode | PlaceholderNode | ConditionalNode] = tokenize(source)
        self._branches: dict[int, Template] = {}
        self._variables: dict[str, Variable] = {}

        for index, node in enumerate(self._nodes):
            if isinstance(node, TextNode):
                continue
            if isinstance(node, ConditionalNode):
                kind = VariableKind.WHOLE_LINE if node.whole_line else VariableKind.CONDITIONAL
                self._branches[index] = Template(
                    node.body,
                    variables=self._declarations.values(),
                    indent=node.column,
                )
            else:
                kind = VariableKind.PLAIN
            self._register(node.name, kind)

    @property
    def variables(self) -> Mapping[str, Variable]:
        """Top-level placeholders in the order they first appear."""
        return dict(self._variables)

    def build(self, values: Mapping[str, Any], indent: int | None = None) -> str:
        """Substitute ``values`` and return the rendered text.

        Args:
            values: Placeholder name to value. Names the template does not use
                are ignored, so one mapping can feed nested branches.
            indent: Spaces prepended to every line after the first. Defaults
                to the indent the template was created with.

        Raises:
            MissingRequiredVariableError: A required placeholder is missing.
            TypeMismatchError: A value is ``None`` where not nullable, or is
                not of the declared type.
        """
        resolved = {name: self._lookup(variable, values) for name, variable in self._variables.items()}

        parts: list[str] = []
        for index, node in enumerate(self._nodes):
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif isinstance(node, ConditionalNode):
                if resolved[node.name] is True:
                    parts.append(self._branches[index].build(values))
                elif node.whole_line:
                    parts.append(_DROP_LINE)
            else:
                parts.append(self._format(self._variables[node.name], resolved[node.name]))

        lines = [line for line in "".join(parts).split("\n") if _DROP_LINE not in line]
        return _indent_lines(lines, self.indent if indent is None else indent)

    def _register(self, name: str, kind: VariableKind) -> None:
        existing = self._variables.get(name)
        if existing is not None:
            if existing.kind is not kind:
                msg = (
                    f"Placeholder '{name}' is used both as {existing.kind.value} "
                    f"and as {kind.value} in the same template"
                )
                raise TypeMismatchError(msg)
            return

        declared = self._declarations.get(name, Variable(name))
        if kind is not VariableKind.PLAIN and declared.value_type not in (None, bool):
            msg = f"Conditional placeholder '{name}' must be declared as bool, not {declared.expected_type_name}"
            raise TypeMismatchError(msg)
        self._variables[name] = dataclasses.replace(declared, kind=kind)

    @staticmethod
    def _lookup(variable: Variable, values: Mapping[str, Any]) -> Any:  # noqa: ANN401
        if variable.name not in values:
            if variable.optional or variable.nullable:
                return _ABSENT
            raise MissingRequiredVariableError(variable.name)

        value = values[variable.name]
        if value is None:
            if variable.nullable:
                return _ABSENT
            msg = f"Value supplied for '{variable.name}' is None but the variable is not nullable"
            raise TypeMismatchError(msg)

        if not isinstance(value, variable.expected_type):
            msg = (
                f"Value supplied for '{variable.name}' ({value!r}) is not the correct type: "
                f"it is of type '{type(value).__name__}' but needs to be of type '{variable.expected_type_name}'"
            )
            raise TypeMismatchError(msg)
        return value

    @staticmethod
    def _format(variable: Variable, value: Any) -> str:  # noqa: ANN401
        if value is _ABSENT:
            return _DROP_LINE if variable.whole_line else ""
        return variable.formatter(value)

    def __repr__(self) -> str:
        return f"Template(variables={list(self._variables)}, indent={self.indent})"
