"""
String case conversion utilities for client generation.

This module provides the string case conversions used to turn names found in
OpenAPI documents (schema keys, property names, path segments, parameter
names) into identifiers of the generated client.
"""

import keyword
import re
from collections.abc import Callable
from typing import Final

# Word boundaries used by snakecase and class_name
_SNAKE_CASE_DELIMITER_PATTERN: Final = re.compile(r"[\-\.\s]")
_ACRONYM_PATTERN: Final = re.compile(r"([A-Z])([A-Z][a-z])")
_LOWER_UPPER_PATTERN: Final = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUMERIC_PATTERN: Final = re.compile(r"[^a-zA-Z0-9_]")
_WORD_SPLIT_PATTERN: Final = re.compile(r"[^a-zA-Z0-9]+")

# Hard keywords of Kotlin; these need backticks to be used as identifiers
KOTLIN_KEYWORDS: Final = frozenset(
    {
        "as",
        "break",
        "class",
        "continue",
        "do",
        "else",
        "false",
        "for",
        "fun",
        "if",
        "in",
        "interface",
        "is",
        "null",
        "object",
        "package",
        "return",
        "super",
        "this",
        "throw",
        "true",
        "try",
        "typealias",
        "typeof",
        "val",
        "var",
        "when",
        "while",
    }
)


def _convert_if_not_empty(string: str | None, conversion_func: Callable[[str], str]) -> str:
    """Apply ``conversion_func``, mapping ``None`` and ``""`` to ``""``."""
    return conversion_func(string) if string else ""


def snakecase(string: str | None) -> str:
    """Convert a document name into snake_case.

    Dashes, dots and whitespace become underscores and case changes start a
    new word; runs of capitals are kept together as one acronym.

    Examples:
        >>> snakecase("HelloWorld")
        'hello_world'
        >>> snakecase("X-Request-ID")
        'x_request_id'
        >>> snakecase("getHTTPResponse")
        'get_http_response'
    """

    def _snakecase(s: str) -> str:
        s = _SNAKE_CASE_DELIMITER_PATTERN.sub("_", s)
        s = _ACRONYM_PATTERN.sub(r"\1_\2", s)
        s = _LOWER_UPPER_PATTERN.sub(r"\1_\2", s)
        return s.lower()

    return _convert_if_not_empty(string, _snakecase)


def class_name(string: str | None) -> str:
    """Convert a document name into a class name.

    The name is split on every run of non-alphanumeric characters and the
    first letter of each piece is upper-cased; the rest of each piece is kept
    as written, so ``teamId`` stays ``TeamId`` rather than ``Teamid``.

    Args:
        string: Schema key, property name or path segment.

    Returns:
        A class name, prefixed with ``_`` when it would start with a digit.

    Examples:
        >>> class_name("team-members")
        'TeamMembers'
        >>> class_name("{teamId}")
        'TeamId'
        >>> class_name("2fa")
        '_2fa'
    """

    def _class_name(s: str) -> str:
        name = "".join(word[0].upper() + word[1:] for word in _WORD_SPLIT_PATTERN.split(s) if word)
        return f"_{name}" if name[:1].isdigit() else name

    return _convert_if_not_empty(string, _class_name)


def parameter_name(string: str | None) -> str:
    """Convert a document name into a lower camel case parameter name.

    Examples:
        >>> parameter_name("team-id")
        'teamId'
        >>> parameter_name("Id")
        'id'
    """

    def _parameter_name(s: str) -> str:
        name = class_name(s)
        if name.startswith("_"):
            return name
        return name[:1].lower() + name[1:]

    return _convert_if_not_empty(string, _parameter_name)


def normalize_identifier(name: str | None) -> str:
    """Normalize name to be a valid identifier.

    Invalid characters are replaced with underscores and a leading digit is
    prefixed with one.

    Examples:
        >>> normalize_identifier("123invalid")
        '_123invalid'
        >>> normalize_identifier("$filter")
        '_filter'
    """

    def _normalize(s: str) -> str:
        normalized = _NON_ALPHANUMERIC_PATTERN.sub("_", s)
        if normalized and normalized[0].isdigit():
            normalized = f"_{normalized}"
        return normalized

    return _convert_if_not_empty(name, _normalize)


def is_python_identifier(name: str) -> bool:
    """Check if a name can be used as-is as a Python identifier."""
    return name.isidentifier() and not keyword.iskeyword(name)


def escape_python_keyword(name: str) -> str:
    """Append ``_`` to Python keywords.

    Examples:
        >>> escape_python_keyword("from")
        'from_'
        >>> escape_python_keyword("name")
        'name'
    """
    return f"{name}_" if keyword.iskeyword(name) else name


def escape_kotlin_keyword(name: str) -> str:
    """Wrap Kotlin hard keywords in backticks.

    Examples:
        >>> escape_kotlin_keyword("in")
        '`in`'
    """
    return f"`{name}`" if name in KOTLIN_KEYWORDS else name


def python_identifier(name: str | None) -> str:
    """snake_case, normalized and keyword-escaped Python identifier."""
    return escape_python_keyword(normalize_identifier(snakecase(name)))
