"""Resolution of ``$ref`` pointers against a document's ``components``."""

from __future__ import annotations

import logging
from typing import Any, Final

from oas_client_generator.errors import UnresolvableReferenceError
from oas_client_generator.parser.models import Components, Reference
from oas_client_generator.utils.string_case import class_name

logger = logging.getLogger(__name__)

_COMPONENTS_PREFIX: Final = "#/components/"


def _unescape(token: str) -> str:
    # JSON pointer escapes, in this order (RFC 6901 section 4)
    return token.replace("~1", "/").replace("~0", "~")


class ReferenceResolver:
    """Looks up ``#/components/<section>/<name>`` pointers, one hop at a time."""

    def __init__(self, components: Components | None) -> None:
        self.components = components

    def resolve(
        self,
        value: Any,  # noqa: ANN401
        context_name: str | None = None,
        expected: type | tuple[type, ...] | None = None,
    ) -> tuple[str | None, Any]:
        """Resolve ``value`` if it is a reference.

        Args:
            value: A model object or a :class:`Reference`.
            context_name: Name to report when ``value`` is not a reference.
            expected: Model type(s) the referenced entry must be an instance of.

        Returns:
            ``(name, value)``. Non-references are returned unchanged together
            with ``context_name``; references yield the class name of the
            component key and the component entry, which may itself be another
            reference.

        Raises:
            UnresolvableReferenceError: The pointer is malformed, names an
                unknown section or a missing entry, or the entry has the wrong
                type.
        """
        if not isinstance(value, Reference):
            return context_name, value

        ref = value.ref
        if not ref.startswith(_COMPONENTS_PREFIX):
            msg = f"Reference '{ref}' does not point into '#/components/'"
            raise UnresolvableReferenceError(msg)

        section, _, key = ref[len(_COMPONENTS_PREFIX) :].partition("/")
        if not section or not key or "/" in key:
            msg = f"Reference '{ref}' is not of the form '#/components/<section>/<name>'"
            raise UnresolvableReferenceError(msg)
        key = _unescape(key)

        if self.components is None:
            msg = f"Reference '{ref}' cannot be resolved: the document has no components"
            raise UnresolvableReferenceError(msg)

        table = self.components.section(section)
        if table is None:
            msg = f"Reference '{ref}' names unknown components section '{section}'"
            raise UnresolvableReferenceError(msg)
        if key not in table:
            msg = f"Reference '{ref}' cannot be resolved: no '{key}' in components.{section}"
            raise UnresolvableReferenceError(msg)

        entry = table[key]
        if expected is not None and not isinstance(entry, (Reference, expected)):
            msg = f"Reference '{ref}' resolves to a {type(entry).__name__}, not the expected object"
            raise UnresolvableReferenceError(msg)

        logger.debug("Resolved %s", ref)
        return class_name(key), entry


def follow(
    resolver: ReferenceResolver,
    value: Any,  # noqa: ANN401
    context_name: str | None = None,
    expected: type | tuple[type, ...] | None = None,
) -> tuple[str | None, Any]:
    """Resolve a chain of references down to a concrete object.

    The name of the last reference in the chain wins. A chain that loops back
    on itself raises :class:`UnresolvableReferenceError`.
    """
    name = context_name
    visited: set[str] = set()
    while isinstance(value, Reference):
        if value.ref in visited:
            msg = f"Circular reference chain through '{value.ref}'"
            raise UnresolvableReferenceError(msg)
        visited.add(value.ref)
        name, value = resolver.resolve(value, name, expected)
    return name, value
