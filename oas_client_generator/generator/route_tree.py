"""Route tree built from the URL paths of a document."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from oas_client_generator.errors import InvalidSpecificationError
from oas_client_generator.parser.models import Operation, PathItem


def _parameter_of(segment: str) -> str | None:
    if len(segment) > 2 and segment.startswith("{") and segment.endswith("}"):
        return segment[1:-1]
    return None


@dataclass
class PathNode:
    """One URL segment of the route tree.

    Attributes:
        url: Full path of the path item attached to this node, if any.
        parameter: Name bound by a ``{name}`` segment.
        path_item: The attached path item, if any.
        children: Child nodes keyed by their raw segment, in insertion order.
    """

    url: str | None = None
    parameter: str | None = None
    path_item: PathItem | None = None
    children: dict[str, PathNode] = field(default_factory=dict)

    @property
    def operations(self) -> dict[str, Operation]:
        """Operations of the attached path item keyed by lowercase verb."""
        return self.path_item.operations if self.path_item is not None else {}

    @property
    def is_endpoint(self) -> bool:
        """Whether a path item is attached to this node."""
        return self.path_item is not None

    def walk(self) -> Iterator[PathNode]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children.values():
            yield from child.walk()


def build_route_tree(paths: Mapping[str, PathItem]) -> PathNode:
    """Build the route tree of ``paths``.

    Every URL is split on ``/`` (empty segments ignored) and its nodes are
    created or merged with the nodes earlier URLs created. The last node
    receives the URL and its path item. The root is a synthetic node with
    URL ``/``; a ``/`` path attaches its path item to it.

    Raises:
        InvalidSpecificationError: Two URLs end on the same node, as
            ``/a/b`` and ``/a//b`` do.
    """
    root = PathNode(url="/")
    for url, path_item in paths.items():
        node = root
        for segment in url.split("/"):
            if not segment:
                continue
            child = node.children.get(segment)
            if child is None:
                child = PathNode(parameter=_parameter_of(segment))
                node.children[segment] = child
            node = child

        if node.path_item is not None:
            msg = f"Paths '{node.url}' and '{url}' describe the same route"
            raise InvalidSpecificationError(msg)
        node.url = url
        node.path_item = path_item
    return root


def format_tree(root: PathNode) -> str:
    """Render the tree one node per line for diagnostics.

    Each line holds the segment followed by ``/``, the path parameters bound
    by ancestors in brackets, and ``*`` when the node carries operations::

        /
        \tteams/
        \t\t{id}/ *
        \t\t\tmembers/ [id] *
    """
    lines: list[str] = []

    def visit(segment: str, node: PathNode, depth: int, inherited: list[str]) -> None:
        line = "\t" * depth + f"{segment}/"
        if inherited:
            line += f" [{', '.join(inherited)}]"
        if node.operations:
            line += " *"
        lines.append(line)
        below = [*inherited, node.parameter] if node.parameter else inherited
        for child_segment, child in node.children.items():
            visit(child_segment, child, depth + 1, below)

    visit("", root, 0, [])
    return "\n".join(lines)
