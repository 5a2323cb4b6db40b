"""Registry of declared state nodes.

The registry is built once from the declared hierarchy and is read-only
afterwards. It links every node to its parent and children, and is the single
authority on whether an object is a legitimate mutation target.
"""

from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional

import jsonschema
from pydantic import BaseModel, ConfigDict, Field

from state_reset.models.node import NodeDeclaration
from state_reset.observability.logging import get_logger

logger = get_logger(__name__)


class ConfigurationError(ValueError):
    """The declared hierarchy cannot be turned into a registry."""


class UnknownNodeError(LookupError):
    """A node was looked up that is not part of the registry."""


class RegisteredNode(BaseModel):
    """A node declaration together with its links in the registry.

    Attributes:
        declaration: The node's declaration (and handle).
        parent: The parent node, or None for top-level nodes.
        children: The node's children, in declaration order.
    """

    model_config = ConfigDict(frozen=True)

    declaration: NodeDeclaration = Field(
        ..., description="The node's declaration (and handle)."
    )
    parent: Optional[NodeDeclaration] = Field(
        default=None,
        description="The parent node, or None for top-level nodes.",
    )
    children: tuple[NodeDeclaration, ...] = Field(
        default=(),
        description="The node's children, in declaration order.",
    )


class NodeRegistry:
    """Identity-keyed map of every declared state node.

    Top-level nodes are the children of the implicit "all state" root: their
    names are the keys of the whole state tree.
    """

    def __init__(
        self,
        entries: dict[NodeDeclaration, RegisteredNode],
        top_level: tuple[NodeDeclaration, ...],
    ) -> None:
        self._entries = entries
        self._top_level = top_level

    @classmethod
    def from_declarations(
        cls, declarations: Iterable[NodeDeclaration]
    ) -> "NodeRegistry":
        """Builds a registry from a flat list of declarations.

        Every child referenced by a declaration must itself be in the list.

        Args:
            declarations: All nodes of the hierarchy, in any order.

        Returns:
            The registry.

        Raises:
            ConfigurationError: If a node is declared twice, a child was never
                declared, a child has two parents, the hierarchy has a cycle,
                two siblings share a name, a node with children has a default
                that is not a mapping, or a resolved default violates its
                node's state schema.
        """
        ordered: list[NodeDeclaration] = []
        seen: set[NodeDeclaration] = set()
        for declaration in declarations:
            if not isinstance(declaration, NodeDeclaration):
                raise ConfigurationError(
                    f"Not a node declaration: {declaration!r}"
                )
            if declaration in seen:
                raise ConfigurationError(
                    f"Node declared twice: {declaration.name!r}"
                )
            seen.add(declaration)
            ordered.append(declaration)

        parents: dict[NodeDeclaration, NodeDeclaration] = {}
        for declaration in ordered:
            if declaration.children and not (
                declaration.defaults is None
                or isinstance(declaration.defaults, Mapping)
            ):
                raise ConfigurationError(
                    f"Node {declaration.name!r} has children but its default "
                    f"is not a mapping: {type(declaration.defaults).__name__}"
                )
            names: set[str] = set()
            for child in declaration.children:
                if child not in seen:
                    raise ConfigurationError(
                        f"Child {child.name!r} of {declaration.name!r} "
                        "was never declared"
                    )
                if child in parents:
                    raise ConfigurationError(
                        f"Node {child.name!r} is a child of both "
                        f"{parents[child].name!r} and {declaration.name!r}"
                    )
                if child.name in names:
                    raise ConfigurationError(
                        f"Duplicate child name {child.name!r} "
                        f"under {declaration.name!r}"
                    )
                names.add(child.name)
                parents[child] = declaration

        for declaration in ordered:
            cls._check_acyclic(declaration, parents)

        top_level = tuple(d for d in ordered if d not in parents)
        top_names = [d.name for d in top_level]
        duplicates = sorted({n for n in top_names if top_names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Duplicate top-level node name(s): {', '.join(duplicates)}"
            )

        entries = {
            declaration: RegisteredNode(
                declaration=declaration,
                parent=parents.get(declaration),
                children=declaration.children,
            )
            for declaration in ordered
        }
        registry = cls(entries, top_level)
        registry._check_schemas()

        logger.info(
            f"Registered {len(entries)} state node(s)",
            extra={"extra_fields": {"top_level": top_names}},
        )
        return registry

    @classmethod
    def from_root(cls, *roots: NodeDeclaration) -> "NodeRegistry":
        """Builds a registry from one or more root declarations.

        The roots and all of their descendants are registered.

        Args:
            *roots: Top-level nodes of the hierarchy.

        Returns:
            The registry.

        Raises:
            ConfigurationError: See ``from_declarations``.
        """
        collected: dict[NodeDeclaration, None] = {}
        on_path: set[NodeDeclaration] = set()

        def collect(declaration: NodeDeclaration) -> None:
            if declaration in on_path:
                raise ConfigurationError(
                    f"Cyclic declaration at node {declaration.name!r}"
                )
            # Reached through a second parent; from_declarations reports it
            if declaration in collected:
                return
            collected[declaration] = None
            on_path.add(declaration)
            for child in declaration.children:
                collect(child)
            on_path.discard(declaration)

        for root in roots:
            collect(root)
        return cls.from_declarations(list(collected))

    @staticmethod
    def _check_acyclic(
        declaration: NodeDeclaration,
        parents: dict[NodeDeclaration, NodeDeclaration],
    ) -> None:
        visited = {declaration}
        current = parents.get(declaration)
        while current is not None:
            if current in visited:
                raise ConfigurationError(
                    f"Cyclic declaration at node {declaration.name!r}"
                )
            visited.add(current)
            current = parents.get(current)

    def _check_schemas(self) -> None:
        # Imported here: defaults depends on the registry
        from state_reset.execution.defaults import DefaultResolver

        resolver = DefaultResolver(self)
        for declaration in self._entries:
            if declaration.state_schema is None:
                continue
            try:
                jsonschema.validate(
                    instance=resolver.default_of(declaration),
                    schema=declaration.state_schema,
                )
            except jsonschema.ValidationError as e:
                raise ConfigurationError(
                    f"Default of {declaration.name!r} violates its "
                    f"state schema: {e.message}"
                ) from e

    @property
    def top_level(self) -> tuple[NodeDeclaration, ...]:
        """Nodes without a parent, in declaration order."""
        return self._top_level

    def lookup(self, node: NodeDeclaration) -> RegisteredNode:
        """Retrieves the registered entry for a node.

        Raises:
            UnknownNodeError: If the node is not registered.
        """
        try:
            return self._entries[node]
        except (KeyError, TypeError):
            raise UnknownNodeError(f"Unknown state node: {node!r}") from None

    def is_valid_target(self, obj: Any) -> bool:
        """True iff obj is a registered node declaration."""
        return isinstance(obj, NodeDeclaration) and obj in self._entries

    def parent_of(self, node: NodeDeclaration) -> Optional[NodeDeclaration]:
        return self.lookup(node).parent

    def children_of(self, node: NodeDeclaration) -> tuple[NodeDeclaration, ...]:
        return self.lookup(node).children

    def descendants_of(self, node: NodeDeclaration) -> list[NodeDeclaration]:
        """All descendants of a node, depth first in declaration order."""
        result: list[NodeDeclaration] = []
        stack = list(reversed(self.children_of(node)))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self.children_of(current)))
        return result

    def __contains__(self, obj: object) -> bool:
        return self.is_valid_target(obj)

    def __iter__(self) -> Iterator[NodeDeclaration]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
