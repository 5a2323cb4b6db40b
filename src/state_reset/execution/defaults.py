"""Computation of factory defaults for state nodes."""

import copy
from typing import Any, Optional

from state_reset.models.base import State
from state_reset.models.node import NodeDeclaration
from state_reset.execution.tree import ABSENT, read_at
from state_reset.registry.node_registry import NodeRegistry
from state_reset.registry.paths import PathResolver


class DefaultResolver:
    """Composes the full default value of a node and its descendants.

    A node's default is its own declared default (an empty mapping when none
    was declared) with each child's key set to that child's default,
    recursively. Every call returns fresh objects, so results can be placed
    into a state tree without aliasing the declarations.
    """

    def __init__(
        self, registry: NodeRegistry, paths: Optional[PathResolver] = None
    ) -> None:
        self._registry = registry
        self._paths = paths or PathResolver(registry)

    def default_of(
        self, node: NodeDeclaration, baseline: Optional[State] = None
    ) -> Any:
        """Returns the default value of a node.

        Args:
            node: A registered node.
            baseline: Optional captured state. When the node's address exists
                in it, a copy of that value is the default instead.

        Raises:
            UnknownNodeError: If the node is not registered.
        """
        if baseline is not None:
            captured = read_at(baseline, self._paths.address_of(node))
            if captured is not ABSENT:
                return copy.deepcopy(captured)

        children = self._registry.children_of(node)
        if node.defaults is None:
            value: Any = {}
        else:
            value = copy.deepcopy(node.defaults)

        if children:
            value = dict(value)
            for child in children:
                value[child.name] = self.default_of(child, baseline)
        return value

    def default_tree(self, baseline: Optional[State] = None) -> State:
        """Returns the default of the whole state tree.

        This is the default of the implicit root whose children are the
        registry's top-level nodes.
        """
        return {
            node.name: self.default_of(node, baseline)
            for node in self._registry.top_level
        }
