"""Resolution of state nodes to their address in the state tree."""

from state_reset.models.base import Address
from state_reset.models.node import NodeDeclaration
from state_reset.registry.node_registry import NodeRegistry


class PathResolver:
    """Maps registered nodes to their top-to-node key sequence.

    Addresses are derived from node names along the parent chain. Since the
    registry is immutable, they are computed once per node and cached.
    """

    def __init__(self, registry: NodeRegistry) -> None:
        self._registry = registry
        self._cache: dict[NodeDeclaration, Address] = {}

    def address_of(self, node: NodeDeclaration) -> Address:
        """Returns the address of a node.

        Args:
            node: A registered node.

        Returns:
            The node names from the top-level ancestor down to the node.

        Raises:
            UnknownNodeError: If the node is not registered.
        """
        entry = self._registry.lookup(node)
        cached = self._cache.get(node)
        if cached is not None:
            return cached

        keys = [node.name]
        current = entry.parent
        while current is not None:
            keys.append(current.name)
            current = self._registry.parent_of(current)

        address = tuple(reversed(keys))
        self._cache[node] = address
        return address
