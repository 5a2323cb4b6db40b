"""Data models for declaring state nodes.

A state node is one named partition of the application state tree. The
declaration object doubles as the node's handle: requests reference nodes by
passing the declaration itself, and two declarations are the same node only
if they are the same object.
"""

from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field


class NodeDeclaration(BaseModel):
    """Complete definition of a declared state node.

    Attributes:
        name: Key of the node inside its parent (or the root state).
        defaults: Declared default value. None means no default was declared.
        children: Ordered child nodes nested under this node's key.
        state_schema: Optional JSON Schema the resolved default must satisfy.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Key of the node inside its parent (or the root state).",
    )
    defaults: Any = Field(
        default=None,
        description="Declared default value. None means no default was declared.",
    )
    children: tuple["NodeDeclaration", ...] = Field(
        default=(),
        description="Ordered child nodes nested under this node's key.",
    )
    state_schema: Optional[dict[str, Any]] = Field(
        default=None,
        description="Optional JSON Schema the resolved default must satisfy.",
    )

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return f"NodeDeclaration(name={self.name!r})"


def declare_node(
    name: str,
    defaults: Any = None,
    children: Sequence[NodeDeclaration] = (),
    state_schema: Optional[dict[str, Any]] = None,
) -> NodeDeclaration:
    """Declares a state node.

    Args:
        name: Key of the node inside its parent.
        defaults: Declared default value. Omit for nodes without a default;
            they resolve to an empty mapping.
        children: Child nodes, in the order they should be composed.
        state_schema: Optional JSON Schema for the resolved default.

    Returns:
        The node declaration, which is also the node's handle.
    """
    return NodeDeclaration(
        name=name,
        defaults=defaults,
        children=tuple(children),
        state_schema=state_schema,
    )
