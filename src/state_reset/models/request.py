"""Data models for bulk mutation requests.

A request names the operation and the ordered list of targets. Targets are
kept exactly as the caller supplied them: validation against the node
registry happens in the engine, so a request may legitimately carry objects
that are not state nodes.
"""

import uuid
from typing import Any

from pydantic import Field

from state_reset.models.base import ModelBase
from state_reset.models.enums import MutationKind


class MutationRequest(ModelBase):
    """A single bulk mutation against the state tree.

    Attributes:
        request_id: Unique identifier for tracking the request.
        kind: The operation to perform.
        targets: Ordered targets. Node declarations for clear, reset and
            reset_all; (node, value) pairs for overwrite.
    """

    request_id: str = Field(
        default_factory=lambda: f"req_{uuid.uuid4().hex}",
        description="Unique identifier for tracking the request.",
    )
    kind: MutationKind = Field(..., description="The operation to perform.")
    targets: list[Any] = Field(
        default_factory=list,
        description=(
            "Ordered targets. Node declarations for clear, reset and reset_all; "
            "(node, value) pairs for overwrite."
        ),
    )


class StateClear(MutationRequest):
    """Keeps only the given nodes' current subtrees; no nodes clears everything."""

    def __init__(self, *nodes: Any, **data: Any):
        super().__init__(kind=MutationKind.CLEAR, targets=list(nodes), **data)


class StateReset(MutationRequest):
    """Restores the given nodes to their defaults."""

    def __init__(self, *nodes: Any, **data: Any):
        super().__init__(kind=MutationKind.RESET, targets=list(nodes), **data)


class StateResetAll(MutationRequest):
    """Restores every node to its default except the given ones."""

    def __init__(self, *exceptions: Any, **data: Any):
        super().__init__(
            kind=MutationKind.RESET_ALL, targets=list(exceptions), **data
        )


class StateOverwrite(MutationRequest):
    """Replaces each (node, value) pair's subtree with the literal value."""

    def __init__(self, *pairs: Any, **data: Any):
        super().__init__(
            kind=MutationKind.OVERWRITE, targets=list(pairs), **data
        )
