"""Validation of mutation request targets against the node registry."""

from collections.abc import Sequence
from typing import Any

from state_reset.models.enums import MutationKind
from state_reset.models.request import MutationRequest
from state_reset.registry.node_registry import NodeRegistry


class InvalidTarget(ValueError):
    """A mutation request references something that is not a state node.

    Attributes:
        kind: The operation of the rejected request.
        targets: The offending targets, as supplied.
    """

    def __init__(self, kind: MutationKind, targets: list[Any]):
        self.kind = MutationKind(kind)
        self.targets = targets
        described = ", ".join(describe_target(t) for t in targets)
        super().__init__(
            f"{self.kind.value}: invalid target(s) {described}; "
            "expected registered state nodes"
        )


def describe_target(target: Any) -> str:
    """Human-readable description of a target for diagnostics."""
    if isinstance(target, type):
        return f"class {target.__name__}"
    name = getattr(target, "name", None)
    if isinstance(name, str):
        return f"{type(target).__name__} {name!r}"
    return f"{type(target).__name__} {target!r}"


def _node_of(kind: MutationKind, target: Any) -> Any:
    if kind != MutationKind.OVERWRITE:
        return target
    if (
        isinstance(target, Sequence)
        and not isinstance(target, (str, bytes))
        and len(target) == 2
    ):
        return target[0]
    # Not a pair: nothing to validate as a node
    return None


def validate_request(registry: NodeRegistry, request: MutationRequest) -> None:
    """Checks every target of a request before anything is applied.

    Overwrite targets must be (node, value) pairs; all other operations take
    bare nodes. Only the node is validated, never the value.

    Raises:
        InvalidTarget: If at least one target is not a registered node.
    """
    kind = MutationKind(request.kind)
    invalid = [
        target
        for target in request.targets
        if not registry.is_valid_target(_node_of(kind, target))
    ]
    if invalid:
        raise InvalidTarget(kind, invalid)
