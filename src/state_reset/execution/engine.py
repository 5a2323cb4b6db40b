import os
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.base import Address, State
from ..models.enums import MutationKind, MutationStatus, ResetBaseline
from ..models.mutation_result import MutationError, MutationResult
from ..models.node import NodeDeclaration
from ..models.request import (
    MutationRequest,
    StateClear,
    StateOverwrite,
    StateReset,
    StateResetAll,
)
from ..observability.logging import get_logger
from ..registry.node_registry import NodeRegistry
from ..registry.paths import PathResolver
from ..utils import compute_state_diff
from .defaults import DefaultResolver
from .tree import ABSENT, read_at, remove_at, write_at
from .validation import InvalidTarget, validate_request

logger = get_logger(__name__)

WarnCallback = Callable[[str], None]


class EngineConfig(BaseModel):
    """
    Static configuration for the mutation engine.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    reset_baseline: ResetBaseline = Field(
        default=ResetBaseline.DECLARED,
        description=(
            "What reset and reset_all restore nodes to: declared defaults, "
            "or the state captured at boot."
        ),
    )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Reads the configuration from STATE_RESET_BASELINE."""
        baseline = os.environ.get(
            "STATE_RESET_BASELINE", ResetBaseline.DECLARED.value
        )
        return cls(reset_baseline=ResetBaseline(baseline.strip().lower()))


class MutationEngine:
    """
    Computes the state produced by clear, reset, reset_all and overwrite requests.

    The engine is a pure function of (request, state): it never mutates the
    state it is given and holds nothing but the immutable registry. Requests
    with any invalid target are rejected as a whole and reported through the
    warn callback.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        *,
        config: Optional[EngineConfig] = None,
        warn: Optional[WarnCallback] = None,
    ) -> None:
        self._registry = registry
        self._config = config or EngineConfig()
        self._warn = warn or logger.warning
        self._paths = PathResolver(registry)
        self._defaults = DefaultResolver(registry, self._paths)
        self._operations = {
            MutationKind.CLEAR: self._clear,
            MutationKind.RESET: self._reset,
            MutationKind.RESET_ALL: self._reset_all,
            MutationKind.OVERWRITE: self._overwrite,
        }

    @property
    def registry(self) -> NodeRegistry:
        return self._registry

    @property
    def config(self) -> EngineConfig:
        return self._config

    def address_of(self, node: NodeDeclaration) -> Address:
        return self._paths.address_of(node)

    def default_of(
        self, node: NodeDeclaration, baseline: Optional[State] = None
    ) -> Any:
        return self._defaults.default_of(node, baseline)

    def default_tree(self, baseline: Optional[State] = None) -> State:
        return self._defaults.default_tree(baseline)

    def execute(
        self,
        request: MutationRequest,
        state: State,
        baseline: Optional[State] = None,
    ) -> tuple[State, MutationResult]:
        """Applies a mutation request to a state tree.

        Args:
            request: The mutation to apply.
            state: The current state tree. It is never modified.
            baseline: State captured at boot. Only consulted when the engine
                is configured with ResetBaseline.BOOT.

        Returns:
            The resulting state tree and a result describing the outcome. On
            rejection the input state object itself is returned.
        """
        kind = MutationKind(request.kind)

        try:
            validate_request(self._registry, request)
        except InvalidTarget as e:
            self._warn(str(e))
            return state, MutationResult(
                request_id=request.request_id,
                kind=kind,
                status=MutationStatus.REJECTED,
                message="Invalid mutation target",
                error=MutationError(code="target.invalid", detail=str(e)),
            )

        if self._config.reset_baseline != ResetBaseline.BOOT:
            baseline = None

        new_state = self._operations[kind](state, request.targets, baseline)
        diff = compute_state_diff(state, new_state)

        logger.info(
            f"Applied {kind.value} to {len(request.targets)} target(s)",
            extra={
                "extra_fields": {
                    "request_id": request.request_id,
                    "kind": kind.value,
                    "targets": self._target_nodes(kind, request.targets),
                    "changes": len(diff),
                }
            },
        )
        return new_state, MutationResult(
            request_id=request.request_id,
            kind=kind,
            status=MutationStatus.SUCCESS,
            message=f"{kind.value} applied ({len(diff)} change(s))",
            state_diff=diff,
        )

    def clear(self, state: State, *nodes: Any) -> State:
        return self.execute(StateClear(*nodes), state)[0]

    def reset(self, state: State, *nodes: Any) -> State:
        return self.execute(StateReset(*nodes), state)[0]

    def reset_all(self, state: State, *exceptions: Any) -> State:
        return self.execute(StateResetAll(*exceptions), state)[0]

    def overwrite(self, state: State, *pairs: Any) -> State:
        return self.execute(StateOverwrite(*pairs), state)[0]

    def _clear(self, state, nodes, baseline):
        if not nodes:
            return {}

        result: State = {}
        for node in nodes:
            address = self.address_of(node)
            value = read_at(state, address)
            # Never initialized: nothing to keep
            if value is ABSENT:
                continue
            result = write_at(result, address, value)
        return result

    def _reset(self, state, nodes, baseline):
        for node in nodes:
            state = write_at(
                state,
                self.address_of(node),
                self.default_of(node, baseline),
            )
        return state

    def _reset_all(self, state, exceptions, baseline):
        result = self.default_tree(baseline)
        for node in self._exemption_set(exceptions):
            address = self.address_of(node)
            value = read_at(state, address)
            if value is ABSENT:
                result = remove_at(result, address)
            else:
                result = write_at(result, address, value)
        return result

    def _overwrite(self, state, pairs, baseline):
        for node, value in pairs:
            state = write_at(state, self.address_of(node), value)
        return state

    @staticmethod
    def _target_nodes(kind: MutationKind, targets: list) -> list[NodeDeclaration]:
        if kind == MutationKind.OVERWRITE:
            return [node for node, _ in targets]
        return list(targets)

    def _exemption_set(self, exceptions) -> list[NodeDeclaration]:
        exempt: dict[NodeDeclaration, None] = {}
        for node in exceptions:
            exempt[node] = None
            for descendant in self._registry.descendants_of(node):
                exempt[descendant] = None
        return list(exempt)
