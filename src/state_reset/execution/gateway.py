"""Seam between the outer dispatch mechanism and the mutation engine.

The gateway owns the live state: it hands the current state to the engine,
commits the result, notifies the commit callback, and holds the boot
baseline captured once initialization has finished.
"""

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from state_reset.execution.engine import EngineConfig, MutationEngine, WarnCallback
from state_reset.execution.tree import ABSENT, read_at
from state_reset.models.base import State
from state_reset.models.enums import MutationStatus
from state_reset.models.mutation_result import MutationResult
from state_reset.models.node import NodeDeclaration
from state_reset.models.request import MutationRequest
from state_reset.models.state_snapshot import StateSnapshot
from state_reset.observability.logging import get_logger
from state_reset.registry.node_registry import NodeRegistry
from state_reset.utils import compute_checksum

logger = get_logger(__name__)

CommitCallback = Callable[[StateSnapshot], None]


class StateStore(BaseModel):
    """
    Holder of the live state snapshot.
    """

    model_config = ConfigDict(extra="forbid")

    snapshot: StateSnapshot = Field(
        ...,
        description="Current state snapshot.",
    )

    def apply(self, new_state: State) -> StateSnapshot:
        self.snapshot = StateSnapshot(
            snapshot_id=f"snap_{uuid.uuid4().hex}",
            timestamp=datetime.now(timezone.utc),
            state=new_state,
            checksum=compute_checksum(new_state),
        )
        return self.snapshot


class MutationGateway:
    """Receives mutation requests and commits their results.

    Dispatches and commits are serialized, so every request reads the state
    committed by the previous one.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        *,
        state: Optional[State] = None,
        config: Optional[EngineConfig] = None,
        commit: Optional[CommitCallback] = None,
        warn: Optional[WarnCallback] = None,
    ) -> None:
        """Initializes the gateway.

        Args:
            registry: The node registry.
            state: Initial state. Defaults to the default tree.
            config: Engine configuration.
            commit: Called with every committed snapshot.
            warn: Called with a message whenever a request is rejected.
                Defaults to logging a warning.
        """
        self.engine = MutationEngine(registry, config=config, warn=warn)
        self._commit_callback = commit
        self._lock = threading.RLock()
        self._initial_state: Optional[State] = None

        if state is None:
            state = self.engine.default_tree()
        self.store = StateStore(
            snapshot=StateSnapshot(
                snapshot_id=f"snap_{uuid.uuid4().hex}",
                timestamp=datetime.now(timezone.utc),
                state=state,
                checksum=compute_checksum(state),
            )
        )

    @property
    def snapshot(self) -> StateSnapshot:
        return self.store.snapshot

    @property
    def state(self) -> State:
        return self.store.snapshot.state

    @property
    def initial_state(self) -> Optional[State]:
        return self._initial_state

    def select(self, node: NodeDeclaration) -> Any:
        """Returns the live value of a node, or None if it is absent.

        Raises:
            UnknownNodeError: If the node is not registered.
        """
        value = read_at(self.state, self.engine.address_of(node))
        return None if value is ABSENT else value

    def commit(self, state: State) -> StateSnapshot:
        """Publishes a state as the new live snapshot and notifies the callback."""
        with self._lock:
            snapshot = self.store.apply(state)
        logger.debug(
            "Committed snapshot",
            extra={
                "extra_fields": {
                    "snapshot_id": snapshot.snapshot_id,
                    "checksum": snapshot.checksum,
                    "committed_at": snapshot.timestamp,
                }
            },
        )
        if self._commit_callback is not None:
            self._commit_callback(snapshot)
        return snapshot

    def dispatch(self, request: MutationRequest) -> MutationResult:
        """Applies a mutation request to the live state.

        Rejected requests commit nothing; the engine has already reported
        them through the warn callback.
        """
        with self._lock:
            current = self.state
            new_state, result = self.engine.execute(
                request, current, baseline=self._initial_state
            )
            if result.status == MutationStatus.REJECTED:
                result.state_snapshot_id = self.snapshot.snapshot_id
                return result
            if new_state is current:
                result.state_snapshot_id = self.snapshot.snapshot_id
                return result
            snapshot = self.commit(new_state)

        result.state_snapshot_id = snapshot.snapshot_id
        return result

    def capture_initial_state(self) -> State:
        """Stores the live state as the boot baseline.

        Call once initialization has completed. Only the first call captures;
        later calls return the baseline already stored.
        """
        with self._lock:
            if self._initial_state is not None:
                logger.debug("Initial state already captured")
                return self._initial_state
            self._initial_state = copy.deepcopy(self.state)

        logger.info(
            "Captured initial state",
            extra={
                "extra_fields": {
                    "snapshot_id": self.snapshot.snapshot_id,
                    "nodes": sorted(self._initial_state),
                }
            },
        )
        return self._initial_state
