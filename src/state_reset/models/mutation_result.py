"""Data models for reporting mutation outcomes.

This module defines the structures returned by the Mutation Engine and the
Mutation Gateway after an attempt to apply a mutation request.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from state_reset.models.enums import MutationKind, MutationStatus, StateDiffOp


class StateDiffEntry(BaseModel):
    """Represents a single atomic change to the state tree.

    Attributes:
        path: Dot-separated path to the changed key (e.g., 'app.todos.list').
        op: The operation performed (add, remove, replace).
        value: The new value after the operation (if applicable).
    """

    path: str = Field(
        ...,
        description="Dot-separated path to the changed key (e.g., 'app.todos.list').",
    )
    op: StateDiffOp = Field(
        ..., description="The operation performed (add, remove, replace)."
    )
    value: Optional[Any] = Field(
        None, description="The new value after the operation (if applicable)."
    )


class MutationError(BaseModel):
    """Details regarding a rejection.

    Attributes:
        code: Machine-readable error code (e.g., 'target.invalid').
        detail: Human-readable explanation of the error.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code (e.g., 'target.invalid').",
    )
    detail: str = Field(
        ..., description="Human-readable explanation of the error."
    )


class MutationResult(BaseModel):
    """The result of a mutation attempt.

    Attributes:
        request_id: The ID of the request that triggered this mutation.
        kind: The operation attempted.
        status: The final outcome (success, rejected).
        timestamp: When the mutation completed.
        message: A summary message suitable for display.
        state_snapshot_id: ID of the committed snapshot, when the gateway
            committed one.
        state_diff: List of changes between the input and resulting state.
        error: Error details if the status is REJECTED.
    """

    model_config = ConfigDict(use_enum_values=True)

    request_id: str = Field(
        ..., description="The ID of the request that triggered this mutation."
    )
    kind: MutationKind = Field(..., description="The operation attempted.")
    status: MutationStatus = Field(
        ..., description="The final outcome (success, rejected)."
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the mutation completed.",
    )
    message: Optional[str] = Field(
        default=None,
        description="A summary message suitable for display.",
    )
    state_snapshot_id: Optional[str] = Field(
        default=None,
        description="ID of the committed snapshot, when the gateway committed one.",
    )
    state_diff: list[StateDiffEntry] = Field(
        default_factory=list,
        description="List of changes between the input and resulting state.",
    )
    error: Optional[MutationError] = Field(
        default=None,
        description="Error details if the status is REJECTED.",
    )
