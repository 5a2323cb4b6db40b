"""Data model for committed state snapshots.

This module defines the schema for capturing the complete state tree at a
specific point in time, as committed by the mutation gateway.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class StateSnapshot(BaseModel):
    """Represents a committed snapshot of the state tree.

    Attributes:
        snapshot_id: Unique identifier for this snapshot.
        timestamp: When the snapshot was committed.
        state: The whole state tree, keyed by top-level node name.
        checksum: SHA-256 hash of the state tree.
    """

    snapshot_id: str = Field(
        ..., description="Unique identifier for this snapshot."
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the snapshot was committed.",
    )
    state: dict[str, Any] = Field(
        default_factory=dict,
        description="The whole state tree, keyed by top-level node name.",
    )
    checksum: Optional[str] = Field(
        default=None,
        description="SHA-256 hash of the state tree for integrity verification.",
    )
