"""Utility functions for the state reset engine.

This module provides shared helpers used by the engine and the gateway:
checksums for committed snapshots and diffs between two state trees.
"""

import hashlib
import json
from typing import Any

from state_reset.models.enums import StateDiffOp
from state_reset.models.mutation_result import StateDiffEntry


def compute_checksum(state: Any) -> str:
    """Computes a deterministic SHA-256 hash of a state tree.

    Args:
        state: The state tree.

    Returns:
        A hex string representing the checksum.
    """
    # sort_keys for determinism; default=str for values json can't encode
    dump = json.dumps(state, sort_keys=True, default=str)
    return hashlib.sha256(dump.encode("utf-8")).hexdigest()


def compute_state_diff(
    old_state: Any, new_state: Any, path_prefix: str = ""
) -> list[StateDiffEntry]:
    """Computes a simplified diff between two state trees.

    This function recursively compares two dictionaries and generates a list of
    add, remove, or replace operations required to transform old_state into
    new_state. Values that are not dictionaries are compared as a whole.

    Args:
        old_state: The original state tree.
        new_state: The new state tree.
        path_prefix: Internal recursion helper to build dotted paths.
            Defaults to an empty string.

    Returns:
        A list of StateDiffEntry objects describing the changes between the
        two states, in key order of old_state followed by new keys.
    """
    if old_state is new_state:
        return []

    if not (isinstance(old_state, dict) and isinstance(new_state, dict)):
        if old_state == new_state:
            return []
        return [
            StateDiffEntry(
                path=path_prefix, op=StateDiffOp.REPLACE, value=new_state
            )
        ]

    diffs = []

    all_keys = list(old_state.keys()) + [
        key for key in new_state.keys() if key not in old_state
    ]

    for key in all_keys:
        path = f"{path_prefix}.{key}" if path_prefix else str(key)

        if key not in old_state:
            diffs.append(
                StateDiffEntry(
                    path=path, op=StateDiffOp.ADD, value=new_state[key]
                )
            )
        elif key not in new_state:
            diffs.append(
                StateDiffEntry(path=path, op=StateDiffOp.REMOVE, value=None)
            )
        elif old_state[key] is not new_state[key]:
            diffs.extend(
                compute_state_diff(old_state[key], new_state[key], path)
            )

    return diffs
