"""Enumeration definitions for the state reset engine.

This module contains standard Enum classes used across the package to ensure
consistency in typing and values for mutation kinds, statuses, diff
operations and configuration options.
"""

from enum import Enum


class MutationKind(str, Enum):
    """Defines the bulk mutation requested against the state tree.

    Attributes:
        CLEAR: Drop everything except the targeted subtrees.
        RESET: Restore the targeted subtrees to their defaults.
        RESET_ALL: Restore the whole tree to defaults, except the targets.
        OVERWRITE: Replace the targeted subtrees with caller values.
    """

    CLEAR = "clear"
    RESET = "reset"
    RESET_ALL = "reset_all"
    OVERWRITE = "overwrite"


class MutationStatus(str, Enum):
    """Defines the final status of a mutation request.

    Attributes:
        SUCCESS: The mutation was computed (and committed by the gateway).
        REJECTED: At least one target was invalid; nothing was applied.
    """

    SUCCESS = "success"
    REJECTED = "rejected"


class StateDiffOp(str, Enum):
    """Defines the type of operation in a state diff entry.

    Attributes:
        ADD: A new key or item was added.
        REMOVE: An existing key or item was removed.
        REPLACE: An existing value was changed.
    """

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class ResetBaseline(str, Enum):
    """Defines what Reset and ResetAll restore nodes to.

    Attributes:
        DECLARED: The defaults declared on each node.
        BOOT: The state captured once initialization completed.
    """

    DECLARED = "declared"
    BOOT = "boot"
