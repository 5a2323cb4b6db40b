"""Address-based reads and copy-on-write updates of a state tree.

State trees are nested dicts. Updates never mutate their input: only the
dicts along the written address are copied, every other branch of the
result is the very same object as in the input.
"""

from collections.abc import Mapping
from typing import Any

from state_reset.models.base import Address


class _Absent:
    """Marker for an address that does not exist in a state tree."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


def read_at(state: Any, address: Address) -> Any:
    """Returns the value at an address, or ABSENT.

    Missing keys and non-mapping intermediates mean the subtree was never
    initialized; they are not errors.
    """
    current = state
    for key in address:
        if not isinstance(current, Mapping) or key not in current:
            return ABSENT
        current = current[key]
    return current


def write_at(state: Any, address: Address, value: Any) -> Any:
    """Returns a copy of state with value placed at address.

    Missing or non-mapping intermediates are replaced by fresh dicts. An
    empty address replaces the whole tree.
    """
    if not address:
        return value

    head, rest = address[0], address[1:]
    result = dict(state) if isinstance(state, Mapping) else {}
    result[head] = write_at(result.get(head), rest, value)
    return result


def remove_at(state: Any, address: Address) -> Any:
    """Returns a copy of state without the key at the end of address.

    An empty address removes the whole tree. If the address does not exist,
    state is returned unchanged.
    """
    if not address:
        return {}
    if read_at(state, address) is ABSENT:
        return state

    head, rest = address[0], address[1:]
    result = dict(state)
    if rest:
        result[head] = remove_at(result[head], rest)
    else:
        del result[head]
    return result
