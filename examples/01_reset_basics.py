"""Example of the four bulk mutations.

This example demonstrates how to:
1. Declare a state hierarchy and build the registry.
2. Change the state through ordinary commits.
3. Clear, reset, reset-all and overwrite parts of the tree.
4. See a request with a bad target rejected without touching the state.
"""

from state_reset.execution.gateway import MutationGateway
from state_reset.execution.tree import write_at
from state_reset.models.node import declare_node
from state_reset.models.request import (
    StateClear,
    StateOverwrite,
    StateReset,
    StateResetAll,
)
from state_reset.observability.logging import setup_logging
from state_reset.registry.node_registry import NodeRegistry


def run_example():
    setup_logging("WARNING")

    # 1. Declare
    preferences = declare_node(
        "preferences", defaults={"darkmode": False, "language": "en"}
    )
    session = declare_node("session")
    todos = declare_node("todos", defaults={"list": []})
    app = declare_node(
        "app", defaults={"status": "ONLINE"}, children=[preferences, session, todos]
    )

    registry = NodeRegistry.from_root(app)
    gateway = MutationGateway(registry)
    print(f"Initial state: {gateway.state}")

    # 2. Ordinary changes
    state = write_at(gateway.state, ("app", "preferences", "darkmode"), True)
    state = write_at(state, ("app", "session", "lastseen"), 1700000000)
    state = write_at(state, ("app", "todos", "list"), [{"description": "Test", "done": False}])
    gateway.commit(state)
    print(f"After changes: {gateway.state}")

    # 3. Bulk mutations
    print("\n--- ResetAll(session) ---")
    res = gateway.dispatch(StateResetAll(session))
    print(f"{res.status}: {gateway.state}")

    print("\n--- Overwrite(session=None) ---")
    gateway.dispatch(StateOverwrite((session, None)))
    print(f"session: {gateway.select(session)}")

    print("\n--- Reset(session) ---")
    gateway.dispatch(StateReset(session))
    print(f"session: {gateway.select(session)}")

    print("\n--- Clear(preferences) ---")
    gateway.dispatch(StateClear(preferences))
    print(f"state: {gateway.state}")

    # 4. Rejected request
    print("\n--- Clear('todos') with a plain string ---")
    before = gateway.state
    res = gateway.dispatch(StateClear("todos"))
    print(f"{res.status}: {res.error.detail}")
    assert gateway.state == before


if __name__ == "__main__":
    run_example()
