"""Example of resetting to the state captured at boot.

This example demonstrates how to:
1. Configure the engine to reset to the boot baseline.
2. Run initialization, then capture the initial state once.
3. Reset a node back to its configured (not declared) value.
"""

from state_reset.execution.engine import EngineConfig
from state_reset.execution.gateway import MutationGateway
from state_reset.models.enums import ResetBaseline
from state_reset.models.node import declare_node
from state_reset.models.request import StateOverwrite, StateReset
from state_reset.registry.node_registry import NodeRegistry


def run_example():
    preferences = declare_node(
        "preferences", defaults={"darkmode": False, "language": "en"}
    )
    app = declare_node("app", children=[preferences])

    gateway = MutationGateway(
        NodeRegistry.from_root(app),
        config=EngineConfig(reset_baseline=ResetBaseline.BOOT),
    )

    # 1. Initialization, e.g. loading user settings
    gateway.dispatch(
        StateOverwrite((preferences, {"darkmode": True, "language": "fr"}))
    )
    baseline = gateway.capture_initial_state()
    print(f"Boot baseline: {baseline}")

    # 2. The user changes things
    gateway.dispatch(
        StateOverwrite((preferences, {"darkmode": False, "language": "de"}))
    )
    print(f"Changed: {gateway.select(preferences)}")

    # 3. Reset restores the boot value
    gateway.dispatch(StateReset(preferences))
    print(f"After reset: {gateway.select(preferences)}")
    assert gateway.select(preferences) == {"darkmode": True, "language": "fr"}


if __name__ == "__main__":
    run_example()
