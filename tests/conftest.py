"""Shared fixtures: a small app state hierarchy and a live gateway."""

from typing import NamedTuple
from unittest.mock import MagicMock

import pytest

from state_reset.execution.gateway import MutationGateway
from state_reset.execution.tree import write_at
from state_reset.models.node import NodeDeclaration, declare_node
from state_reset.registry.node_registry import NodeRegistry


class AppNodes(NamedTuple):
    app: NodeDeclaration
    preferences: NodeDeclaration
    session: NodeDeclaration
    todos: NodeDeclaration
    admin: NodeDeclaration


class AppActions:
    """Ordinary application actions, committed the way an outer dispatcher would."""

    def __init__(self, gateway: MutationGateway, nodes: AppNodes):
        self.gateway = gateway
        self.nodes = nodes

    def _set(self, node, value):
        address = self.gateway.engine.address_of(node)
        self.gateway.commit(write_at(self.gateway.state, address, value))

    def add_todo(self, description: str):
        todos = self.gateway.select(self.nodes.todos)
        item = {"description": description, "done": False}
        self._set(self.nodes.todos, {**todos, "list": [*todos["list"], item]})

    def toggle_dark(self) -> dict:
        preferences = self.gateway.select(self.nodes.preferences)
        self._set(
            self.nodes.preferences,
            {**preferences, "darkmode": not preferences["darkmode"]},
        )
        return self.gateway.select(self.nodes.preferences)

    def end_session(self, lastseen: int) -> dict:
        session = self.gateway.select(self.nodes.session)
        self._set(self.nodes.session, {**session, "lastseen": lastseen})
        return self.gateway.select(self.nodes.session)

    def set_superadmin(self):
        self._set(self.nodes.admin, {"role": "superadmin"})


@pytest.fixture
def nodes() -> AppNodes:
    preferences = declare_node(
        "preferences", defaults={"darkmode": False, "language": "en"}
    )
    session = declare_node("session")
    todos = declare_node("todos", defaults={"list": []})
    app = declare_node(
        "app",
        defaults={"status": "ONLINE"},
        children=[preferences, session, todos],
    )
    admin = declare_node("admin", defaults={"role": "admin"})
    return AppNodes(app, preferences, session, todos, admin)


@pytest.fixture
def registry(nodes) -> NodeRegistry:
    return NodeRegistry.from_root(nodes.app)


@pytest.fixture
def warn() -> MagicMock:
    return MagicMock()


@pytest.fixture
def commit() -> MagicMock:
    return MagicMock()


@pytest.fixture
def gateway(registry, warn, commit) -> MutationGateway:
    return MutationGateway(registry, warn=warn, commit=commit)


@pytest.fixture
def actions(gateway, nodes, commit) -> AppActions:
    """App actions with one todo already added."""
    actions = AppActions(gateway, nodes)
    actions.add_todo("Test")
    assert gateway.select(nodes.todos)["list"] == [
        {"description": "Test", "done": False}
    ]
    commit.reset_mock()
    return actions
