import copy
import threading
import time

from state_reset.execution.engine import EngineConfig
from state_reset.execution.gateway import MutationGateway, StateStore
from state_reset.models.enums import MutationStatus, ResetBaseline
from state_reset.models.request import (
    StateClear,
    StateOverwrite,
    StateReset,
    StateResetAll,
)
from state_reset.models.state_snapshot import StateSnapshot
from state_reset.registry.node_registry import NodeRegistry
from state_reset.utils import compute_checksum


class ToDoAdd:
    """An ordinary action, mistakenly passed where a state node is expected."""

    def __init__(self, payload: str):
        self.payload = payload


class TestGatewayClear:
    def test_clear_all(self, gateway, actions):
        gateway.dispatch(StateClear())
        assert gateway.state == {}

    def test_clear_keeps_selected(self, gateway, actions, nodes):
        gateway.dispatch(StateClear(nodes.preferences))
        assert gateway.state == {
            "app": {"preferences": {"darkmode": False, "language": "en"}}
        }

    def test_clear_keeps_selected_multi(self, gateway, actions, nodes):
        session = actions.end_session(1700000000)
        gateway.dispatch(StateClear(nodes.preferences, nodes.session))
        assert gateway.state == {
            "app": {
                "preferences": {"darkmode": False, "language": "en"},
                "session": session,
            }
        }

    def test_clear_wrong_payload_warns_and_keeps_state(
        self, gateway, actions, warn, commit
    ):
        before = copy.deepcopy(gateway.state)
        snapshot_id = gateway.snapshot.snapshot_id

        result = gateway.dispatch(StateClear(ToDoAdd))

        warn.assert_called_once()
        commit.assert_not_called()
        assert gateway.state == before
        assert result.status == MutationStatus.REJECTED
        assert result.state_snapshot_id == snapshot_id


class TestGatewayReset:
    def test_reset_respects_tree(self, gateway, actions, nodes):
        gateway.dispatch(StateReset(nodes.app))
        assert gateway.select(nodes.todos)["list"] == []

    def test_reset_multi(self, gateway, actions, nodes):
        actions.end_session(1700000000)
        gateway.dispatch(StateReset(nodes.session, nodes.todos))
        assert gateway.select(nodes.session) == {}
        assert gateway.select(nodes.todos)["list"] == []

    def test_reset_wrong_payload(self, gateway, actions, warn):
        before = copy.deepcopy(gateway.state)
        gateway.dispatch(StateReset(ToDoAdd("x")))
        warn.assert_called_once()
        assert gateway.state == before

    def test_empty_reset_commits_nothing(self, gateway, actions, warn, commit):
        snapshot_id = gateway.snapshot.snapshot_id
        result = gateway.dispatch(StateReset())
        assert result.status == MutationStatus.SUCCESS
        assert result.state_snapshot_id == snapshot_id
        warn.assert_not_called()
        commit.assert_not_called()


class TestGatewayResetAll:
    def test_reset_all(self, gateway, actions, nodes):
        preferences = gateway.select(nodes.preferences)
        session = gateway.select(nodes.session)
        actions.toggle_dark()
        actions.end_session(1700000000)

        gateway.dispatch(StateResetAll())

        assert gateway.select(nodes.preferences) == preferences
        assert gateway.select(nodes.session) == session
        assert gateway.select(nodes.todos)["list"] == []

    def test_reset_all_keeps_given(self, gateway, actions, nodes):
        actions.toggle_dark()
        session = actions.end_session(1700000000)

        gateway.dispatch(StateResetAll(nodes.session))

        assert gateway.select(nodes.session) == session
        assert gateway.select(nodes.session)["lastseen"] == 1700000000
        assert gateway.select(nodes.preferences)["darkmode"] is False
        assert gateway.select(nodes.todos)["list"] == []

    def test_reset_all_keeps_given_multi(self, gateway, actions, nodes):
        preferences = actions.toggle_dark()
        session = actions.end_session(1700000000)

        gateway.dispatch(StateResetAll(nodes.preferences, nodes.session))

        assert gateway.select(nodes.preferences) == preferences
        assert gateway.select(nodes.session) == session
        assert gateway.select(nodes.todos)["list"] == []

    def test_reset_all_wrong_payload_is_noop(self, gateway, actions, nodes, warn):
        preferences = actions.toggle_dark()
        session = actions.end_session(1700000000)

        gateway.dispatch(StateResetAll(ToDoAdd))

        warn.assert_called_once()
        assert gateway.select(nodes.preferences) == preferences
        assert gateway.select(nodes.session) == session
        assert len(gateway.select(nodes.todos)["list"]) == 1

    def test_reset_all_covers_every_top_level_node(self, nodes, warn):
        registry = NodeRegistry.from_root(nodes.app, nodes.admin)
        gateway = MutationGateway(registry, warn=warn)
        gateway.commit({**gateway.state, "admin": {"role": "superadmin"}})

        gateway.dispatch(StateResetAll(nodes.app))

        assert gateway.select(nodes.admin) == {"role": "admin"}


class TestGatewayOverwrite:
    def test_overwrite(self, gateway, actions, nodes):
        gateway.dispatch(StateOverwrite((nodes.todos, {"list": []})))
        assert gateway.select(nodes.todos)["list"] == []

    def test_overwrite_multi(self, gateway, actions, nodes):
        actions.end_session(1700000000)
        gateway.dispatch(
            StateOverwrite((nodes.session, None), (nodes.todos, {"list": []}))
        )
        assert gateway.select(nodes.session) is None
        assert gateway.select(nodes.todos)["list"] == []

    def test_overwrite_wrong_payload(self, gateway, actions, warn):
        before = copy.deepcopy(gateway.state)
        gateway.dispatch(StateOverwrite((ToDoAdd, True)))
        warn.assert_called_once()
        assert gateway.state == before


class TestGatewayCommit:
    def test_dispatch_commits_snapshot(self, gateway, actions, nodes, commit):
        previous = gateway.snapshot
        result = gateway.dispatch(StateReset(nodes.todos))

        commit.assert_called_once()
        committed = commit.call_args[0][0]
        assert isinstance(committed, StateSnapshot)
        assert committed is gateway.snapshot
        assert committed.snapshot_id != previous.snapshot_id
        assert committed.checksum == compute_checksum(gateway.state)
        assert result.state_snapshot_id == committed.snapshot_id
        assert result.status == MutationStatus.SUCCESS

    def test_initial_state_is_default_tree(self, gateway):
        assert gateway.state == gateway.engine.default_tree()

    def test_explicit_initial_state(self, registry):
        gateway = MutationGateway(registry, state={"app": {"status": "BOOTING"}})
        assert gateway.state == {"app": {"status": "BOOTING"}}

    def test_select_absent(self, gateway, nodes):
        gateway.commit({})
        assert gateway.select(nodes.todos) is None

    def test_snapshot_timestamps_are_utc(self, gateway, nodes):
        first = gateway.snapshot
        second = gateway.dispatch(StateOverwrite((nodes.todos, {"list": [1]})))
        assert first.timestamp.tzinfo is not None
        assert gateway.snapshot.timestamp.tzinfo is not None
        assert gateway.snapshot.snapshot_id == second.state_snapshot_id
        assert first.timestamp <= gateway.snapshot.timestamp
        assert StateSnapshot(snapshot_id="0").timestamp.tzinfo is not None

    def test_store_apply(self):
        store = StateStore(snapshot=StateSnapshot(snapshot_id="0"))
        snapshot = store.apply({"app": {}})
        assert store.snapshot is snapshot
        assert snapshot.state == {"app": {}}
        assert snapshot.checksum == compute_checksum({"app": {}})

    def test_dispatches_are_serialized(self, registry, nodes):
        gateway = MutationGateway(registry)
        seen = []

        def slow_commit(snapshot):
            seen.append(snapshot.snapshot_id)
            time.sleep(0.01)

        gateway._commit_callback = slow_commit
        threads = [
            threading.Thread(
                target=gateway.dispatch,
                args=(StateOverwrite((nodes.todos, {"list": [i]})),),
            )
            for i in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 5
        assert seen[-1] == gateway.snapshot.snapshot_id


class TestInitialStateCapture:
    def test_capture_once(self, gateway, actions, nodes):
        assert gateway.initial_state is None

        baseline = gateway.capture_initial_state()
        assert baseline == gateway.state
        assert baseline is not gateway.state

        actions.toggle_dark()
        again = gateway.capture_initial_state()
        assert again is baseline
        assert again["app"]["preferences"]["darkmode"] is False

    def test_reset_to_declared_defaults_by_default(self, gateway, actions, nodes):
        gateway.capture_initial_state()
        gateway.dispatch(StateReset(nodes.todos))
        assert gateway.select(nodes.todos)["list"] == []

    def test_reset_to_boot_baseline(self, registry, nodes, commit):
        gateway = MutationGateway(
            registry,
            config=EngineConfig(reset_baseline=ResetBaseline.BOOT),
            commit=commit,
        )
        # Initialization, then capture
        gateway.dispatch(
            StateOverwrite((nodes.preferences, {"darkmode": True, "language": "fr"}))
        )
        gateway.capture_initial_state()

        gateway.dispatch(
            StateOverwrite((nodes.preferences, {"darkmode": False, "language": "en"}))
        )
        gateway.dispatch(StateReset(nodes.preferences))
        assert gateway.select(nodes.preferences) == {
            "darkmode": True,
            "language": "fr",
        }

    def test_capture_logs(self, gateway, caplog):
        with caplog.at_level("INFO"):
            gateway.capture_initial_state()
        assert any("Captured initial state" in r.getMessage() for r in caplog.records)
