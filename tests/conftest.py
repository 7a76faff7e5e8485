import pytest

from snapshot import Snapshot


def leaf(index):
    return {"node_type": "leaf", "index": index}


def inner(index):
    return {"node_type": "inner", "index": index}


def make_snapshot(**overrides):
    """A single leaf holding 10 and 20, with any field overridden."""
    data = {
        "node_capacity": 3,
        "root_node": leaf(0),
        "leaf_nodes": [{"keys": [10, 20]}],
        "inner_nodes": [],
        "to_insert": None,
        "to_insert_child": None,
        "to_delete": None,
        "to_merge": None,
        "target": None,
    }
    data.update(overrides)
    return Snapshot.from_json(data)


def two_level_data():
    """
    inner[0] = [20]
      ├── leaf[0] = [5, 10]
      └── leaf[1] = [25, 30]
    """
    return {
        "node_capacity": 3,
        "root_node": inner(0),
        "inner_nodes": [{"keys": [20], "children": [leaf(0), leaf(1)]}],
        "leaf_nodes": [{"keys": [5, 10]}, {"keys": [25, 30]}],
    }


class FakeBackend:
    """Records calls and serves queued snapshots."""

    def __init__(self, *snapshots, fail_on=None):
        self.snapshots = list(snapshots)
        self.calls = []
        self.fail_on = fail_on

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name == self.fail_on:
            raise ConnectionError(f"{name} unreachable")

    def fetch_snapshot(self):
        self._call("data")
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        return self.snapshots[0]

    def step(self):
        self._call("step")

    def reset(self):
        self._call("reset")

    def delete(self, key):
        self._call("delete", key)


class FakeSurface:
    def __init__(self):
        self.renders = []
        self.placeholders = []

    def render(self, layout, node_capacity):
        self.renders.append(([(c.x, c.y) for c in layout.cells], node_capacity))

    def placeholder(self, text):
        self.placeholders.append(text)


@pytest.fixture
def surface():
    return FakeSurface()
