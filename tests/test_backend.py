import pytest
import requests

from backend import BackendClient
from conftest import two_level_data
from snapshot import NodeKind


class FakeResponse:
    def __init__(self, payload=None, status=200):
        self.payload = payload
        self.status_code = status

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None):
        self.response = response or FakeResponse()
        self.requests = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        return self.response

    def close(self):
        self.closed = True


def test_fetch_snapshot_decodes_payload():
    session = FakeSession(FakeResponse(two_level_data()))
    client = BackendClient("http://tree:9000/", session=session)
    snap = client.fetch_snapshot()
    assert snap.root_node.kind is NodeKind.INNER
    assert session.requests == [("http://tree:9000/data", None, 5.0)]


def test_mutations_hit_their_endpoints():
    session = FakeSession()
    client = BackendClient("http://tree:9000", timeout=1.5, session=session)
    client.step()
    client.reset()
    client.delete(42)
    assert session.requests == [
        ("http://tree:9000/step", None, 1.5),
        ("http://tree:9000/reset", None, 1.5),
        ("http://tree:9000/delete", {"val": 42}, 1.5),
    ]


def test_http_errors_propagate():
    client = BackendClient("http://tree", session=FakeSession(FakeResponse(status=500)))
    with pytest.raises(requests.HTTPError):
        client.step()


def test_close_closes_session():
    session = FakeSession()
    BackendClient("http://tree", session=session).close()
    assert session.closed
