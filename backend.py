"""
HTTP client for the tree backend.

Endpoints
    GET /data               → Snapshot JSON
    GET /step               advance one operation (body ignored)
    GET /reset              back to the initial tree (body ignored)
    GET /delete?val=<key>   request deletion of a key (body ignored)

Every call raises ``requests.RequestException`` on transport errors and
``requests.HTTPError`` on non-2xx answers; nothing is retried.
"""

import logging

import requests

from snapshot import Snapshot

log = logging.getLogger(__name__)


class BackendClient:
    """
    Args:
        base_url (str): e.g. ``http://127.0.0.1:8080``.
        timeout  (float): Seconds per request.
        session  (requests.Session | None): Shared session; one is
                 created when omitted.
    """

    def __init__(self, base_url, timeout=5.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path, params=None):
        url = f"{self.base_url}{path}"
        log.debug("GET %s %s", url, params or "")
        r = self.session.get(url, params=params, timeout=self.timeout)
        r.raise_for_status()
        return r

    def fetch_snapshot(self) -> Snapshot:
        return Snapshot.from_json(self._get("/data").json())

    def step(self) -> None:
        log.info("backend: step")
        self._get("/step")

    def reset(self) -> None:
        log.info("backend: reset")
        self._get("/reset")

    def delete(self, key) -> None:
        log.info("backend: delete %r", key)
        self._get("/delete", params={"val": key})

    def close(self) -> None:
        self.session.close()
