"""Tests for the status HTTP API."""

import json
import threading
from http.server import ThreadingHTTPServer
from urllib.error import HTTPError
from urllib.request import Request, urlopen

import pytest

from meta_hybrid.server.routes import StatusRequestHandler
from meta_hybrid.server.state import StatusState


@pytest.fixture
def api_server():
    """Start the API on an ephemeral port; returns the base URL."""
    servers = []

    def _start(state, url_prefix=""):
        handler = type("Handler", (StatusRequestHandler,), {
            "status_state": state,
            "url_prefix": url_prefix,
            "config": {"mountsource": "KSU"},
            "log_message": lambda self, *args: None,
        })
        server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_address[1]}"

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()


def _get(url, method="GET"):
    try:
        with urlopen(Request(url, method=method, data=b"" if method == "POST" else None), timeout=5) as resp:
            return resp.status, json.loads(resp.read())
    except HTTPError as e:
        body = e.read()
        return e.code, json.loads(body) if body and e.headers.get("Content-Type") == "application/json" else None


class TestStatusRoutes:
    def test_status_loading_before_refresh(self, api_server, make_aggregator):
        base = api_server(StatusState(make_aggregator()))
        status, body = _get(f"{base}/api/status")

        assert status == 503
        assert body["meta"]["status"] == "loading"
        assert body["meta"]["field_states"]["storage"] == "loading"

    def test_refresh_then_status(self, api_server, make_aggregator):
        base = api_server(StatusState(make_aggregator()))

        status, body = _get(f"{base}/api/refresh", method="POST")
        assert status == 200
        assert body["ok"] is True

        status, body = _get(f"{base}/api/status")
        assert status == 200
        assert body["storage"]["label"] == "/debug_ramdisk"
        assert body["active_partitions"] == ["system", "vendor"]
        assert body["partitions"][2] == {"name": "product", "active": False}

    def test_config(self, api_server, make_aggregator):
        base = api_server(StatusState(make_aggregator()))
        status, body = _get(f"{base}/api/config")
        assert status == 200
        assert body == {"mountsource": "KSU"}

    def test_url_prefix(self, api_server, make_aggregator):
        state = StatusState(make_aggregator())
        state.refresh()
        base = api_server(state, url_prefix="/meta")

        status, _ = _get(f"{base}/meta/api/status")
        assert status == 200
        status, _ = _get(f"{base}/api/status")
        assert status == 404

    def test_unknown_endpoint(self, api_server, make_aggregator):
        base = api_server(StatusState(make_aggregator()))
        status, _ = _get(f"{base}/api/nope")
        assert status == 404

    def test_collectors(self, api_server, make_aggregator):
        base = api_server(StatusState(make_aggregator()))
        status, body = _get(f"{base}/api/collectors")

        assert status == 200
        assert [c["name"] for c in body["collectors"]] == ["storage", "partitions", "system", "modules"]
        assert body["collectors"][1] == {"name": "partitions", "display_name": "Partitions", "available": True}
