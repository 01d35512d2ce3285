"""HTTP request handlers for the status API.

Provides endpoints for the current snapshot, refresh triggers, and the
effective configuration.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler
from typing import Any, Dict, Optional, TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from .state import StatusState

API_PATHS = {"/api/status", "/api/refresh", "/api/config", "/api/collectors"}


class StatusRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the status API.

    Serves:
    - GET /api/status: latest snapshot
    - POST /api/refresh: recompute the snapshot
    - GET /api/config: effective configuration
    - GET /api/collectors: probe availability
    """

    # These will be set by the server
    status_state: Optional["StatusState"] = None
    url_prefix: str = ""
    config: Optional[Dict] = None

    def do_GET(self):
        target = self._target()
        if target is None:
            return
        if target == "/api/status":
            return self._handle_status()
        if target == "/api/config":
            return self._handle_config()
        if target == "/api/collectors":
            return self._handle_collectors()
        self.send_error(HTTPStatus.NOT_FOUND, "Unknown endpoint")

    def do_OPTIONS(self):
        target = self._target()
        if target is None:
            return
        if target in API_PATHS:
            self.send_response(HTTPStatus.NO_CONTENT)
            self._send_cors_headers()
            self.send_header("Access-Control-Allow-Methods", "GET,POST,OPTIONS")
            self.send_header("Access-Control-Allow-Headers", "Content-Type")
            self.end_headers()
            return
        self.send_error(HTTPStatus.NOT_FOUND, "Unknown endpoint")

    def do_POST(self):
        target = self._target()
        if target is None:
            return
        if target == "/api/refresh":
            return self._handle_refresh()
        self.send_error(HTTPStatus.NOT_FOUND, "Unknown endpoint")

    # --- API Handlers ---

    def _handle_status(self):
        state = self.status_state
        if not state:
            self.send_error(HTTPStatus.SERVICE_UNAVAILABLE, "Server not initialized.")
            return
        payload = state.get_status()
        if not state.is_ready():
            self._send_json(payload, status_code=HTTPStatus.SERVICE_UNAVAILABLE)
            return
        self._send_json(payload)

    def _handle_refresh(self):
        state = self.status_state
        if not state:
            self.send_error(HTTPStatus.SERVICE_UNAVAILABLE, "Server not initialized.")
            return
        ok, detail = state.refresh(blocking=True)
        status = HTTPStatus.OK if ok else HTTPStatus.SERVICE_UNAVAILABLE
        self._send_json({"ok": ok, "detail": detail}, status_code=status)

    def _handle_collectors(self):
        state = self.status_state
        if not state:
            self.send_error(HTTPStatus.SERVICE_UNAVAILABLE, "Server not initialized.")
            return
        self._send_json({"collectors": state.aggregator.collector_status()})

    def _handle_config(self):
        """Return current configuration for frontends."""
        self._send_json(self.config or {})

    # --- Helpers ---

    def _target(self) -> Optional[str]:
        parsed = urlparse(self.path)
        stripped = self._strip_prefix(parsed.path)
        if stripped is None:
            self.send_error(HTTPStatus.NOT_FOUND, "Invalid prefix")
            return None
        return stripped.rstrip("/") or "/"

    def _send_json(self, data: Any, *, status_code: HTTPStatus = HTTPStatus.OK):
        body = json.dumps(data).encode("utf-8")
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-store, max-age=0")
        self._send_cors_headers()
        self.end_headers()
        self.wfile.write(body)

    def _send_cors_headers(self):
        self.send_header("Access-Control-Allow-Origin", "*")

    def _strip_prefix(self, path: str) -> Optional[str]:
        norm_prefix = (self.url_prefix or "").rstrip("/")
        if not norm_prefix:
            return path or "/"
        if not norm_prefix.startswith("/"):
            norm_prefix = f"/{norm_prefix}"
        if not path.startswith(norm_prefix):
            return None
        stripped = path[len(norm_prefix):] or "/"
        if not stripped.startswith("/"):
            stripped = "/" + stripped
        return stripped

    def log_message(self, format, *args):
        print(f"[http] {self.address_string()} {format % args}", flush=True)
