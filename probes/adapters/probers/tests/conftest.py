"""
Shared fixtures for prober tests - a local HTTP server with canned routes.
"""

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Tuple

import pytest


class _Server(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address):
        super().__init__(address, _Handler)
        self.routes: Dict[str, Tuple[int, bytes]] = {}
        self.requests: List[Dict] = []

    def handle_error(self, request, client_address):
        # Clients that stop reading early (size cap tests) break the pipe.
        pass


class _Handler(BaseHTTPRequestHandler):
    def _respond(self):
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        self.server.requests.append(
            {
                "method": self.command,
                "path": self.path,
                "headers": dict(self.headers),
                "body": body,
            }
        )
        status, payload = self.server.routes.get(self.path, (404, b"not found"))
        self.send_response(status)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    do_GET = _respond
    do_POST = _respond
    do_PUT = _respond

    def log_message(self, format, *args):
        pass


class LocalServer:
    """Handle returned by the http_server fixture."""

    def __init__(self, server: _Server):
        self._server = server

    def route(self, path: str, status: int, body: bytes) -> str:
        """Serve body with status at path; returns the full URL."""
        self._server.routes[path] = (status, body)
        return self.url(path)

    def url(self, path: str) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}{path}"

    @property
    def requests(self) -> List[Dict]:
        return self._server.requests


@pytest.fixture
def http_server():
    """Run a local HTTP server for the duration of a test."""
    server = _Server(("127.0.0.1", 0))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield LocalServer(server)
    finally:
        server.shutdown()
        server.server_close()
