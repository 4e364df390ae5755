"""
Liveness HTTP listener for the bot process (health checks only).

Endpoints:
  GET  /health  — liveness probe (returns {"status": "ok"})
  GET  /info    — public settings: contract, chain, bot address, model
  OPTIONS *     — CORS preflight

Every response allows any origin (with credentials). Nothing here reflects the
state of the poll loop, and the mnemonic / API key are never exposed.
"""

from __future__ import annotations

import http.server
import json
import logging
import threading
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3327


class Handler(http.server.BaseHTTPRequestHandler):
    # replaced per server by make_handler()
    public_info: dict = {}

    def log_message(self, format, *args):
        logger.debug("[%s] %s", self.address_string(), format % args)

    def send_cors_headers(self):
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Credentials", "true")
        self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")

    def send_json(self, code: int, data):
        body = json.dumps(data, indent=2).encode()
        self.send_response(code)
        self.send_cors_headers()
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_cors_headers()
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        path = urlparse(self.path).path
        if path == "/health":
            self.send_json(200, {"status": "ok"})
        elif path == "/info":
            self.send_json(200, self.public_info)
        else:
            self.send_json(404, {"error": "not_found"})


def make_handler(public_info: Optional[dict] = None) -> type:
    return type("LivenessHandler", (Handler,), {"public_info": dict(public_info or {})})


def start_liveness_server(
    port: int = DEFAULT_PORT,
    public_info: Optional[dict] = None,
    host: str = "0.0.0.0",
) -> http.server.ThreadingHTTPServer:
    """Bind the listener and serve it from a daemon thread. Port 0 picks a free port."""
    server = http.server.ThreadingHTTPServer((host, port), make_handler(public_info))
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, name="liveness", daemon=True)
    thread.start()
    logger.info("Server listening on port %d...", server.server_address[1])
    return server
