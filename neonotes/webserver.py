"""HTTP API and web client server for neonotes."""

from __future__ import annotations

import http.server
import json
import logging
import re
import socketserver
import threading
import webbrowser
from collections.abc import Callable
from functools import wraps
from typing import Any
from urllib.parse import parse_qs, urlparse

from neonotes.core.notes import (
    create_note,
    delete_note,
    get_note,
    list_notes,
    search_notes,
    update_note,
)
from neonotes.core.store import StoreError
from neonotes.web import get_template

_logger = logging.getLogger(__name__)

NOTE_PATH = re.compile(r"^/api/notes/([^/]+)/?$")

NOT_FOUND = {"error": "Note not found"}


class InvalidBody(ValueError):
    """Request body is not a JSON object."""


def _parse_id(raw: str) -> int | None:
    """Parse a note id from the URL; None for anything non-numeric."""
    try:
        return int(raw)
    except ValueError:
        return None


def _store_errors(
    method: Callable[[NotesHandler], None],
) -> Callable[[NotesHandler], None]:
    """Answer 500 instead of dropping the connection when the data file is unreadable."""

    @wraps(method)
    def wrapper(self: NotesHandler) -> None:
        try:
            method(self)
        except StoreError as e:
            _logger.error("%s", e)
            self.send_json({"error": str(e)}, 500)

    return wrapper


class NotesHandler(http.server.BaseHTTPRequestHandler):
    """Request handler for the notes API and web client."""

    def log_message(self, format: str, *args: object) -> None:
        _logger.debug("%s - %s", self.address_string(), format % args)

    def send_json(self, data: object, status: int = 200) -> None:
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def send_html(self, html: str) -> None:
        body = html.encode()
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def read_body(self) -> dict[str, Any]:
        """Read JSON object body from request.

        Raises:
            InvalidBody: If the body is not valid JSON or not an object, or
                the Content-Length header is not a number.
        """
        try:
            content_length = int(self.headers.get("Content-Length", 0) or 0)
        except ValueError as e:
            raise InvalidBody("Invalid Content-Length header") from e
        body = self.rfile.read(content_length) if content_length > 0 else b""
        if not body:
            return {}
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidBody("Invalid JSON body") from e
        if not isinstance(data, dict):
            raise InvalidBody("Request body must be a JSON object")
        return data

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header(
            "Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"
        )
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    @_store_errors
    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        path = parsed.path

        # Serve the web client
        if path == "/" or path == "/index.html":
            self.send_html(get_template())
            return

        # API: All notes, in storage order
        if path in ("/api/notes", "/api/notes/"):
            self.send_json([n.to_dict() for n in list_notes()])
            return

        # API: Single note
        match = NOTE_PATH.match(path)
        if match:
            note_id = _parse_id(match.group(1))
            note = get_note(note_id) if note_id is not None else None
            if note is None:
                self.send_json(NOT_FOUND, 404)
                return
            self.send_json(note.to_dict())
            return

        # API: Search
        if path == "/api/search":
            query = parse_qs(parsed.query).get("q", [""])[0]
            self.send_json([n.to_dict() for n in search_notes(query)])
            return

        self.send_json({"error": "Not found"}, 404)

    @_store_errors
    def do_POST(self) -> None:
        path = urlparse(self.path).path

        try:
            body = self.read_body()
        except InvalidBody as e:
            self.send_json({"error": str(e)}, 400)
            return

        # API: Create note
        if path in ("/api/notes", "/api/notes/"):
            note = create_note(body)
            self.send_json(note.to_dict(), 201)
            return

        # API: Natural-language agent
        if path == "/api/agent":
            self._handle_agent(body)
            return

        self.send_json({"error": "Not found"}, 404)

    @_store_errors
    def do_PUT(self) -> None:
        path = urlparse(self.path).path

        match = NOTE_PATH.match(path)
        if not match:
            self.send_json({"error": "Not found"}, 404)
            return

        try:
            body = self.read_body()
        except InvalidBody as e:
            self.send_json({"error": str(e)}, 400)
            return

        note_id = _parse_id(match.group(1))
        note = update_note(note_id, body) if note_id is not None else None
        if note is None:
            self.send_json(NOT_FOUND, 404)
            return
        self.send_json(note.to_dict())

    @_store_errors
    def do_DELETE(self) -> None:
        path = urlparse(self.path).path

        match = NOTE_PATH.match(path)
        if not match:
            self.send_json({"error": "Not found"}, 404)
            return

        note_id = _parse_id(match.group(1))
        if note_id is None or not delete_note(note_id):
            self.send_json(NOT_FOUND, 404)
            return
        self.send_json({"message": "Note deleted successfully"})

    def _handle_agent(self, body: dict[str, Any]) -> None:
        from neonotes.core.ai.agent import run_agent

        message = body.get("message")
        if not isinstance(message, str) or not message.strip():
            self.send_json({"error": "Message is required"}, 400)
            return

        try:
            result = run_agent(message, body.get("history"))
        except Exception as e:
            _logger.exception("Agent request failed")
            self.send_json({"error": str(e) or "Agent request failed"}, 500)
            return

        self.send_json(result.to_dict())


def run_server(
    host: str = "127.0.0.1", port: int = 3000, open_browser: bool = True
) -> None:
    """Start the web server and block until interrupted."""

    # Plain TCPServer: one request at a time, so file rewrites never interleave
    class Server(socketserver.TCPServer):
        allow_reuse_address = True

    httpd = Server((host, port), NotesHandler)
    _logger.info("Serving neonotes on http://%s:%d", host, port)

    if open_browser:

        def open_delayed() -> None:
            import time

            time.sleep(0.3)
            webbrowser.open(f"http://localhost:{port}")

        threading.Thread(target=open_delayed, daemon=True).start()

    try:
        # poll_interval=0.5 allows Ctrl+C to be detected on Windows
        httpd.serve_forever(poll_interval=0.5)
    except KeyboardInterrupt:
        pass
    finally:
        _logger.info("Stopping server")
        httpd.server_close()
