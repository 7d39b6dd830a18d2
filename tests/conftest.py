"""Shared fixtures for ceno tests."""

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request, Response

from ceno.config import CenoConfig
from ceno.render import ErrorPageRenderer

# One variable per line so tests can assert on exact values.
TEST_TEMPLATE = """\
Url={{ Url }}
Error={{ Error }}
Code={{ ErrorCode }}
ShouldRefresh={{ ShouldRefresh }}
Advice={{ Advice }}
NoBundlePrepared={{ NoBundlePrepared }}
YouAskedFor={{ YouAskedFor }}
ErrorWeGot={{ ErrorWeGot }}
WhatYouCanDo={{ WhatYouCanDo }}
Retry={{ Retry }}
Report={{ Report }}
Contact={{ ContactInfo }}
"""

REPO_VIEWS_DIR = Path(__file__).resolve().parent.parent / "views"


def page_fields(body: str) -> dict[str, str]:
    """Parse a page rendered from TEST_TEMPLATE."""
    fields = {}
    for line in body.splitlines():
        name, _, value = line.partition("=")
        fields[name] = value
    return fields


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "views"
    directory.mkdir()
    (directory / "error.html").write_text(TEST_TEMPLATE, encoding="utf-8")
    return directory


@pytest.fixture
def config(views_dir: Path) -> CenoConfig:
    return CenoConfig.from_dict({
        "views": {"directory": str(views_dir)},
        "report": {"timeout_seconds": 2},
    })


@pytest.fixture
def renderer(config: CenoConfig) -> ErrorPageRenderer:
    return ErrorPageRenderer(config, environ={})


@pytest.fixture
def make_request():
    def _make(path: str = "/article", base_url: str = "http://example.com") -> Request:
        return EnvironBuilder(path=path, base_url=base_url).get_request()

    return _make


@pytest.fixture
def response() -> Response:
    return Response()


class ReportEndpoint:
    """A local HTTP endpoint recording the reports it receives."""

    def __init__(self) -> None:
        self.status = 200
        self.received: list[dict] = []
        endpoint = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self) -> None:
                length = int(self.headers.get("Content-Length", 0))
                body = self.rfile.read(length)
                endpoint.received.append({
                    "path": self.path,
                    "content_type": self.headers.get("Content-Type"),
                    "body": json.loads(body or b"null"),
                })
                self.send_response(endpoint.status)
                self.send_header("Content-Length", "0")
                self.end_headers()

            def log_message(self, format: str, *args) -> None:
                pass

        self._server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}/report"

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()


@pytest.fixture
def report_endpoint():
    endpoint = ReportEndpoint()
    endpoint.start()
    yield endpoint
    endpoint.stop()


@pytest.fixture
def unreachable_url() -> str:
    """A URL on a local port nothing listens on."""
    import socket

    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/report"


@pytest.fixture(name="page_fields")
def page_fields_fixture():
    return page_fields


@pytest.fixture
def repo_views_dir() -> Path:
    return REPO_VIEWS_DIR
