"""Liveness, readiness and metrics endpoints on one HTTP port."""

from __future__ import annotations

import json
import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Response

# Set once startup has configured the operator, cleared on shutdown
_ready = threading.Event()


def set_ready(ready: bool = True) -> None:
    """Flip the readiness reported by /readyz."""
    if ready:
        _ready.set()
    else:
        _ready.clear()


def is_ready() -> bool:
    return _ready.is_set()


def _status_response(status: str, code: int) -> Response:
    return Response(json.dumps({"status": status}), mimetype="application/json", status=code)


def create_combined_wsgi_app() -> Any:
    """Route /healthz and /readyz here and everything else to Prometheus."""
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            response = _status_response("ok", 200)
        elif path == "/readyz":
            response = _status_response("ready", 200) if is_ready() else _status_response("starting", 503)
        else:
            return metrics_app(environ, start_response)
        return response(environ, start_response)

    return combined_app


def start_metrics_server(port: int) -> None:
    """Serve /metrics, /healthz and /readyz from a background thread."""
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, name="metrics-server", daemon=True)
    thread.start()
