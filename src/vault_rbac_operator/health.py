"""Health check endpoints served next to the Prometheus metrics."""

from __future__ import annotations

import threading
from typing import Any, Callable

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Response


def create_combined_wsgi_app(vault_check: Callable[[], bool] | None = None) -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    Args:
        vault_check: Optional callable reporting whether Vault is reachable;
            /healthz fails while it returns False

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> list[bytes]:
        """WSGI app that routes /healthz and /readyz, delegates /metrics to prometheus."""
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            if vault_check is not None and not vault_check():
                response = Response('{"status":"vault unavailable"}', mimetype="application/json", status=503)
            else:
                response = Response('{"status":"ok"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        elif path == "/readyz":
            response = Response('{"status":"ready"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        else:
            # Delegate all other paths (including /metrics) to prometheus app
            return metrics_app(environ, start_response)

    return combined_app


def start_metrics_server(port: int, vault_check: Callable[[], bool] | None = None) -> threading.Thread:
    """Serve metrics and health endpoints from a daemon thread."""
    server = make_server("", port, create_combined_wsgi_app(vault_check), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread
