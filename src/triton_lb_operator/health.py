"""Health check endpoints for the operator."""

from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.wrappers import Response


def create_combined_wsgi_app(ready_check: Any = None) -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    Args:
        ready_check: Optional callable returning True when the operator can
            serve reconciles (e.g. the Triton client has been built)

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        """Route /healthz and /readyz, delegate everything else to prometheus."""
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            response = Response('{"status":"ok"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        if path == "/readyz":
            if ready_check is not None and not ready_check():
                response = Response('{"status":"not ready"}', mimetype="application/json", status=503)
            else:
                response = Response('{"status":"ready"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app
