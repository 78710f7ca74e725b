"""Main entry point for the Triton Load Balancer Operator."""

from __future__ import annotations

import logging
import threading
from typing import Any

import kopf
from werkzeug.serving import make_server

from . import health
from . import logging as structured_logging
from . import tracing
from .builders.client import create_triton_client_from_config
from .config import OperatorConfig
from .handlers import loadbalancer

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    tracing.initialize_tracing()

    cfg = OperatorConfig.from_env()

    # Use annotations so progress storage does not fight with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    # Create and delete block a worker for up to their timeout
    settings.execution.max_workers = cfg.max_workers

    logger.info(
        f"Initializing Triton client for account {cfg.triton_account} at {cfg.triton_url} "
        f"(package={cfg.package}, image={cfg.image})"
    )
    loadbalancer.configure_handler(create_triton_client_from_config(cfg))

    # Metrics and health endpoints share one port
    combined_app = health.create_combined_wsgi_app(
        ready_check=lambda: loadbalancer.get_handler().client is not None
    )
    server = make_server("", cfg.metrics_port, combined_app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Abort in-flight waits so workers can exit."""
    logger.info("Operator stopping, cancelling pending load balancer waits")
    loadbalancer.shutdown_event.set()


def run() -> None:
    """Run the operator watching Services in all namespaces."""
    kopf.run(clusterwide=True)
