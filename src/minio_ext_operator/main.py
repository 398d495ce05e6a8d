"""Main entry point for the MinIO Ext Operator."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .handlers.shared import get_config
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    config = get_config()

    structured_logging.setup_structured_logging(logging.getLevelName(config.log_level))

    # Use annotations so progress bookkeeping never competes with status writes
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = config.request_timeout
    settings.execution.max_workers = config.max_workers

    initialize_tracing(config)

    # Start metrics HTTP server with health check endpoints
    health.start_metrics_server(config.metrics_port)
    health.set_ready()
    logger.info(f"Operator configured, storage endpoint {config.minio_endpoint}, metrics on port {config.metrics_port}")


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not ready while the operator drains."""
    health.set_ready(False)
    logger.info("Operator shutting down")


def main() -> None:
    """Run the operator, cluster-wide unless WATCH_NAMESPACE is set."""
    config = get_config()
    if config.watch_namespace:
        kopf.run(namespaces=[config.watch_namespace])
    else:
        kopf.run(clusterwide=True)


if __name__ == "__main__":
    main()
