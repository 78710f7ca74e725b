"""Base handler class with common functionality for resource handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, NoReturn

import kopf

from .. import metrics
from ..constants import CONTROLLER_NAME, FINALIZER, TRANSIENT_REQUEUE_DELAY
from ..logging import log_resource_event
from ..utils.errors import ReconcileError, is_transient_error, sanitize_exception
from ..utils.events import emit_reconcile_failed, emit_reconcile_requeued, emit_reconcile_started


class BaseHandler:
    """Base class for resource handlers with common functionality."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "Service")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        """Extract common resource context from metadata."""
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(
        self,
        level: int,
        meta: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: BaseException | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    def handle_remote_error(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        operation: str,
        error: Exception,
    ) -> NoReturn:
        """Report a failed remote call and raise according to its classification.

        Transient failures raise ``kopf.TemporaryError`` so kopf retries after a
        fixed delay without counting a handler failure. Everything else raises
        ``ReconcileError`` and is left to kopf's regular retry backoff.

        Raises:
            kopf.TemporaryError: For transient failures
            ReconcileError: For permanent failures
        """
        name = meta.get("name", "unknown")
        sanitized_error = sanitize_exception(error)
        error_type = type(error).__name__

        if is_transient_error(error):
            metrics.error_total.labels(kind=self.kind, error_type=error_type, classification="transient").inc()
            self.log_warning(
                meta,
                f"Transient failure during {operation}, requeueing in {TRANSIENT_REQUEUE_DELAY}s",
                reason="TransientError",
                operation=operation,
                error=sanitized_error,
                error_type=error_type,
            )
            emit_reconcile_requeued(body, operation, sanitized_error, TRANSIENT_REQUEUE_DELAY)
            raise kopf.TemporaryError(
                f"{operation} of load balancer {name} failed: {sanitized_error}",
                delay=TRANSIENT_REQUEUE_DELAY,
            ) from error

        metrics.error_total.labels(kind=self.kind, error_type=error_type, classification="permanent").inc()
        self.log_error(meta, f"Failed to {operation} load balancer", error=error, reason="OperationFailed", operation=operation)
        emit_reconcile_failed(body, operation, sanitized_error)
        raise ReconcileError(operation, name, sanitized_error) from error

    def ensure_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Ensure finalizer is present in metadata."""
        finalizers = list(meta.get("finalizers") or [])
        if FINALIZER not in finalizers:
            finalizers.append(FINALIZER)
            patch.metadata["finalizers"] = finalizers

    def remove_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove finalizer from metadata."""
        finalizers = list(meta.get("finalizers") or [])
        if FINALIZER in finalizers:
            finalizers.remove(FINALIZER)
            patch.metadata["finalizers"] = finalizers if finalizers else None

    def reconcile_with_metrics(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        reconcile_fn: Callable[[], None],
        emit_started: bool = True,
    ) -> None:
        """Execute reconciliation with metrics and error handling.

        Errors already reported by ``handle_remote_error`` are only counted;
        anything unexpected is logged and posted as a Warning event here.

        Args:
            body: Kubernetes resource body, used as the event target
            meta: Kubernetes resource metadata
            reconcile_fn: Function to execute for reconciliation
            emit_started: Post the ReconcileStarted event; periodic passes skip it
        """
        if emit_started:
            emit_reconcile_started(body)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        except kopf.TemporaryError:
            metrics.reconcile_total.labels(kind=self.kind, result="requeued").inc()
            raise
        except ReconcileError:
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        except Exception as e:
            sanitized_error = sanitize_exception(e)
            metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__, classification="unexpected").inc()
            self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            emit_reconcile_failed(body, "reconcile", sanitized_error)
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)
