"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_INGRESS_UPDATED,
    EVENT_REASON_LOADBALANCER_CREATED,
    EVENT_REASON_LOADBALANCER_DELETED,
    EVENT_REASON_LOADBALANCER_UPDATED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_REQUEUED,
    EVENT_REASON_RECONCILE_STARTED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body the event is attached to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], operation: str, message: str) -> None:
    """Emit reconcile failed event."""
    name = body.get("metadata", {}).get("name", "unknown")
    emit_event(
        body,
        EVENT_REASON_RECONCILE_FAILED,
        f"Failed to {operation} load balancer {name}: {message}",
        type_="Warning",
    )


def emit_reconcile_requeued(body: dict[str, Any], operation: str, message: str, delay: float) -> None:
    """Emit event for a transient failure that will be retried."""
    name = body.get("metadata", {}).get("name", "unknown")
    emit_event(
        body,
        EVENT_REASON_RECONCILE_REQUEUED,
        f"Transient failure during {operation} of load balancer {name}, retrying in {delay:.0f}s: {message}",
        type_="Warning",
    )


def emit_loadbalancer_created(body: dict[str, Any], name: str) -> None:
    """Emit load balancer created event."""
    emit_event(body, EVENT_REASON_LOADBALANCER_CREATED, f"Load balancer {name} created")


def emit_loadbalancer_updated(body: dict[str, Any], name: str) -> None:
    """Emit load balancer updated event."""
    emit_event(body, EVENT_REASON_LOADBALANCER_UPDATED, f"Load balancer {name} updated")


def emit_loadbalancer_deleted(body: dict[str, Any], name: str) -> None:
    """Emit load balancer deleted event."""
    emit_event(body, EVENT_REASON_LOADBALANCER_DELETED, f"Load balancer {name} deleted")


def emit_ingress_updated(body: dict[str, Any], ip: str) -> None:
    """Emit ingress address event."""
    emit_event(body, EVENT_REASON_INGRESS_UPDATED, f"Ingress address set to {ip}")
