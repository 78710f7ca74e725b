"""Handler reconciling LoadBalancer Services into Triton instances."""

from __future__ import annotations

import threading
from typing import Any

import kopf

from .. import metrics
from ..builders.loadbalancer import create_loadbalancer_config_from_service
from ..config import resync_interval
from ..constants import (
    FINALIZER,
    KIND_SERVICE,
    PRIVATE_ADDRESS_PREFIXES,
    SERVICE_API_VERSION,
    SERVICE_PLURAL,
    SERVICE_TYPE_LOAD_BALANCER,
)
from ..services.triton.base import LoadBalancerClient
from ..tracing import trace_span
from ..utils.events import (
    emit_ingress_updated,
    emit_loadbalancer_created,
    emit_loadbalancer_deleted,
    emit_loadbalancer_updated,
    emit_reconcile_requeued,
)
from ..utils.locks import KeyedLock
from .base import BaseHandler

# Requeue delay while the operator startup has not built the client yet
CLIENT_MISSING_DELAY = 10

# Set on operator shutdown to abort in-flight create/delete waits
shutdown_event = threading.Event()


def select_ingress_address(addresses: list[str]) -> str | None:
    """Pick the address to publish as the Service ingress.

    The first address outside the private prefixes wins; otherwise the first
    address in list order. Returns None for an empty list.
    """
    for address in addresses:
        if not address.startswith(PRIVATE_ADDRESS_PREFIXES):
            return address
    return addresses[0] if addresses else None


class LoadBalancerHandler(BaseHandler):
    """Handler for Services of type LoadBalancer."""

    def __init__(
        self,
        client: LoadBalancerClient | None = None,
        stop_event: threading.Event | None = None,
    ):
        """Initialize load balancer handler.

        Args:
            client: Load balancer client, may be set later by the operator startup
            stop_event: Event aborting in-flight waits
        """
        super().__init__(KIND_SERVICE)
        self.client = client
        self.stop_event = stop_event or shutdown_event
        self.locks = KeyedLock()

    def _require_client(self, body: dict[str, Any], meta: dict[str, Any], operation: str) -> LoadBalancerClient:
        if self.client is None:
            message = "Triton client is not configured yet"
            self.log_warning(meta, f"{message}, requeueing in {CLIENT_MISSING_DELAY}s", reason="ClientMissing",
                             operation=operation)
            emit_reconcile_requeued(body, operation, message, CLIENT_MISSING_DELAY)
            raise kopf.TemporaryError(message, delay=CLIENT_MISSING_DELAY)
        return self.client

    def reconcile(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Create or update the load balancer for a Service and publish its address."""
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")

        if spec.get("type") != SERVICE_TYPE_LOAD_BALANCER:
            self.log_info(meta, f"Service {name} is not of type LoadBalancer, ignoring", reason="Ignored")
            return
        if meta.get("deletionTimestamp"):
            self.log_info(meta, f"Service {name} is being deleted, skipping reconcile", reason="Deleting")
            return

        client = self._require_client(body, meta, "reconcile")

        with self.locks.hold(f"{namespace}/{name}"), trace_span(
            "reconcile_loadbalancer", kind=KIND_SERVICE, attributes={"loadbalancer.name": name}
        ):
            lb_config = create_loadbalancer_config_from_service(spec, meta)

            operation = "look up"
            try:
                existing = client.get(name)

                if existing is None:
                    operation = "create"
                    self.log_info(meta, f"Creating load balancer {name}", reason="Creating",
                                  ports=len(lb_config.port_mappings))
                    client.create(lb_config, stop_event=self.stop_event)
                    metrics.loadbalancer_operations_total.labels(operation="create", result="success").inc()
                    emit_loadbalancer_created(body, name)
                    self.log_info(meta, f"Created load balancer {name}", reason="LoadBalancerCreated")
                else:
                    operation = "update"
                    changed = existing.load_balancer_config() != lb_config
                    client.update(name, lb_config)
                    metrics.loadbalancer_operations_total.labels(operation="update", result="success").inc()
                    if changed:
                        emit_loadbalancer_updated(body, name)
                    self.log_info(meta, f"Updated load balancer {name}", reason="LoadBalancerUpdated",
                                  changed=changed)

                operation = "read addresses of"
                instance = client.get_by_name(name)
            except Exception as e:
                metrics.loadbalancer_operations_total.labels(operation=operation, result="failed").inc()
                self.handle_remote_error(body, meta, operation, e)

            self.ensure_finalizer(meta, patch)

            ip = select_ingress_address(instance.addresses if instance else [])
            if ip is None:
                self.log_info(meta, f"Load balancer {name} has no addresses yet", reason="NoAddress")
                return

            current_ingress = (status.get("loadBalancer") or {}).get("ingress") or []
            patch.status["loadBalancer"] = {"ingress": [{"ip": ip}]}
            if current_ingress != [{"ip": ip}]:
                emit_ingress_updated(body, ip)
                self.log_info(meta, f"Updated Service status with load balancer IP {ip}", reason="IngressUpdated",
                              ip=ip)

    def delete(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Delete the load balancer of a Service and release the finalizer.

        The finalizer stays in place when deletion fails so the Service cannot
        disappear before its instance does.
        """
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")

        self.log_info(meta, f"Service {name} is being deleted", event="deletion", reason="Deletion")
        client = self._require_client(body, meta, "delete")

        with self.locks.hold(f"{namespace}/{name}"), trace_span(
            "delete_loadbalancer", kind=KIND_SERVICE, attributes={"loadbalancer.name": name}
        ):
            try:
                client.delete(name, stop_event=self.stop_event)
            except Exception as e:
                metrics.loadbalancer_operations_total.labels(operation="delete", result="failed").inc()
                self.handle_remote_error(body, meta, "delete", e)

            metrics.loadbalancer_operations_total.labels(operation="delete", result="success").inc()
            emit_loadbalancer_deleted(body, name)
            self.log_info(meta, f"Deleted load balancer {name}", reason="LoadBalancerDeleted")
            self.remove_finalizer(meta, patch)


def is_load_balancer(spec: dict[str, Any], **_: Any) -> bool:
    """Filter for Services the operator reconciles."""
    return spec.get("type") == SERVICE_TYPE_LOAD_BALANCER


def is_managed(spec: dict[str, Any], meta: dict[str, Any], **_: Any) -> bool:
    """Filter for Services whose deletion the operator must handle."""
    return is_load_balancer(spec) or FINALIZER in (meta.get("finalizers") or [])


# Global handler instance
_handler = LoadBalancerHandler()


def configure_handler(client: LoadBalancerClient) -> LoadBalancerHandler:
    """Attach the load balancer client built at startup."""
    _handler.client = client
    return _handler


def get_handler() -> LoadBalancerHandler:
    """Return the global handler instance."""
    return _handler


@kopf.on.create(SERVICE_API_VERSION, SERVICE_PLURAL, when=is_load_balancer)
@kopf.on.update(SERVICE_API_VERSION, SERVICE_PLURAL, when=is_load_balancer)
@kopf.on.resume(SERVICE_API_VERSION, SERVICE_PLURAL, when=is_load_balancer)
def handle_service(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle LoadBalancer Service reconciliation."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(body, spec, meta, status, patch))


@kopf.timer(SERVICE_API_VERSION, SERVICE_PLURAL, when=is_load_balancer, interval=resync_interval())
def resync_service(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Periodically re-reconcile a LoadBalancer Service to repair drift."""
    _handler.reconcile_with_metrics(
        body, meta, lambda: _handler.reconcile(body, spec, meta, status, patch), emit_started=False
    )


@kopf.on.delete(SERVICE_API_VERSION, SERVICE_PLURAL, when=is_managed)
def handle_service_delete(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle LoadBalancer Service deletion."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.delete(body, spec, meta, patch))
