"""Builder for load balancer configurations."""

from __future__ import annotations

from typing import Any

from ..constants import (
    ANNOTATION_CERTIFICATE_NAME,
    ANNOTATION_MAX_RS,
    ANNOTATION_METRICS_ACL,
    PORT_TYPE_HTTP,
    PORT_TYPE_HTTPS,
    PORT_TYPE_TCP,
)
from ..services.triton.codec import decode_acl, parse_int
from ..services.triton.models import LoadBalancerConfig, PortMapping


def classify_port(port: dict[str, Any]) -> str:
    """Return the listener type for a Service port.

    A port named "http" or numbered 80 is http; named "https" or numbered
    443 is https; anything else is plain tcp.
    """
    name = port.get("name") or ""
    number = port.get("port")
    if name == PORT_TYPE_HTTP or number == 80:
        return PORT_TYPE_HTTP
    if name == PORT_TYPE_HTTPS or number == 443:
        return PORT_TYPE_HTTPS
    return PORT_TYPE_TCP


def create_loadbalancer_config_from_service(spec: dict[str, Any], meta: dict[str, Any]) -> LoadBalancerConfig:
    """Create a load balancer configuration from a Service.

    Malformed or missing annotations fall back to their defaults instead of
    failing the reconcile.

    Args:
        spec: Service spec
        meta: Service metadata

    Returns:
        Normalized load balancer configuration
    """
    name = meta.get("name", "")
    annotations = meta.get("annotations") or {}

    config = LoadBalancerConfig(name=name)

    for port in spec.get("ports") or []:
        # Named target ports cannot be resolved here; leave them unset
        target_port = port.get("targetPort")
        backend_port = target_port if isinstance(target_port, int) else 0
        config.port_mappings.append(
            PortMapping(
                type=classify_port(port),
                listen_port=parse_int(port.get("port")),
                backend_name=name,
                backend_port=backend_port,
            )
        )

    if ANNOTATION_MAX_RS in annotations:
        config.max_backends = max(parse_int(annotations[ANNOTATION_MAX_RS]), 0)

    if ANNOTATION_CERTIFICATE_NAME in annotations:
        config.certificate_name = annotations[ANNOTATION_CERTIFICATE_NAME]

    if ANNOTATION_METRICS_ACL in annotations:
        config.metrics_acl = decode_acl(annotations[ANNOTATION_METRICS_ACL])

    return config
