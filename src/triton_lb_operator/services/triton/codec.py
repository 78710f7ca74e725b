"""Encoding of load balancer configuration into instance metadata.

The port map is stored as a single string::

    <type>://<listen port>:<backend name>[:<backend port>][,...]

Decoding is lossy: malformed entries are dropped rather than reported, so only
strings produced by :func:`encode_portmap` are guaranteed to round-trip.
"""

from __future__ import annotations

import re

from ...constants import (
    METADATA_CERTIFICATE_NAME,
    METADATA_LOADBALANCER,
    METADATA_MAX_RS,
    METADATA_METRICS_ACL,
    METADATA_PORTMAP,
)
from .models import LoadBalancerConfig, PortMapping

_ACL_SEPARATORS = re.compile(r"[,\s]+")
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def encode_portmap(mappings: list[PortMapping]) -> str:
    """Encode port mappings into the portmap metadata string."""
    entries = []
    for mapping in mappings:
        entry = f"{mapping.type}://{mapping.listen_port}:{mapping.backend_name}"
        if mapping.backend_port:
            entry += f":{mapping.backend_port}"
        entries.append(entry)
    return ",".join(entries)


def decode_portmap(value: str) -> list[PortMapping]:
    """Decode a portmap metadata string, skipping malformed entries."""
    mappings = []
    for entry in value.split(","):
        parts = entry.split("://", 1)
        if len(parts) != 2:
            continue
        port_type, remainder = parts

        port_parts = remainder.split(":")
        if len(port_parts) < 2:
            continue

        listen_port = _atoi(port_parts[0])
        if listen_port is None:
            continue

        backend_port = 0
        if len(port_parts) > 2:
            backend_port = _atoi(port_parts[2]) or 0

        mappings.append(
            PortMapping(
                type=port_type,
                listen_port=listen_port,
                backend_name=port_parts[1],
                backend_port=backend_port,
            )
        )
    return mappings


def encode_acl(acl: list[str]) -> str:
    """Encode a metrics ACL list."""
    return ",".join(acl)


def decode_acl(value: str) -> list[str]:
    """Decode a comma and/or whitespace separated ACL string."""
    return [token for token in _ACL_SEPARATORS.split(value) if token]


def _atoi(value: str) -> int | None:
    # ASCII digits with an optional sign only; int() would also take
    # underscores, surrounding whitespace and non-ASCII digits
    if not _DECIMAL.fullmatch(value):
        return None
    return int(value)


def parse_int(value: str | None) -> int:
    """Parse a decimal integer, returning 0 for anything malformed."""
    if value is None:
        return 0
    return _atoi(str(value)) or 0


def config_to_metadata(config: LoadBalancerConfig) -> dict[str, str]:
    """Build the full metadata document for a load balancer instance."""
    metadata = {
        METADATA_LOADBALANCER: "true",
        METADATA_PORTMAP: encode_portmap(config.port_mappings),
    }
    if config.max_backends > 0:
        metadata[METADATA_MAX_RS] = str(config.max_backends)
    if config.certificate_name:
        metadata[METADATA_CERTIFICATE_NAME] = config.certificate_name
    if config.metrics_acl:
        metadata[METADATA_METRICS_ACL] = encode_acl(config.metrics_acl)
    return metadata


def config_from_metadata(name: str, metadata: dict[str, str]) -> LoadBalancerConfig:
    """Rebuild a configuration from instance metadata."""
    config = LoadBalancerConfig(name=name)
    if METADATA_PORTMAP in metadata:
        config.port_mappings = decode_portmap(metadata[METADATA_PORTMAP])
    if METADATA_MAX_RS in metadata:
        config.max_backends = parse_int(metadata[METADATA_MAX_RS])
    if METADATA_CERTIFICATE_NAME in metadata:
        config.certificate_name = metadata[METADATA_CERTIFICATE_NAME]
    if METADATA_METRICS_ACL in metadata:
        config.metrics_acl = decode_acl(metadata[METADATA_METRICS_ACL])
    return config
