"""Models for Triton load balancer operations."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PortMapping:
    """A single listener to backend mapping.

    A ``backend_port`` of 0 means the backend listens on ``listen_port``.
    """

    type: str
    listen_port: int
    backend_name: str
    backend_port: int = 0


@dataclass
class LoadBalancerConfig:
    """Normalized load balancer configuration derived from a Service."""

    name: str
    port_mappings: list[PortMapping] = field(default_factory=list)
    max_backends: int = 0
    certificate_name: str = ""
    metrics_acl: list[str] = field(default_factory=list)


@dataclass
class ExternalResource:
    """A Triton instance acting as a load balancer."""

    id: str
    name: str
    state: str = ""
    addresses: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_machine(cls, machine: dict) -> ExternalResource:
        """Build from a CloudAPI machine document."""
        return cls(
            id=machine.get("id", ""),
            name=machine.get("name", ""),
            state=machine.get("state", ""),
            addresses=list(machine.get("ips") or []),
            metadata={k: str(v) for k, v in (machine.get("metadata") or {}).items()},
            tags={k: str(v) for k, v in (machine.get("tags") or {}).items()},
        )

    def load_balancer_config(self) -> LoadBalancerConfig:
        """Decode the configuration stored in this instance's metadata."""
        from .codec import config_from_metadata

        return config_from_metadata(self.name, self.metadata)
