"""Base load balancer client interface."""

from __future__ import annotations

import threading
from typing import Protocol

from .models import ExternalResource, LoadBalancerConfig


class LoadBalancerClient(Protocol):
    """Protocol defining load balancer instance operations."""

    def create(self, config: LoadBalancerConfig, stop_event: threading.Event | None = None) -> None:
        """Create a load balancer and wait until it is running."""
        ...

    def update(self, name: str, config: LoadBalancerConfig) -> None:
        """Rewrite the metadata of an existing load balancer."""
        ...

    def delete(self, name: str, stop_event: threading.Event | None = None) -> None:
        """Delete a load balancer and wait until it is gone.

        Deleting a name with no managed instance is a no-op.
        """
        ...

    def get(self, name: str) -> ExternalResource | None:
        """Look up a managed load balancer, or None if absent."""
        ...

    def get_by_name(self, name: str) -> ExternalResource | None:
        """Fetch fresh instance details (addresses) for a managed load balancer."""
        ...
