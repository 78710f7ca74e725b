"""Exceptions raised by the Triton client."""

from __future__ import annotations


class TritonError(Exception):
    """A CloudAPI request failed.

    Args:
        message: Error message, usually the CloudAPI error body or transport error
        status_code: HTTP status code when the API answered
        code: CloudAPI error code (e.g. ``InvalidCredentials``)
    """

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class LoadBalancerNotFoundError(TritonError):
    """No managed instance exists for the load balancer name."""

    def __init__(self, name: str):
        super().__init__(f"load balancer {name} not found", status_code=404)
        self.name = name


class ProvisioningFailedError(TritonError):
    """The instance reached the ``failed`` state while being created."""

    def __init__(self, name: str, machine_id: str):
        super().__init__(f"load balancer {name} failed to provision (instance {machine_id})")
        self.name = name
        self.machine_id = machine_id


class OperationTimeoutError(Exception):
    """Waiting for an instance to converge exceeded its bound."""

    def __init__(self, operation: str, name: str, elapsed: float):
        super().__init__(
            f"{operation} of load balancer {name} did not complete, gave up after {elapsed:.0f}s"
        )
        self.operation = operation
        self.name = name
        self.elapsed = elapsed


class OperationCancelledError(Exception):
    """A wait was aborted because the operator is stopping."""

    def __init__(self, operation: str, name: str, elapsed: float):
        super().__init__(f"{operation} of load balancer {name} cancelled after {elapsed:.0f}s")
        self.operation = operation
        self.name = name
        self.elapsed = elapsed
