"""Shared fixtures for unit tests."""

from __future__ import annotations

import threading
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from triton_lb_operator.constants import OWNERSHIP_TAGS, STATE_RUNNING, TAG_SERVICE
from triton_lb_operator.services.triton.codec import config_to_metadata
from triton_lb_operator.services.triton.exceptions import LoadBalancerNotFoundError
from triton_lb_operator.services.triton.models import ExternalResource, LoadBalancerConfig


class FakeLoadBalancerClient:
    """In-memory load balancer client recording every call."""

    def __init__(self, addresses: list[str] | None = None) -> None:
        self.resources: dict[str, ExternalResource] = {}
        self.addresses = ["203.0.113.1", "10.0.0.1"] if addresses is None else addresses
        self.create_calls = 0
        self.update_calls = 0
        self.delete_calls = 0
        self.get_calls = 0
        self.create_error: Exception | None = None
        self.update_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.get_error: Exception | None = None
        self.stop_events: list[threading.Event | None] = []

    def add(self, config: LoadBalancerConfig) -> ExternalResource:
        resource = ExternalResource(
            id=f"id-{config.name}",
            name=config.name,
            state=STATE_RUNNING,
            addresses=list(self.addresses),
            metadata=config_to_metadata(config),
            tags={TAG_SERVICE: config.name, **OWNERSHIP_TAGS},
        )
        self.resources[config.name] = resource
        return resource

    def create(self, config: LoadBalancerConfig, stop_event: threading.Event | None = None) -> None:
        self.create_calls += 1
        self.stop_events.append(stop_event)
        if self.create_error is not None:
            raise self.create_error
        self.add(config)

    def update(self, name: str, config: LoadBalancerConfig) -> None:
        self.update_calls += 1
        if self.update_error is not None:
            raise self.update_error
        if name not in self.resources:
            raise LoadBalancerNotFoundError(name)
        self.resources[name].metadata = config_to_metadata(config)

    def delete(self, name: str, stop_event: threading.Event | None = None) -> None:
        self.delete_calls += 1
        self.stop_events.append(stop_event)
        if self.delete_error is not None:
            raise self.delete_error
        self.resources.pop(name, None)

    def get(self, name: str) -> ExternalResource | None:
        self.get_calls += 1
        if self.get_error is not None:
            raise self.get_error
        return self.resources.get(name)

    def get_by_name(self, name: str) -> ExternalResource | None:
        return self.resources.get(name)


def _make_service(
    name: str = "test-service",
    namespace: str = "default",
    ports: list[dict[str, Any]] | None = None,
    annotations: dict[str, str] | None = None,
    service_type: str = "LoadBalancer",
    finalizers: list[str] | None = None,
    status: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a Service body as kopf delivers it."""
    if ports is None:
        ports = [{"name": "http", "port": 80, "targetPort": 8080, "protocol": "TCP"}]
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": namespace,
        "uid": "1234-5678",
        "annotations": annotations or {},
    }
    if finalizers is not None:
        metadata["finalizers"] = finalizers
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": metadata,
        "spec": {"type": service_type, "ports": ports},
        "status": status or {},
    }


@pytest.fixture
def make_service():
    """Factory for Service bodies."""
    return _make_service


@pytest.fixture
def fake_client() -> FakeLoadBalancerClient:
    """In-memory load balancer client."""
    return FakeLoadBalancerClient()


@pytest.fixture(autouse=True)
def mock_kopf_event():
    """Capture Kubernetes events instead of posting them."""
    with patch("triton_lb_operator.utils.events.kopf.event") as mock_event:
        yield mock_event


@pytest.fixture(autouse=True)
def no_rate_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable request pacing so client tests run instantly."""
    monkeypatch.setattr("triton_lb_operator.utils.rate_limit._TRITON_RATE_LIMIT_PER_SECOND", 1e9)


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """RSA key used to sign test requests."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def key_material(rsa_key: rsa.RSAPrivateKey) -> bytes:
    """Unencrypted PEM encoding of the test key."""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _make_response(status_code: int, body: Any = None) -> MagicMock:
    """Build a fake requests response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if body is None else str(body)
    if body is None:
        response.json.side_effect = ValueError("no body")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def make_response():
    """Factory for fake requests responses."""
    return _make_response
