"""Triton CloudAPI client for load balancer instances."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import requests

from ... import metrics
from ...constants import METADATA_PREFIX, OWNERSHIP_TAGS, STATE_FAILED, STATE_RUNNING, TAG_SERVICE
from ...tracing import trace_span
from ...utils.polling import wait_for
from ...utils.rate_limit import rate_limit_triton
from .auth import HTTPSignatureAuth
from .codec import config_to_metadata
from .exceptions import LoadBalancerNotFoundError, ProvisioningFailedError, TritonError
from .models import ExternalResource, LoadBalancerConfig

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "g4-highcpu-1G"
DEFAULT_IMAGE = "70e3ae72-96b6-11ea-9274-2f3c66e8b2c4"
API_VERSION = "~9"


class TritonClient:
    """Load balancer operations against Triton CloudAPI.

    Load balancers are compute instances addressed by name and scoped by the
    ownership tags, so instances created by anything else are never touched.
    """

    def __init__(
        self,
        url: str,
        account: str,
        key_id: str,
        key_material: bytes,
        package: str = DEFAULT_PACKAGE,
        image: str = DEFAULT_IMAGE,
        create_timeout: float = 300.0,
        delete_timeout: float = 300.0,
        poll_interval: float = 10.0,
        request_timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: CloudAPI endpoint URL
            account: Triton account name
            key_id: Fingerprint of the signing key
            key_material: PEM encoded private key
            package: Package used for new load balancer instances
            image: Image used for new load balancer instances
            create_timeout: Seconds to wait for a new instance to be running
            delete_timeout: Seconds to wait for a deleted instance to disappear
            poll_interval: Seconds between state checks
            request_timeout: Timeout for a single HTTP request
            session: Optional pre-configured requests session
        """
        self.url = url.rstrip("/")
        self.account = account
        self.package = package
        self.image = image
        self.create_timeout = create_timeout
        self.delete_timeout = delete_timeout
        self.poll_interval = poll_interval
        self.request_timeout = request_timeout

        self.session = session or requests.Session()
        self.session.auth = HTTPSignatureAuth(account, key_id, key_material)
        self.session.headers.update({
            "Accept": "application/json",
            "Accept-Version": API_VERSION,
        })

    @rate_limit_triton
    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        allow_missing: bool = False,
    ) -> requests.Response:
        """Send a CloudAPI request, raising TritonError for failures.

        With ``allow_missing`` a 404 or 410 answer is returned to the caller
        instead of raised.
        """
        start_time = time.time()
        try:
            response = self.session.request(
                method,
                f"{self.url}/{self.account}{path}",
                params=params,
                json=json,
                timeout=self.request_timeout,
            )
        except requests.Timeout as e:
            metrics.api_call_total.labels(api_type="triton", operation=operation, result="error").inc()
            raise TritonError(f"request timeout: {e}") from e
        except requests.RequestException as e:
            metrics.api_call_total.labels(api_type="triton", operation=operation, result="error").inc()
            raise TritonError(f"request failed: {e}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="triton", operation=operation).observe(duration)

        missing = allow_missing and response.status_code in (404, 410)
        if response.status_code >= 400 and not missing:
            metrics.api_call_total.labels(api_type="triton", operation=operation, result="error").inc()
            raise self._error_from_response(response)

        metrics.api_call_total.labels(api_type="triton", operation=operation, result="success").inc()
        return response

    @staticmethod
    def _error_from_response(response: requests.Response) -> TritonError:
        code = None
        message = response.text
        try:
            body = response.json()
            code = body.get("code")
            message = body.get("message", message)
        except ValueError:
            pass
        return TritonError(
            f"{code or 'HTTP ' + str(response.status_code)}: {message}",
            status_code=response.status_code,
            code=code,
        )

    def _list_machines(self, name: str) -> list[dict[str, Any]]:
        """List managed instances with the given name."""
        params = {"name": name}
        params.update({f"tag.{key}": value for key, value in OWNERSHIP_TAGS.items()})
        response = self._request("GET", "/machines", "list", params=params, allow_missing=True)
        if response.status_code in (404, 410):
            return []
        return response.json() or []

    def _get_machine(self, machine_id: str) -> dict[str, Any] | None:
        response = self._request("GET", f"/machines/{machine_id}", "get", allow_missing=True)
        if response.status_code in (404, 410):
            return None
        return response.json()

    def create(self, config: LoadBalancerConfig, stop_event: threading.Event | None = None) -> None:
        """Create a load balancer instance and wait until it is running.

        Raises:
            TritonError: If the API rejects the request
            ProvisioningFailedError: If the instance ends up in the failed state
            OperationTimeoutError: If the instance is not running in time
            OperationCancelledError: If ``stop_event`` is set while waiting
        """
        with trace_span("triton_create", attributes={"loadbalancer.name": config.name}):
            body: dict[str, Any] = {
                "name": config.name,
                "package": self.package,
                "image": self.image,
            }
            for key, value in config_to_metadata(config).items():
                body[f"metadata.{key}"] = value
            tags = {TAG_SERVICE: config.name, **OWNERSHIP_TAGS}
            for key, value in tags.items():
                body[f"tag.{key}"] = value

            machine = self._request("POST", "/machines", "create", json=body).json()
            machine_id = machine["id"]
            logger.info(f"Submitted load balancer {config.name} as instance {machine_id}")

            def is_running() -> bool:
                current = self._get_machine(machine_id)
                state = current.get("state") if current else None
                if state == STATE_FAILED:
                    raise ProvisioningFailedError(config.name, machine_id)
                return state == STATE_RUNNING

            state = wait_for(
                "create",
                config.name,
                is_running,
                timeout=self.create_timeout,
                interval=self.poll_interval,
                stop_event=stop_event,
            )
            logger.info(f"Load balancer {config.name} running after {state.elapsed:.0f}s ({state.ticks} checks)")

    def update(self, name: str, config: LoadBalancerConfig) -> None:
        """Rewrite the metadata of an existing load balancer.

        CloudAPI merges posted metadata into what the instance already has, so
        managed keys the new configuration no longer sets are deleted one by
        one afterwards. Does not wait for the software on the instance to pick
        up the change.

        Raises:
            LoadBalancerNotFoundError: If the load balancer does not exist
            TritonError: If an API call fails
        """
        with trace_span("triton_update", attributes={"loadbalancer.name": name}):
            machines = self._list_machines(name)
            if not machines:
                raise LoadBalancerNotFoundError(name)
            machine = machines[0]

            desired = config_to_metadata(config)
            self._request("POST", f"/machines/{machine['id']}/metadata", "update_metadata", json=desired)

            stale = [
                key for key in (machine.get("metadata") or {})
                if key.startswith(METADATA_PREFIX) and key not in desired
            ]
            for key in stale:
                self._request(
                    "DELETE",
                    f"/machines/{machine['id']}/metadata/{key}",
                    "delete_metadata",
                    allow_missing=True,
                )
            if stale:
                logger.info(f"Removed metadata {', '.join(sorted(stale))} from load balancer {name}")

    def delete(self, name: str, stop_event: threading.Event | None = None) -> None:
        """Delete a load balancer and wait until it no longer appears in listings.

        A name with no managed instance is treated as already deleted.

        Raises:
            TritonError: If an API call fails
            OperationTimeoutError: If the instance is still listed after the timeout
            OperationCancelledError: If ``stop_event`` is set while waiting
        """
        with trace_span("triton_delete", attributes={"loadbalancer.name": name}):
            machines = self._list_machines(name)
            if not machines:
                logger.info(f"Load balancer {name} not found, nothing to delete")
                return

            self._request("DELETE", f"/machines/{machines[0]['id']}", "delete", allow_missing=True)

            state = wait_for(
                "delete",
                name,
                lambda: not self._list_machines(name),
                timeout=self.delete_timeout,
                interval=self.poll_interval,
                stop_event=stop_event,
            )
            logger.info(f"Load balancer {name} deleted after {state.elapsed:.0f}s ({state.ticks} checks)")

    def get(self, name: str) -> ExternalResource | None:
        """Look up a managed load balancer from the scoped listing."""
        machines = self._list_machines(name)
        if not machines:
            return None
        return ExternalResource.from_machine(machines[0])

    def get_by_name(self, name: str) -> ExternalResource | None:
        """Fetch fresh details, including addresses, for a managed load balancer."""
        machines = self._list_machines(name)
        if not machines:
            return None
        machine = self._get_machine(machines[0]["id"])
        if machine is None:
            return None
        return ExternalResource.from_machine(machine)
