"""Operator configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .services.triton.client import DEFAULT_IMAGE, DEFAULT_PACKAGE


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e


def resync_interval() -> float:
    """Seconds between periodic re-reconciles of every load balancer Service.

    Read once, when the handlers module registers its kopf timer.
    """
    return _float_env("RESYNC_INTERVAL_SECONDS", 300.0)


@dataclass
class OperatorConfig:
    """Settings for the operator process."""

    triton_url: str
    triton_account: str
    triton_key_id: str
    triton_key_path: str | None = None
    key_secret_name: str | None = None
    key_secret_key: str = "triton-key"
    key_secret_namespace: str = "triton-system"
    package: str = DEFAULT_PACKAGE
    image: str = DEFAULT_IMAGE
    create_timeout: float = 300.0
    delete_timeout: float = 300.0
    poll_interval: float = 10.0
    request_timeout: float = 30.0
    max_workers: int = 4
    metrics_port: int = 8080

    @classmethod
    def from_env(cls) -> OperatorConfig:
        """Build the configuration from environment variables.

        Raises:
            ValueError: If required settings are missing or malformed
        """
        required = {
            "TRITON_URL": os.getenv("TRITON_URL", ""),
            "TRITON_ACCOUNT": os.getenv("TRITON_ACCOUNT", ""),
            "TRITON_KEY_ID": os.getenv("TRITON_KEY_ID", ""),
        }
        missing = [name for name, value in required.items() if not value]
        key_path = os.getenv("TRITON_KEY_PATH") or None
        secret_name = os.getenv("TRITON_KEY_SECRET_NAME") or None
        if not key_path and not secret_name:
            missing.append("TRITON_KEY_PATH or TRITON_KEY_SECRET_NAME")
        if missing:
            raise ValueError(f"Missing required Triton settings: {', '.join(missing)}")

        return cls(
            triton_url=required["TRITON_URL"],
            triton_account=required["TRITON_ACCOUNT"],
            triton_key_id=required["TRITON_KEY_ID"],
            triton_key_path=key_path,
            key_secret_name=secret_name,
            key_secret_key=os.getenv("TRITON_KEY_SECRET_KEY", "triton-key"),
            key_secret_namespace=os.getenv("TRITON_KEY_SECRET_NAMESPACE", "triton-system"),
            package=os.getenv("TRITON_LB_PACKAGE") or DEFAULT_PACKAGE,
            image=os.getenv("TRITON_LB_IMAGE") or DEFAULT_IMAGE,
            create_timeout=_float_env("TRITON_LB_CREATE_TIMEOUT_SECONDS", 300.0),
            delete_timeout=_float_env("TRITON_LB_DELETE_TIMEOUT_SECONDS", 300.0),
            poll_interval=_float_env("TRITON_LB_POLL_INTERVAL_SECONDS", 10.0),
            request_timeout=_float_env("TRITON_REQUEST_TIMEOUT_SECONDS", 30.0),
            max_workers=int(_float_env("MAX_WORKERS", 4)),
            metrics_port=int(_float_env("METRICS_PORT", 8080)),
        )
