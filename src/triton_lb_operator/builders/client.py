"""Builder for Triton client instances."""

from __future__ import annotations

from kubernetes import client, config as k8s_config

from ..config import OperatorConfig
from ..services.triton.client import TritonClient
from ..utils.secrets import get_secret_value


def load_key_material(cfg: OperatorConfig) -> bytes:
    """Read the signing key from a file or a Kubernetes Secret.

    A key path takes precedence over the Secret reference.

    Raises:
        ValueError: If the key cannot be read
    """
    if cfg.triton_key_path:
        try:
            with open(cfg.triton_key_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ValueError(f"failed to read private key: {e}") from e

    try:
        k8s_config.load_incluster_config()
    except k8s_config.ConfigException:
        k8s_config.load_kube_config()

    api = client.CoreV1Api()
    value = get_secret_value(api, cfg.key_secret_namespace, cfg.key_secret_name, cfg.key_secret_key)
    return value.encode("utf-8")


def create_triton_client_from_config(cfg: OperatorConfig) -> TritonClient:
    """Create a Triton client from operator configuration.

    Args:
        cfg: Operator configuration

    Returns:
        Configured Triton client

    Raises:
        ValueError: If the signing key is missing or unusable
    """
    return TritonClient(
        url=cfg.triton_url,
        account=cfg.triton_account,
        key_id=cfg.triton_key_id,
        key_material=load_key_material(cfg),
        package=cfg.package,
        image=cfg.image,
        create_timeout=cfg.create_timeout,
        delete_timeout=cfg.delete_timeout,
        poll_interval=cfg.poll_interval,
        request_timeout=cfg.request_timeout,
    )
