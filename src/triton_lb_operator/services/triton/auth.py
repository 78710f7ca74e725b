"""HTTP Signature authentication for Triton CloudAPI."""

from __future__ import annotations

import base64
from email.utils import formatdate

import requests
from requests.auth import AuthBase
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def load_private_key(key_material: bytes) -> rsa.RSAPrivateKey:
    """Load an unencrypted PEM RSA private key.

    Raises:
        ValueError: If the key is encrypted, malformed or not RSA
    """
    if b"Proc-Type: 4,ENCRYPTED" in key_material or b"BEGIN ENCRYPTED PRIVATE KEY" in key_material:
        raise ValueError("encrypted private keys are not supported, please decrypt the key first")

    try:
        key = serialization.load_pem_private_key(key_material, password=None)
    except TypeError as e:
        raise ValueError("encrypted private keys are not supported, please decrypt the key first") from e
    except ValueError as e:
        raise ValueError(f"failed to decode PEM private key: {e}") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError(f"unsupported private key type {type(key).__name__}, an RSA key is required")
    return key


class HTTPSignatureAuth(AuthBase):
    """Sign requests with the ``Signature`` scheme over the Date header."""

    algorithm = "rsa-sha256"

    def __init__(self, account: str, key_id: str, key_material: bytes):
        self.key_id = f"/{account}/keys/{key_id}"
        self._key = load_private_key(key_material)

    def sign(self, date: str) -> str:
        """Return the base64 signature of the ``date`` header line."""
        signature = self._key.sign(
            f"date: {date}".encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return base64.b64encode(signature).decode("ascii")

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        date = request.headers.get("Date") or formatdate(usegmt=True)
        request.headers["Date"] = date
        request.headers["Authorization"] = (
            f'Signature keyId="{self.key_id}",algorithm="{self.algorithm}",'
            f'headers="date",signature="{self.sign(date)}"'
        )
        return request
