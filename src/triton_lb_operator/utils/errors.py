"""Error classification and sanitization utilities."""

import re
from typing import Any

from ..services.triton.exceptions import (
    LoadBalancerNotFoundError,
    OperationCancelledError,
    OperationTimeoutError,
    ProvisioningFailedError,
    TritonError,
)

# Substrings marking a failure worth a short fixed-delay requeue
TRANSIENT_MARKERS = ("timeout", "connection refused", "rate limit")

TRANSIENT_STATUS_CODES = {429, 503}

# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"keyId=\"?(/[^\"\s,]+)",
    r"key[_\s]?id[:=\s]+([^\s,;\)]+)",
    r"fingerprint[:=\s]+([0-9a-fA-F:]{47})",
    r"account[:=\s]+([a-zA-Z0-9\-_\.]+)",
    r"signature=\"?([A-Za-z0-9/+=]+)",
]

PEM_BLOCK = re.compile(r"-----BEGIN [A-Z ]+-----.*?-----END [A-Z ]+-----", re.DOTALL)

# Fields to redact completely
SENSITIVE_FIELDS = {
    "private_key",
    "key_material",
    "password",
    "secret",
    "credentials",
    "token",
    "signature",
}


def is_transient_error(error: BaseException | None) -> bool:
    """Decide whether a remote failure should be retried after a fixed delay.

    Errors raised by the client itself are classified by type before any
    message matching, since their text embeds the load balancer name.
    Operational timeouts and provisioning failures are permanent; cancellations
    are transient because the work was never finished.
    """
    if error is None:
        return False
    if isinstance(error, (OperationTimeoutError, ProvisioningFailedError, LoadBalancerNotFoundError)):
        return False
    if isinstance(error, OperationCancelledError):
        return True
    if isinstance(error, TritonError) and error.status_code in TRANSIENT_STATUS_CODES:
        return True

    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = PEM_BLOCK.sub("[REDACTED PEM]", message)

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: m.group(0).replace(m.group(1), "[REDACTED]"),
            sanitized,
            flags=re.IGNORECASE,
        )

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[:\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized = {}

    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in all_sensitive):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized


class ReconcileError(Exception):
    """A reconcile step failed permanently and was already reported."""

    def __init__(self, operation: str, name: str, message: str):
        super().__init__(f"Failed to {operation} load balancer {name}: {message}")
        self.operation = operation
        self.name = name
