"""Tests for Kubernetes secrets utilities."""

from __future__ import annotations

import base64
from unittest.mock import Mock

import pytest
from kubernetes import client

from triton_lb_operator.utils.secrets import get_secret_value


class TestGetSecretValue:
    """Test cases for get_secret_value function."""

    def test_get_secret_value_success(self):
        """Test successfully getting a secret value."""
        mock_api = Mock()
        mock_secret = Mock()
        mock_secret.data = {"triton-key": base64.b64encode(b"pem-data").decode("utf-8")}
        mock_api.read_namespaced_secret.return_value = mock_secret

        result = get_secret_value(mock_api, "triton-system", "triton", "triton-key")

        assert result == "pem-data"
        mock_api.read_namespaced_secret.assert_called_once_with(name="triton", namespace="triton-system")

    def test_get_secret_value_bytes(self):
        """Test getting secret value that's already bytes."""
        mock_api = Mock()
        mock_secret = Mock()
        mock_secret.data = {"triton-key": b"pem-data"}
        mock_api.read_namespaced_secret.return_value = mock_secret

        assert get_secret_value(mock_api, "triton-system", "triton", "triton-key") == "pem-data"

    def test_get_secret_value_missing_key(self):
        """Test that a missing key raises ValueError."""
        mock_api = Mock()
        mock_secret = Mock()
        mock_secret.data = {"other": "eA=="}
        mock_api.read_namespaced_secret.return_value = mock_secret

        with pytest.raises(ValueError, match="Key 'triton-key' not found"):
            get_secret_value(mock_api, "triton-system", "triton", "triton-key")

    def test_get_secret_value_empty_data(self):
        """Test that a secret without data raises ValueError."""
        mock_api = Mock()
        mock_secret = Mock()
        mock_secret.data = None
        mock_api.read_namespaced_secret.return_value = mock_secret

        with pytest.raises(ValueError):
            get_secret_value(mock_api, "triton-system", "triton", "triton-key")

    def test_get_secret_value_not_found(self):
        """Test that a missing secret raises ValueError."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(ValueError, match="Secret 'triton' not found"):
            get_secret_value(mock_api, "triton-system", "triton", "triton-key")

    def test_get_secret_value_api_error(self):
        """Test that other API errors propagate."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=500)

        with pytest.raises(client.exceptions.ApiException):
            get_secret_value(mock_api, "triton-system", "triton", "triton-key")
