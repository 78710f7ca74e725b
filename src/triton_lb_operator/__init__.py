"""Triton load balancer operator for Kubernetes Services."""

__version__ = "0.1.0"
