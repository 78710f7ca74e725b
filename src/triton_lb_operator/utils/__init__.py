"""Utility functions for the Triton Load Balancer Operator."""
