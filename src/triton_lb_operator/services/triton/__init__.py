"""Triton CloudAPI integration."""
