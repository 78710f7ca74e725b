"""Builders turning Kubernetes objects and settings into operator inputs."""
