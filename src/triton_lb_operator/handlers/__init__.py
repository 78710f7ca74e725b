"""Handler modules for watched resources."""

# Import handlers to register them - handlers register themselves via @kopf decorators
from . import loadbalancer  # noqa: F401
