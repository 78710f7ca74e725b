"""Remote services used by the operator."""
