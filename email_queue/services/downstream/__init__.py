"""HTTP clients for downstream services."""
