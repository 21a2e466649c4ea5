"""Infrastructure layer: object store adapters, persistence, security, services."""
