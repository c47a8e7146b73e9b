"""Infrastructure layer - integrations, observability and lifecycle."""
