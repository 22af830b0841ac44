"""Infrastructure layer - external service adapters."""
