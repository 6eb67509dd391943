"""Infrastructure layer: persistence and external service clients."""
