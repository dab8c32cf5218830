"""Infrastructure layer: providers, transport, cache and background work."""
