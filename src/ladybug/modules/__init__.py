"""Route module discovery, registry and per-route dispatch."""
