"""Core infrastructure: configuration, logging, connections."""
