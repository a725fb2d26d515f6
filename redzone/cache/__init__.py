"""Persistent TTL cache and typed application state."""
