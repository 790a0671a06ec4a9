"""Operational metrics resources, registered only when enabled."""
