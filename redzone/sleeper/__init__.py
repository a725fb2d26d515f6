"""Sleeper fantasy-league API access."""
