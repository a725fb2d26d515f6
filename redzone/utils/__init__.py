"""Shared utilities module."""

__all__ = [
    "cli_common",
    "file_utils",
    "http",
    "render",
]
