"""
Utils module - Utility functions and helpers.
"""

from ordo.utils.paths import atomic_write_bytes, file_modtime

__all__ = [
    "atomic_write_bytes",
    "file_modtime",
]
