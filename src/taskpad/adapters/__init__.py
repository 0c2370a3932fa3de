"""Adapters - I/O implementations of ports."""

from .json_store import JsonFileTaskStore
from .memory_store import MemoryTaskStore

__all__ = [
    "JsonFileTaskStore",
    "MemoryTaskStore",
]
