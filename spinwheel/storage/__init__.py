"""Key-value persistence backends.

``MemoryStore`` keeps records for the process lifetime (tests, previews);
``JsonFileStore`` survives restarts and is what the entry point wires in.
"""
from .base import KeyValueStore, MemoryStore
from .json_store import JsonFileStore

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore"]
