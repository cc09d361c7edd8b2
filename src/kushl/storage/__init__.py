"""
Local key-value store holding JSON documents.
"""
from kushl.storage.store import KeyValueStore

__all__ = ["KeyValueStore"]
