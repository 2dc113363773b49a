"""
Content hashing for stored objects.
"""

from .hasher import DEFAULT_CHUNK_BYTES, Hasher, ObjectReadError

__all__ = ["DEFAULT_CHUNK_BYTES", "Hasher", "ObjectReadError"]
