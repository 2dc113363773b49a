"""
Local LFS object store paths.
"""

from .layout import InvalidOidError, ObjectStore

__all__ = ["InvalidOidError", "ObjectStore"]
