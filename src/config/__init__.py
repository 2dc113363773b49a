"""
Configuration package for the LFS integrity checker.
"""

from .settings import AppConfig, ConfigError, ensure_directories

__all__ = ["AppConfig", "ConfigError", "ensure_directories"]
