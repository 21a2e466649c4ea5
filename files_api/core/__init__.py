"""Core: config, constants, error mapping and application bootstrap.

Single place for settings and shared constants.
"""

from files_api.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
