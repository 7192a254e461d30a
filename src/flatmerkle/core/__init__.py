"""
Flatmerkle - Core

Settings and logging setup shared by the tree engine.
"""

from flatmerkle.core.config import Settings, get_settings, settings
from flatmerkle.core.logging import setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "setup_logging",
]
