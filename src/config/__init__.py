"""
Configuration layer - Settings and constants
"""

from src.config.settings import settings, Settings, PROJECT_ROOT, resolve_project_path
from src.config.constants import SYSTEM_PROMPT, SAFETY_SETTINGS, GENERIC_ERROR_MESSAGE

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "resolve_project_path",
    "SYSTEM_PROMPT",
    "SAFETY_SETTINGS",
    "GENERIC_ERROR_MESSAGE",
]
