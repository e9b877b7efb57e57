"""Configuration management for Work History Verification.

Usage:
    >>> from work_history_verification.config import get_settings
    >>> settings = get_settings()
    >>> settings.batch_inter_entry_delay
    1.0
"""

from work_history_verification.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
