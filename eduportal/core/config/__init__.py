# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the portal.

Example:
    >>> from eduportal.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.auth.max_accepted_parents
    2
"""

from eduportal.core.config.settings import (
    APISettings,
    AuthSettings,
    CORSSettings,
    DatabaseSettings,
    RateLimitSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "APISettings",
    "AuthSettings",
    "CORSSettings",
    "DatabaseSettings",
    "RateLimitSettings",
]
