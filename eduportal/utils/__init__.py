# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from eduportal.utils.datetime import ensure_utc, utc_now
from eduportal.utils.logging import bind_context, clear_context, setup_logging

__all__ = [
    "setup_logging",
    "bind_context",
    "clear_context",
    "utc_now",
    "ensure_utc",
]
