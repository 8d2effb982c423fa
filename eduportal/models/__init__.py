# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared value types used across layers."""

from eduportal.models.common import LinkAction, LinkStatus, Role, StudentType

__all__ = [
    "LinkAction",
    "LinkStatus",
    "Role",
    "StudentType",
]
