# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent-student link domain.

Exports:
    ParentLinkService: Link request, response, removal and listing.
"""

from eduportal.domains.parent_link.service import ParentLinkService

__all__ = [
    "ParentLinkService",
]
