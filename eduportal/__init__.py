"""Education portal backend.

Authentication, opaque session tokens, role guards and the parent-student
link workflow for a multi-role education portal.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
