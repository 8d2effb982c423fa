# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific area.

Modules:
    auth: Registration, login, logout, profile and password change.
    student: Parent link requests and links seen from the student side.
    parent: Link requests and children seen from the parent side.
"""

from fastapi import APIRouter

from eduportal.api.v1 import auth, parent, student

# Create the main v1 router; the path prefix is applied by the app factory
router = APIRouter()

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(student.router, prefix="/student", tags=["Student"])
router.include_router(parent.router, prefix="/parent", tags=["Parent"])
