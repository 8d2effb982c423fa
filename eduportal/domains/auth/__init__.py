# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

This module provides account and session services:
- PBKDF2 password hashing and verification
- Opaque single-session bearer tokens
- Registration, login, logout and password change

Exports:
    PasswordCredential: Salted PBKDF2 password hashing.
    SessionStore: Bearer token issuance, resolution and revocation.
    AuthService: Account and session orchestration.
"""

from eduportal.domains.auth.password import PasswordCredential
from eduportal.domains.auth.service import AuthService
from eduportal.domains.auth.session import SessionStore

__all__ = [
    "PasswordCredential",
    "SessionStore",
    "AuthService",
]
