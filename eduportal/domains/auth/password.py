# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing utilities using PBKDF2.

This module provides salted password hashing and verification. Digests
and salts are stored hex encoded in separate columns, and the salt is fed
to PBKDF2 as the UTF-8 bytes of its hex form so existing credentials keep
verifying.

Lone surrogates, which JSON escapes can carry, are encoded as-is rather
than rejected.

Example:
    >>> credential = PasswordCredential()
    >>> hashed = credential.hash("my_password")
    >>> credential.verify("my_password", hashed.digest, hashed.salt)
    True
"""

import hashlib
import hmac
import logging
import secrets
from typing import NamedTuple

logger = logging.getLogger(__name__)


class HashedPassword(NamedTuple):
    """Digest and salt as stored on the user record."""

    digest: str
    salt: str


class PasswordCredential:
    """Salted password hashing using PBKDF2-HMAC.

    Attributes:
        _iterations: PBKDF2 iteration count.
        _key_length: Derived key length in bytes.
        _digest: Underlying hash name.
        _salt_bytes: Random salt length in bytes.

    Example:
        >>> credential = PasswordCredential()
        >>> hashed = credential.hash("secure_password")
        >>> credential.verify("secure_password", *hashed)
        True
        >>> credential.verify("wrong_password", *hashed)
        False
    """

    def __init__(
        self,
        iterations: int = 1000,
        key_length: int = 64,
        digest: str = "sha512",
        salt_bytes: int = 16,
    ) -> None:
        """Initialize the credential primitive.

        Args:
            iterations: PBKDF2 iteration count.
            key_length: Derived key length in bytes.
            digest: Hash name understood by hashlib.
            salt_bytes: Length of generated salts before hex encoding.
        """
        self._iterations = iterations
        self._key_length = key_length
        self._digest = digest
        self._salt_bytes = salt_bytes

    def generate_salt(self) -> str:
        """Generate a fresh hex-encoded random salt."""
        return secrets.token_hex(self._salt_bytes)

    def hash(self, password: str, salt: str | None = None) -> HashedPassword:
        """Derive the digest of a password.

        Deterministic for a given (password, salt) pair.

        Args:
            password: Plain text password.
            salt: Hex salt to reuse. A new one is generated when omitted.

        Returns:
            HashedPassword with the hex digest and the salt used.
        """
        if salt is None:
            salt = self.generate_salt()

        derived = hashlib.pbkdf2_hmac(
            self._digest,
            password.encode("utf-8", "surrogatepass"),
            salt.encode("utf-8"),
            self._iterations,
            dklen=self._key_length,
        )
        return HashedPassword(digest=derived.hex(), salt=salt)

    def verify(self, password: str, stored_digest: str, stored_salt: str) -> bool:
        """Verify a password against a stored digest and salt.

        Args:
            password: Plain text password to verify.
            stored_digest: Hex digest from the user record.
            stored_salt: Hex salt from the user record.

        Returns:
            True if the password matches, False otherwise.
        """
        if not stored_digest or not stored_salt:
            return False

        candidate = self.hash(password, stored_salt).digest
        return hmac.compare_digest(candidate, stored_digest)


# Default instance for convenience
_default_credential = PasswordCredential()


def hash_password(password: str, salt: str | None = None) -> HashedPassword:
    """Hash a password using the default credential parameters.

    Args:
        password: Plain text password to hash.
        salt: Optional hex salt to reuse.

    Returns:
        HashedPassword with digest and salt.
    """
    return _default_credential.hash(password, salt)


def verify_password(password: str, stored_digest: str, stored_salt: str) -> bool:
    """Verify a password using the default credential parameters."""
    return _default_credential.verify(password, stored_digest, stored_salt)
