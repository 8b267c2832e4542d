# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets

import argon2
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from websess.errors import HashingFailure


class PasswordHasher:
    """argon2id hashing with a configurable work factor.

    Hashes are PHC strings, so salt and cost parameters travel with them and
    older hashes keep verifying after the cost is raised.
    """

    def __init__(self, *, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        # argon2 needs at least 8 KiB per lane
        memory_cost = max(memory_cost, 8 * parallelism)
        self._ph = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        self._dummy_hash = self._ph.hash(secrets.token_hex(16))

    @classmethod
    def from_settings(cls, settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.hash_time_cost,
            memory_cost=settings.hash_memory_cost,
            parallelism=settings.hash_parallelism,
        )

    def hash(self, plain: str) -> str:
        if not plain:
            raise HashingFailure("Empty password")
        try:
            return self._ph.hash(plain)
        except HashingError as exc:
            raise HashingFailure() from exc

    def verify(self, plain: str, hash_value: str) -> bool:
        # every call runs one argon2 verification, whatever the input
        if not hash_value:
            return self.verify_dummy(plain)
        try:
            return self._ph.verify(hash_value, plain or "")
        except (VerificationError, InvalidHashError, ValueError):
            return False

    def verify_dummy(self, plain: str) -> bool:
        """Spend the same time as a real verification, then fail."""
        try:
            self._ph.verify(self._dummy_hash, plain or "")
        except (VerificationError, ValueError):
            pass
        return False

    def needs_rehash(self, hash_value: str) -> bool:
        try:
            return self._ph.check_needs_rehash(hash_value)
        except (InvalidHashError, ValueError):
            return False
