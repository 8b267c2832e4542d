# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional

from websess.auth.passwords import PasswordHasher
from websess.errors import DuplicateUsername, InvalidCredentials, MissingField, UnknownUsername

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    username: str
    first: str
    last: str
    password_hash: str = field(repr=False)

    def public(self) -> dict:
        """Profile fields safe to hand to the rendering layer."""
        return {"username": self.username, "first": self.first, "last": self.last}


def _clean(value: str) -> str:
    return (value or "").strip()


class CredentialStore:
    """Owns identity records keyed by username.

    Hashing happens outside the lock; the insert re-checks uniqueness so two
    concurrent signups for the same name cannot both succeed.
    """

    def __init__(self, hasher: PasswordHasher, identities: Optional[Iterable[Identity]] = None):
        self._hasher = hasher
        self._lock = threading.Lock()
        self._users: Dict[str, Identity] = {}
        if identities is not None:
            self.load(identities)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def load(self, identities: Iterable[Identity]) -> None:
        users = {i.username: i for i in identities}
        with self._lock:
            self._users = users

    def snapshot(self) -> Dict[str, Identity]:
        with self._lock:
            return dict(self._users)

    def get(self, username: str) -> Optional[Identity]:
        u = _clean(username)
        if not u:
            return None
        with self._lock:
            return self._users.get(u)

    def exists(self, username: str) -> bool:
        return self.get(username) is not None

    def create(self, username: str, first: str, last: str, password: str) -> Identity:
        u = _clean(username)
        if not u:
            raise MissingField("Username required")
        if self.exists(u):
            raise DuplicateUsername()

        identity = Identity(
            username=u,
            first=_clean(first),
            last=_clean(last),
            password_hash=self._hasher.hash(password),
        )

        with self._lock:
            if u in self._users:
                raise DuplicateUsername()
            self._users[u] = identity
        logger.info("created identity %s", u)
        return identity

    def verify(self, username: str, password: str) -> Identity:
        identity = self.get(username)
        if identity is None:
            self._hasher.verify_dummy(password)
            raise UnknownUsername()

        if not self._hasher.verify(password, identity.password_hash):
            raise InvalidCredentials()

        if self._hasher.needs_rehash(identity.password_hash):
            identity = self._rehash(identity, password)
        return identity

    def _rehash(self, identity: Identity, password: str) -> Identity:
        upgraded = replace(identity, password_hash=self._hasher.hash(password))
        with self._lock:
            # only swap if nobody replaced the record meanwhile
            if self._users.get(identity.username) is identity:
                self._users[identity.username] = upgraded
                logger.info("rehashed password for %s", identity.username)
                return upgraded
            return self._users.get(identity.username, identity)
