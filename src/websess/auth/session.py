# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from websess.errors import NoSuchSession, SessionExpired, TokenGenerationCollision

logger = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 8


def new_token() -> str:
    # 32 random bytes, ~43 url-safe chars
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class Session:
    token: str
    username: str
    created_at: float
    last_access: float

    def __repr__(self) -> str:
        return f"Session(username={self.username!r}, created_at={self.created_at}, last_access={self.last_access})"


@dataclass(frozen=True)
class IssuedSession:
    """What the transport layer needs to attach the cookie."""

    token: str
    ttl_seconds: int


class SessionStore:
    """In-memory token -> Session map with idle expiration.

    Expired sessions are dropped lazily: by ``resolve`` when it meets one, and
    by a full ``sweep`` that ``resolve`` triggers at most once per
    ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        *,
        idle_timeout: float = 1800,
        max_lifetime: Optional[float] = None,
        sweep_interval: float = 60,
        clock: Callable[[], float] = time.time,
        token_factory: Callable[[], str] = new_token,
    ):
        if idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive")
        self.idle_timeout = idle_timeout
        self.max_lifetime = max_lifetime
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._token_factory = token_factory
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._last_sweep = clock()

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "SessionStore":
        return cls(
            idle_timeout=settings.idle_timeout_seconds,
            max_lifetime=settings.max_lifetime_seconds,
            sweep_interval=settings.sweep_interval_seconds,
            **kwargs,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def now(self) -> float:
        return self._clock()

    def _expired(self, sess: Session, now: float) -> bool:
        if now - sess.last_access > self.idle_timeout:
            return True
        return self.max_lifetime is not None and now - sess.created_at > self.max_lifetime

    def issue(self, username: str) -> str:
        now = self._clock()
        for _ in range(MAX_TOKEN_ATTEMPTS):
            token = self._token_factory()
            with self._lock:
                if token in self._sessions:
                    continue
                self._sessions[token] = Session(token=token, username=username, created_at=now, last_access=now)
            return token
        logger.error("token generator collided %d times in a row", MAX_TOKEN_ATTEMPTS)
        raise TokenGenerationCollision()

    def resolve(self, token: Optional[str]) -> Session:
        if not token:
            raise NoSuchSession()
        now = self._clock()
        try:
            with self._lock:
                sess = self._sessions.get(token)
                if sess is None:
                    raise NoSuchSession()
                if self._expired(sess, now):
                    del self._sessions[token]
                    raise SessionExpired()
                touched = replace(sess, last_access=now)
                self._sessions[token] = touched
            return touched
        finally:
            # after the lookup, so an expired token reports SessionExpired
            self._maybe_sweep(now)

    def revoke(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def sweep(self, now: Optional[float] = None) -> int:
        if now is None:
            now = self._clock()
        with self._lock:
            dead = [t for t, s in self._sessions.items() if self._expired(s, now)]
            for t in dead:
                del self._sessions[t]
            self._last_sweep = now
        if dead:
            logger.info("swept %d expired session(s)", len(dead))
        return len(dead)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self.sweep_interval:
            self.sweep(now)

    def count_for(self, username: str) -> int:
        with self._lock:
            return sum(1 for s in self._sessions.values() if s.username == username)
