# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional, Tuple

from websess.auth.session import IssuedSession, Session, SessionStore
from websess.auth.users import CredentialStore, Identity
from websess.errors import InvalidCredentials, MissingField, PasswordMismatch, SessionError

logger = logging.getLogger(__name__)


class SessionManager:
    """Signup, login, logout and per-request identity resolution.

    Works on the raw cookie value (or None); it never sees request objects.
    """

    def __init__(self, credentials: CredentialStore, sessions: SessionStore):
        self.credentials = credentials
        self.sessions = sessions

    def _issue(self, username: str) -> IssuedSession:
        token = self.sessions.issue(username)
        return IssuedSession(token=token, ttl_seconds=int(self.sessions.idle_timeout))

    def signup(self, first: str, last: str, username: str, password1: str, password2: str) -> IssuedSession:
        if not (username or "").strip():
            raise MissingField("Username required")
        if not password1:
            raise MissingField("Password required")
        if password1 != password2:
            raise PasswordMismatch()

        identity = self.credentials.create(username, first, last, password1)
        logger.info("signup ok for %s", identity.username)
        return self._issue(identity.username)

    def login(self, username: str, password: str) -> IssuedSession:
        try:
            identity = self.credentials.verify(username, password)
        except InvalidCredentials:
            logger.info("login failed for %r", (username or "").strip())
            # unknown user and wrong password must look the same to the client
            raise InvalidCredentials() from None
        logger.info("login ok for %s", identity.username)
        return self._issue(identity.username)

    def logout(self, token: Optional[str]) -> None:
        self.sessions.revoke(token)
        logger.debug("logout processed")

    def current_session(self, token: Optional[str]) -> Optional[Session]:
        try:
            sess = self.sessions.resolve(token)
        except SessionError:
            return None
        if not self.credentials.exists(sess.username):
            self.sessions.revoke(token)
            return None
        return sess

    def current(self, token: Optional[str]) -> Tuple[Optional[Session], Optional[Identity]]:
        """Resolve the token once; both halves are None for anonymous requests."""
        sess = self.current_session(token)
        if sess is None:
            return None, None
        return sess, self.credentials.get(sess.username)

    def resolve_current_user(self, token: Optional[str]) -> Optional[Identity]:
        return self.current(token)[1]

    def sweep(self) -> int:
        return self.sessions.sweep()
