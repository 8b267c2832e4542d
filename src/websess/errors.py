# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy for credentials and sessions.

Every error carries an HTTP status hint and a message that is safe to show
to the client (no tokens, no hashes, no hint about which credential failed).
"""

from __future__ import annotations


class AuthError(Exception):
    status_code = 400
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateUsername(AuthError):
    status_code = 409
    default_message = "Username taken"


class PasswordMismatch(AuthError):
    status_code = 422
    default_message = "Passwords do not match"


class MissingField(AuthError):
    status_code = 422
    default_message = "Missing required field"


class InvalidCredentials(AuthError):
    status_code = 401
    default_message = "Username and/or password incorrect"


class UnknownUsername(InvalidCredentials):
    # Raised internally only; SessionManager re-raises a plain InvalidCredentials.
    pass


class HashingFailure(AuthError):
    status_code = 500
    default_message = "Could not process password"


class SessionError(AuthError):
    status_code = 303
    default_message = "Session required"


class NoSuchSession(SessionError):
    default_message = "No such session"


class SessionExpired(SessionError):
    default_message = "Session expired"


class TokenGenerationCollision(AuthError):
    status_code = 500
    default_message = "Could not issue session"


class UsersFileError(Exception):
    """The users file exists but cannot be parsed."""
