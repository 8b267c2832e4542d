# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Credential and session core.

This package provides:
- Password hashing/verification (argon2)
- Identity records keyed by username
- Server-side sessions keyed by opaque random tokens, with idle expiry
- SessionManager, which ties signup/login/logout to both stores
"""
