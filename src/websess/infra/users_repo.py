# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""YAML users file: loaded once at startup, written once at shutdown.

Shape::

    version: 1
    users:
      ann:
        first: Ann
        last: Lee
        username: ann
        password_hash: $argon2id$...
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping

import yaml

from websess.auth.users import Identity
from websess.errors import UsersFileError

logger = logging.getLogger(__name__)

FILE_VERSION = 1


def load_users(path: Path) -> Dict[str, Identity]:
    if not path.exists():
        logger.info("users file %s not found, starting empty", path)
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise UsersFileError(f"Cannot parse users file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise UsersFileError(f"Users file {path} must contain a mapping")
    users = raw.get("users") or {}
    if not isinstance(users, dict):
        raise UsersFileError(f"'users' in {path} must be a mapping")

    out: Dict[str, Identity] = {}
    for uname, udata in users.items():
        if not isinstance(udata, dict):
            continue
        username = str(uname).strip()
        ph = str(udata.get("password_hash") or "").strip()
        if not username or not ph:
            logger.warning("skipping incomplete user record %r", username)
            continue
        out[username] = Identity(
            username=username,
            first=str(udata.get("first") or "").strip(),
            last=str(udata.get("last") or "").strip(),
            password_hash=ph,
        )
    logger.info("loaded %d user(s) from %s", len(out), path)
    return out


def dump_users(identities: Mapping[str, Identity]) -> dict:
    return {
        "version": FILE_VERSION,
        "users": {
            u: {
                "first": i.first,
                "last": i.last,
                "username": i.username,
                "password_hash": i.password_hash,
            }
            for u, i in sorted(identities.items())
        },
    }


def save_users(path: Path, identities: Mapping[str, Identity]) -> None:
    """Write atomically: a temp file in the same directory, then replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(dump_users(identities), sort_keys=False, allow_unicode=True)
    fd, tmp = tempfile.mkstemp(prefix=".users-", suffix=".yml", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.info("saved %d user(s) to %s", len(identities), path)
