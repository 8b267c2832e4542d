# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

# Anchor the default users.yml path to the project root, not the working directory.
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_USERS_PATH = BASE_DIR / "data" / "users.yml"

MIN_IDLE_TIMEOUT_SECONDS = 60
SAMESITE_VALUES = ("lax", "strict")

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


@dataclass(frozen=True)
class Settings:
    users_path: Path
    cookie_name: str = "websess_session"

    # Session expiration
    idle_timeout_seconds: int = 1800
    max_lifetime_seconds: Optional[int] = None  # None: only the idle timeout applies
    sweep_interval_seconds: int = 60

    # Cookie hardening
    public_base_url: Optional[str] = None
    cookie_secure: bool = False
    cookie_samesite: str = "lax"

    # argon2 work factor
    hash_time_cost: int = 3
    hash_memory_cost: int = 65536
    hash_parallelism: int = 4

    log_level: str = "INFO"


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name, "") or "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(float(raw))
    except ValueError:
        return default


def _env_bool(name: str) -> Optional[bool]:
    raw = _env(name).lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return None


def load_settings_from_env() -> Settings:
    """Build settings from WEBSESS_* environment variables.

    Cookies default to Secure when the public base URL is https. SameSite
    only accepts lax or strict; anything else falls back to lax.
    """
    public_base_url = _env("WEBSESS_PUBLIC_BASE_URL") or None
    cookie_secure = _env_bool("WEBSESS_COOKIE_SECURE")
    if cookie_secure is None:
        cookie_secure = (public_base_url or "").startswith("https://")

    samesite = _env("WEBSESS_COOKIE_SAMESITE", "lax").lower()
    if samesite not in SAMESITE_VALUES:
        samesite = "lax"

    idle = max(_env_int("WEBSESS_IDLE_TIMEOUT", 1800), MIN_IDLE_TIMEOUT_SECONDS)
    lifetime = _env_int("WEBSESS_MAX_LIFETIME", 0)

    return Settings(
        users_path=Path(_env("WEBSESS_USERS_PATH", str(DEFAULT_USERS_PATH))).resolve(),
        cookie_name=_env("WEBSESS_COOKIE_NAME", "websess_session"),
        idle_timeout_seconds=idle,
        max_lifetime_seconds=lifetime if lifetime > 0 else None,
        sweep_interval_seconds=max(_env_int("WEBSESS_SWEEP_INTERVAL", 60), 1),
        public_base_url=public_base_url,
        cookie_secure=cookie_secure,
        cookie_samesite=samesite,
        hash_time_cost=max(_env_int("WEBSESS_HASH_TIME_COST", 3), 1),
        hash_memory_cost=max(_env_int("WEBSESS_HASH_MEMORY_COST", 65536), 8),
        hash_parallelism=max(_env_int("WEBSESS_HASH_PARALLELISM", 4), 1),
        log_level=_env("WEBSESS_LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return load_settings_from_env()
