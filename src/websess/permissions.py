# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, Response

from websess.auth.manager import SessionManager
from websess.auth.session import IssuedSession, Session
from websess.auth.users import Identity
from websess.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_manager(request: Request) -> SessionManager:
    return request.app.state.manager


def session_token(request: Request) -> Optional[str]:
    return request.cookies.get(get_settings(request).cookie_name) or None


def current_session_optional(request: Request) -> Optional[Session]:
    if hasattr(request.state, "session"):
        return request.state.session
    return get_manager(request).current_session(session_token(request))


def current_user_optional(request: Request) -> Optional[Identity]:
    # resolved once per request by the middleware
    if hasattr(request.state, "user"):
        return request.state.user
    return get_manager(request).resolve_current_user(session_token(request))


def _login_redirect(request: Request) -> HTTPException:
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    return HTTPException(status_code=303, headers={"Location": f"/login?next={next_url}"})


def require_user(request: Request) -> Identity:
    u = current_user_optional(request)
    if u:
        return u
    raise _login_redirect(request)


def require_session(request: Request) -> Session:
    sess = current_session_optional(request)
    if sess:
        return sess
    raise _login_redirect(request)


def cookie_settings(settings: Settings) -> dict:
    return {
        "httponly": True,
        "samesite": settings.cookie_samesite,
        "secure": settings.cookie_secure,
        "path": "/",
    }


def set_session_cookie(response: Response, settings: Settings, issued: IssuedSession) -> None:
    response.set_cookie(
        settings.cookie_name,
        issued.token,
        max_age=issued.ttl_seconds,
        **cookie_settings(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.cookie_name, **cookie_settings(settings))
