# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse

from websess.auth.manager import SessionManager
from websess.auth.passwords import PasswordHasher
from websess.auth.session import Session, SessionStore
from websess.auth.users import CredentialStore, Identity
from websess.config import Settings, load_settings
from websess.errors import AuthError
from websess.infra.users_repo import load_users, save_users
from websess.permissions import (
    clear_session_cookie,
    current_user_optional,
    get_manager,
    get_settings,
    require_session,
    require_user,
    session_token,
    set_session_cookie,
)

logger = logging.getLogger(__name__)

SIGNUP_FIELDS = ["firstname", "lastname", "username", "password1", "password2"]
LOGIN_FIELDS = ["username", "password", "next"]


def _safe_next(next_url: str) -> str:
    # only same-site relative targets
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/"


def build_manager(settings: Settings, *, hasher: Optional[PasswordHasher] = None, **store_kwargs) -> SessionManager:
    hasher = hasher or PasswordHasher.from_settings(settings)
    return SessionManager(
        credentials=CredentialStore(hasher),
        sessions=SessionStore.from_settings(settings, **store_kwargs),
    )


def create_app(settings: Optional[Settings] = None, manager: Optional[SessionManager] = None) -> FastAPI:
    """Wire the session core into a FastAPI app.

    The users file is read when the app starts and written back when it stops;
    nothing touches the disk per request.
    """
    settings = settings or load_settings()
    manager = manager or build_manager(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        manager.credentials.load(load_users(settings.users_path).values())
        try:
            yield
        finally:
            save_users(settings.users_path, manager.credentials.snapshot())

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.manager = manager

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        sess, user = get_manager(request).current(session_token(request))
        request.state.session = sess
        request.state.user = user
        return await call_next(request)

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError):
        if exc.status_code == 303:
            return RedirectResponse(url="/login", status_code=303)
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

    # ------------------ Routes ------------------

    @app.get("/signup")
    def signup_get(request: Request):
        if current_user_optional(request):
            return RedirectResponse(url="/", status_code=303)
        return {"form": "signup", "fields": SIGNUP_FIELDS}

    @app.post("/signup")
    def signup_post(
        request: Request,
        firstname: str = Form(""),
        lastname: str = Form(""),
        username: str = Form(""),
        password1: str = Form(""),
        password2: str = Form(""),
    ):
        issued = get_manager(request).signup(firstname, lastname, username, password1, password2)
        resp = RedirectResponse(url="/", status_code=303)
        set_session_cookie(resp, get_settings(request), issued)
        return resp

    @app.get("/login")
    def login_get(request: Request, next: str = "/"):
        if current_user_optional(request):
            return RedirectResponse(url=_safe_next(next), status_code=303)
        return {"form": "login", "fields": LOGIN_FIELDS, "next": _safe_next(next)}

    @app.post("/login")
    def login_post(
        request: Request,
        username: str = Form(""),
        password: str = Form(""),
        next: str = Form("/"),
    ):
        issued = get_manager(request).login(username, password)
        resp = RedirectResponse(url=_safe_next(next), status_code=303)
        set_session_cookie(resp, get_settings(request), issued)
        return resp

    @app.post("/logout")
    def logout_post(request: Request):
        get_manager(request).logout(session_token(request))
        resp = RedirectResponse(url="/login", status_code=303)
        clear_session_cookie(resp, get_settings(request))
        return resp

    @app.get("/")
    def index(request: Request):
        u = current_user_optional(request)
        return {"user": u.public() if u else None}

    @app.get("/loggedin")
    def loggedin(user: Identity = Depends(require_user)):
        return user.public()

    @app.get("/elapsed")
    def elapsed(request: Request, sess: Session = Depends(require_session)):
        now = get_manager(request).sessions.now()
        return {"elapsed_seconds": round(now - sess.created_at, 3)}

    return app
