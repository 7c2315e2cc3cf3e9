"""
Session gate: credentials in, session tokens out, and the request dependency
that turns a session cookie into an owner id.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from smart_resume.core.config import settings
from smart_resume.core.errors import Unauthorized, ValidationError
from smart_resume.identity import sessions, users

logger = logging.getLogger("smart_resume.auth")


def authenticate(session_token: str | None) -> str:
    owner_id = sessions.resolve_session(session_token or "")
    if not owner_id:
        raise Unauthorized()
    return owner_id


def register(*, username: str | None, email: str | None, password: str | None) -> tuple[users.User, str, datetime]:
    if not (username or "").strip() or not (email or "").strip() or not password:
        raise ValidationError("All fields required")
    user = users.create_user(username=username, email=email, password=password)
    session_id, expires_at = sessions.create_session(user.id)
    logger.info("user_registered user=%s", user.id)
    return user, session_id, expires_at


def login(
    *, email: str | None, password: str | None, previous_session: str | None = None
) -> tuple[users.User, str, datetime]:
    if not (email or "").strip() or not password:
        raise ValidationError("Email and password required")
    user = users.find_user_by_email(email)
    if user is None or not users.verify_password(password, user.password_hash):
        logger.info("login_rejected")
        raise Unauthorized("Invalid credentials")
    if previous_session:
        sessions.destroy_session(previous_session)
    session_id, expires_at = sessions.create_session(user.id)
    logger.info("user_logged_in user=%s", user.id)
    return user, session_id, expires_at


def logout(session_token: str) -> None:
    sessions.destroy_session(session_token)


def session_token_from(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name)


async def require_owner(request: Request) -> str:
    """FastAPI dependency: the authenticated owner id, or 401 before any work."""
    return await asyncio.to_thread(authenticate, session_token_from(request))


class SessionRequiredMiddleware(BaseHTTPMiddleware):
    """Rejects unauthenticated upload requests before their body is parsed."""

    def __init__(self, app, paths: tuple[str, ...]):
        super().__init__(app)
        self.paths = paths

    async def dispatch(self, request, call_next):
        if request.method == "POST" and request.url.path in self.paths:
            owner_id = await asyncio.to_thread(sessions.resolve_session, session_token_from(request) or "")
            if not owner_id:
                logger.info("upload_rejected_unauthenticated path=%s", request.url.path)
                error = Unauthorized()
                return JSONResponse(
                    status_code=error.status_code,
                    content={"message": error.message, "error": "Unauthorized"},
                )
        return await call_next(request)
