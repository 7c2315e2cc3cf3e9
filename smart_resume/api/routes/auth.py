import asyncio
from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response, status

from smart_resume.core.config import settings
from smart_resume.core.rate_limit import rate_limit
from smart_resume.identity import gate
from smart_resume.schemas.auth import AuthResponse, LoginRequest, MessageResponse, RegisterRequest, UserSummary

router = APIRouter()


def _set_session_cookie(response: Response, session_id: str, expires_at: datetime) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        expires=expires_at,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


@router.post("/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@rate_limit(settings.auth_rate_limit)
async def register(request: Request, response: Response, payload: RegisterRequest):
    user, session_id, expires_at = await asyncio.to_thread(
        gate.register,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    _set_session_cookie(response, session_id, expires_at)
    return AuthResponse(message="Registered", user=UserSummary(**user.summary()))


@router.post("/auth/login", response_model=AuthResponse)
@rate_limit(settings.auth_rate_limit)
async def login(request: Request, response: Response, payload: LoginRequest):
    user, session_id, expires_at = await asyncio.to_thread(
        gate.login,
        email=payload.email,
        password=payload.password,
        previous_session=gate.session_token_from(request),
    )
    _set_session_cookie(response, session_id, expires_at)
    return AuthResponse(message="Login successful", user=UserSummary(**user.summary()))


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response, _: str = Depends(gate.require_owner)):
    await asyncio.to_thread(gate.logout, gate.session_token_from(request) or "")
    _clear_session_cookie(response)
    return MessageResponse(message="Logged out")
