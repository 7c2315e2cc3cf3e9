from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    log_level: str
    sentry_dsn: str | None
    data_dir: str
    database_path: str
    upload_dir: str
    job_catalog_path: str | None
    session_ttl_seconds: int
    session_cookie_name: str
    session_cookie_secure: bool
    session_cookie_samesite: str
    session_purge_interval_seconds: int
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    rate_limit: str
    auth_rate_limit: str
    rate_limit_enabled: bool


_data_dir = _get_env("SMART_RESUME_DATA_DIR", "data") or "data"

settings = Settings(
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    data_dir=_data_dir,
    database_path=_get_env("DATABASE_PATH", os.path.join(_data_dir, "smart_resume.db"))
    or os.path.join(_data_dir, "smart_resume.db"),
    upload_dir=_get_env("UPLOAD_DIR", os.path.join(_data_dir, "uploads")) or os.path.join(_data_dir, "uploads"),
    job_catalog_path=_get_env("JOB_CATALOG_PATH"),
    session_ttl_seconds=max(1, _get_env_int("SESSION_TTL_SECONDS", 60 * 60)),
    session_cookie_name=_get_env("SESSION_COOKIE_NAME", "smart_resume.sid") or "smart_resume.sid",
    session_cookie_secure=_get_env_bool("SESSION_COOKIE_SECURE", True),
    session_cookie_samesite=(_get_env("SESSION_COOKIE_SAMESITE", "none") or "none").strip().lower(),
    session_purge_interval_seconds=max(60, _get_env_int("SESSION_PURGE_INTERVAL_SECONDS", 900)),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "https://smart-resume-ja3k.vercel.app",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    auth_rate_limit=_get_env("AUTH_RATE_LIMIT", "10/minute") or "10/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
)

if settings.session_cookie_samesite not in {"lax", "strict", "none"}:
    raise RuntimeError("SESSION_COOKIE_SAMESITE must be one of 'lax', 'strict' or 'none'.")
