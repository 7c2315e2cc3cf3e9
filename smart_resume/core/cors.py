from __future__ import annotations

import logging

from smart_resume.core.config import settings

logger = logging.getLogger("smart_resume.cors")


def cors_options() -> dict:
    """Keyword arguments for ``CORSMiddleware``.

    Session cookies travel cross-site, so a wildcard origin is dropped whenever
    credentials are allowed; browsers refuse that combination anyway.
    """
    origins = list(settings.cors_allowed_origins)
    if settings.cors_allow_credentials and "*" in origins:
        logger.warning("cors_wildcard_ignored reason=credentials_enabled")
        origins = [origin for origin in origins if origin != "*"]
    regex = (settings.cors_allow_origin_regex or "").strip() or None
    return {
        "allow_origins": origins,
        "allow_origin_regex": regex,
        "allow_credentials": settings.cors_allow_credentials,
        "allow_methods": ["GET", "POST", "DELETE", "OPTIONS"],
        "allow_headers": ["*"],
    }
