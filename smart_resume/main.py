import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from smart_resume.api.routes.auth import router as auth_router
from smart_resume.api.routes.health import router as health_router
from smart_resume.api.routes.resumes import router as resumes_router
from smart_resume.core.cors import cors_options
from smart_resume.core.errors import register_exception_handlers
from smart_resume.core.rate_limit import limiter
from smart_resume.core.config import settings
from smart_resume.core.lifespan import lifespan
from smart_resume.identity.gate import SessionRequiredMiddleware
from smart_resume.ingest.uploads import UploadSizeLimitMiddleware

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Smart Resume API", version="0.1.0", lifespan=lifespan)

app.add_middleware(UploadSizeLimitMiddleware, paths=("/api/resume/analyze",))
app.add_middleware(SessionRequiredMiddleware, paths=("/api/resume/analyze",))
app.add_middleware(CORSMiddleware, **cors_options())
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
register_exception_handlers(app)

app.include_router(health_router, tags=["Health"])
app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(resumes_router, tags=["Resumes"])
