import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from smart_resume.catalog.jobs import get_job_catalog
from smart_resume.core.config import settings
from smart_resume.identity import sessions, users
from smart_resume.records import store

logger = logging.getLogger(__name__)


def init_storage() -> None:
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    users.init_db()
    sessions.init_db()
    store.init_db()
    sessions.purge_expired_sessions()


@asynccontextmanager
async def lifespan(app):
    catalog = get_job_catalog()
    logger.info("job_catalog_loaded profiles=%d", len(catalog))
    await asyncio.to_thread(init_storage)

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = await asyncio.to_thread(sessions.purge_expired_sessions)
                if deleted:
                    logger.info("session_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover
                logger.warning("session_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=settings.session_purge_interval_seconds)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
