import asyncio
import logging

from fastapi import FastAPI
from contextlib import asynccontextmanager
from app.db.init_db import create_database
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.core.clock import system_clock
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.api.v1.router import api_router

logger = logging.getLogger(__name__)


async def _queue_expiry_loop() -> None:
    """Background task: expire queue entries left over from previous days."""
    from app.services.queue import auto_expire

    while True:
        try:
            db = SessionLocal()
            try:
                count = auto_expire(db, system_clock)
                if count:
                    logger.info("Auto-expired %d queue entries from earlier days.", count)
            finally:
                db.close()
        except Exception:
            logger.exception("Error during queue auto-expiry.")
        await asyncio.sleep(settings.QUEUE_AUTO_EXPIRE_INTERVAL_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists and create tables
    create_database()
    Base.metadata.create_all(bind=engine)

    expiry_task = None
    if settings.QUEUE_AUTO_EXPIRE_ENABLED:
        expiry_task = asyncio.create_task(_queue_expiry_loop())
    yield

    # Shutdown: cancel background task
    if expiry_task is not None:
        expiry_task.cancel()
        try:
            await expiry_task
        except asyncio.CancelledError:
            pass


from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def read_root():
    return {"Hello": "Tavola"}
