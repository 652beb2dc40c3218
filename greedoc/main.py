import logging

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from greedoc import __version__
from greedoc.api.errors import register_exception_handlers
from greedoc.api.routes import (
    ai,
    auth,
    chat,
    dashboard,
    events,
    followups,
    health,
    health_data,
    medications,
    notifications,
    patients,
    prescriptions,
    users,
)
from greedoc.core.config import settings
from greedoc.core.firebase import get_db
from greedoc.core.logging_setup import setup_logging
from greedoc.workers import notification_worker

logger = logging.getLogger(__name__)

app = FastAPI(title="Greedoc Telehealth Backend", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CLIENT_URL.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("startup")
def startup():
    """Initialize logging, Firebase Admin and the reminder worker."""
    setup_logging(settings.LOG_LEVEL)

    # Initializes Firebase Admin unless a client is already in place
    get_db()

    if settings.NOTIFICATION_AGENT_ENABLED:
        notification_worker.start_worker()

    logger.info("Greedoc backend started (%s)", settings.ENVIRONMENT)


@app.on_event("shutdown")
def shutdown():
    notification_worker.stop_worker()


api = APIRouter(prefix="/api")


@api.get("")
async def root():
    return {"message": "Greedoc API is running", "version": __version__}


@api.get("/health-check")
async def health_check():
    return {"status": "ok"}


for module in (
    auth,
    users,
    patients,
    prescriptions,
    followups,
    health_data,
    medications,
    chat,
    dashboard,
    ai,
    notifications,
    events,
    health,
):
    api.include_router(module.router)

app.include_router(api)
