import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskhub.application.notifications import NotificationDispatcher, PushDispatcher
from taskhub.config import get_settings
from taskhub.infrastructure.database import engine, initialize_database
from taskhub.infrastructure.scheduler import PollingWorker
from taskhub.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def _build_workers() -> list[PollingWorker]:
    settings = get_settings()
    notification_dispatcher = NotificationDispatcher(settings=settings)
    push_dispatcher = PushDispatcher(settings=settings)
    return [
        PollingWorker(
            "Notification worker",
            notification_dispatcher.run_cycle,
            interval_seconds=settings.notification_poll_interval_ms / 1000,
        ),
        PollingWorker(
            "Push worker",
            push_dispatcher.run_cycle,
            interval_seconds=settings.push_poll_interval_ms / 1000,
        ),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database and the polling workers, then release them on shutdown."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    initialize_database()

    workers: list[PollingWorker] = []
    if settings.workers_enabled:
        workers = _build_workers()
        for worker in workers:
            worker.start()
    else:
        logger.info("Background workers are disabled")

    app.state.workers = workers
    try:
        yield
    finally:
        for worker in workers:
            await worker.stop()
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="TaskHub Notifications", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
