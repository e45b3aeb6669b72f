import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from goldapi import containers
from goldapi.config import settings
from goldapi.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_integrity_error,
    handle_unexpected_error,
    handle_validation_error,
)
from goldapi.core.exceptions import BaseAPIException
from goldapi.core.logging_middleware import LoggingMiddleware
from goldapi.routers import (
    admin_router,
    auth_router,
    file_router,
    gold_price_router,
    health_router,
    redemption_router,
    referral_router,
    scheme_request_router,
    scheme_router,
    transaction_router,
    user_scheme_router,
)
from goldapi.utils.config import init_logging

load_dotenv("goldapi/.env")
init_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = app.container.services.scheduler()  # type: ignore
        scheduler.start()
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")

    yield

    if scheduler is not None:
        await scheduler.stop()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.container = containers.Container()  # type: ignore

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router.router)
    for module in (
        auth_router,
        gold_price_router,
        scheme_router,
        user_scheme_router,
        transaction_router,
        redemption_router,
        scheme_request_router,
        referral_router,
        admin_router,
        file_router,
    ):
        app.include_router(module.router, prefix=settings.API_V1_STR)

    return app


app = create_app()

handler = Mangum(app)
