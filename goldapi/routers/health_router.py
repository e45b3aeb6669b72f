import logging

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from goldapi.containers import Container
from goldapi.schemas.health import HealthCheckResponse
from goldapi.services.scheduler_service import GoldJobScheduler
from goldapi.utils.timezone_utils import get_ist_today

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
@inject
def health_check(
    db: Session = Depends(Provide[Container.repositories.get_db]),
    scheduler: GoldJobScheduler = Depends(Provide[Container.services.scheduler]),
) -> HealthCheckResponse:
    """Health check endpoint."""
    response = HealthCheckResponse(
        scheduler_running=scheduler.is_running,
        current_date_ist=get_ist_today().isoformat(),
    )
    try:
        db.execute(text("SELECT 1"))
        response.database = "connected"
    except Exception as e:
        logger.error(f"Health check database query failed: {str(e)}")
        response.status = "unhealthy"
        response.database = "disconnected"
        response.error = str(e)
    return response
