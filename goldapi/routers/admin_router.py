"""
관리자 API

대시보드:
- GET /admin/dashboard: 전체 기간 통계
- GET /admin/analytics: 기간(start_date ~ end_date, IST) 통계

상환 요청:
- GET /admin/redemptions: 상환 요청 목록 (상태/유형 필터)
- POST /admin/redemptions/{request_id}/decision: 승인 또는 반려

설정:
- GET /admin/settings, GET/PUT/DELETE /admin/settings/{key}

정기 작업 수동 실행:
- POST /admin/jobs/maturity
- POST /admin/jobs/accrual
- POST /admin/jobs/points-recalculation
- POST /admin/jobs/points-recalculation/{user_scheme_id}
- GET /admin/jobs/scheduler
"""

import logging
from datetime import date
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from goldapi.containers import Container
from goldapi.core.auth_middleware import require_admin
from goldapi.models.redemption import RedemptionStatus, RedemptionType
from goldapi.schemas.auth import BaseResponse
from goldapi.schemas.batch import (
    AccrualRunResult,
    MaturityRunResult,
    RecalculationItemResult,
    RecalculationRunResult,
    SchedulerStatusResponse,
)
from goldapi.schemas.dashboard import DashboardStats
from goldapi.schemas.redemption import (
    RedemptionDecisionRequest,
    RedemptionListResponse,
    RedemptionRequestResponse,
)
from goldapi.schemas.settings import (
    SettingListResponse,
    SettingResponse,
    SettingUpsertRequest,
)
from goldapi.schemas.user import Actor
from goldapi.services.accrual_service import AccrualService
from goldapi.services.dashboard_service import DashboardService
from goldapi.services.maturity_service import MaturityService
from goldapi.services.points_recalculation_service import PointsRecalculationService
from goldapi.services.redemption_service import RedemptionService
from goldapi.services.scheduler_service import GoldJobScheduler
from goldapi.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# ----------------------------------------------------------------------
# 대시보드 / 기간 분석
# ----------------------------------------------------------------------
@router.get("/dashboard", response_model=DashboardStats)
@inject
def get_dashboard(
    _: Actor = Depends(require_admin),
    service: DashboardService = Depends(Provide[Container.services.dashboard_service]),
) -> DashboardStats:
    return service.get_dashboard_stats()


@router.get("/analytics", response_model=DashboardStats)
@inject
def get_analytics(
    start_date: Optional[date] = Query(None, description="IST 기준 시작일 (기본: 종료일 29일 전)"),
    end_date: Optional[date] = Query(None, description="IST 기준 종료일 (기본: 오늘)"),
    _: Actor = Depends(require_admin),
    service: DashboardService = Depends(Provide[Container.services.dashboard_service]),
) -> DashboardStats:
    return service.get_analytics(start_date, end_date)


# ----------------------------------------------------------------------
# 상환 요청
# ----------------------------------------------------------------------
@router.get("/redemptions", response_model=RedemptionListResponse)
@inject
def list_redemption_requests(
    status: Optional[RedemptionStatus] = Query(None),
    request_type: Optional[RedemptionType] = Query(None, alias="type"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _: Actor = Depends(require_admin),
    service: RedemptionService = Depends(Provide[Container.services.redemption_service]),
) -> RedemptionListResponse:
    return service.list_redemption_requests(
        status=status.value if status else None,
        request_type=request_type.value if request_type else None,
        limit=limit,
        offset=offset,
    )


@router.post(
    "/redemptions/{request_id}/decision", response_model=RedemptionRequestResponse
)
@inject
def decide_redemption_request(
    request_id: int,
    request: RedemptionDecisionRequest,
    admin: Actor = Depends(require_admin),
    service: RedemptionService = Depends(Provide[Container.services.redemption_service]),
) -> RedemptionRequestResponse:
    return service.approve_redemption(
        request_id, admin_id=admin.id, remarks=request.remarks, status=request.status
    )


# ----------------------------------------------------------------------
# 설정
# ----------------------------------------------------------------------
@router.get("/settings", response_model=SettingListResponse)
@inject
def list_settings(
    _: Actor = Depends(require_admin),
    service: SettingsService = Depends(Provide[Container.services.settings_service]),
) -> SettingListResponse:
    return service.get_settings()


@router.get("/settings/{key}", response_model=SettingResponse)
@inject
def get_setting(
    key: str,
    _: Actor = Depends(require_admin),
    service: SettingsService = Depends(Provide[Container.services.settings_service]),
) -> SettingResponse:
    return service.get_setting(key)


@router.put("/settings/{key}", response_model=SettingResponse)
@inject
def upsert_setting(
    key: str,
    request: SettingUpsertRequest,
    admin: Actor = Depends(require_admin),
    service: SettingsService = Depends(Provide[Container.services.settings_service]),
) -> SettingResponse:
    logger.info(f"Admin {admin.id} updating setting '{key}'")
    return service.set_setting(
        key, request.value, description=request.description, is_system=request.is_system
    )


@router.delete("/settings/{key}", response_model=BaseResponse)
@inject
def delete_setting(
    key: str,
    _: Actor = Depends(require_admin),
    service: SettingsService = Depends(Provide[Container.services.settings_service]),
) -> BaseResponse:
    service.delete_setting(key)
    return BaseResponse(data={"key": key, "deleted": True})


# ----------------------------------------------------------------------
# 정기 작업 수동 실행
# ----------------------------------------------------------------------
@router.post("/jobs/maturity", response_model=MaturityRunResult)
@inject
def run_maturity_job(
    _: Actor = Depends(require_admin),
    service: MaturityService = Depends(Provide[Container.services.maturity_service]),
) -> MaturityRunResult:
    return service.process_matured_schemes()


@router.post("/jobs/accrual", response_model=AccrualRunResult)
@inject
def run_accrual_job(
    _: Actor = Depends(require_admin),
    service: AccrualService = Depends(Provide[Container.services.accrual_service]),
) -> AccrualRunResult:
    return service.convert_points_to_accrued_gold()


@router.post("/jobs/points-recalculation", response_model=RecalculationRunResult)
@inject
def run_points_recalculation(
    _: Actor = Depends(require_admin),
    service: PointsRecalculationService = Depends(
        Provide[Container.services.points_recalculation_service]
    ),
) -> RecalculationRunResult:
    return service.recalculate_all()


@router.post(
    "/jobs/points-recalculation/{user_scheme_id}",
    response_model=RecalculationItemResult,
)
@inject
def run_points_recalculation_for_user_scheme(
    user_scheme_id: int,
    _: Actor = Depends(require_admin),
    service: PointsRecalculationService = Depends(
        Provide[Container.services.points_recalculation_service]
    ),
) -> RecalculationItemResult:
    return service.recalculate_user_scheme(user_scheme_id)


@router.get("/jobs/scheduler", response_model=SchedulerStatusResponse)
@inject
def get_scheduler_status(
    _: Actor = Depends(require_admin),
    scheduler: GoldJobScheduler = Depends(Provide[Container.services.scheduler]),
) -> SchedulerStatusResponse:
    return scheduler.status()
