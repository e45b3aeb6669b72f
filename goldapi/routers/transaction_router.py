from datetime import date
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_admin
from goldapi.schemas.transaction import TransactionListResponse, TransactionSummary
from goldapi.schemas.user import Actor
from goldapi.services.transaction_service import TransactionService
from goldapi.services.user_scheme_service import UserSchemeService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
@inject
def list_transactions(
    user_scheme_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None, description="관리자 전용 필터"),
    transaction_type: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: TransactionService = Depends(Provide[Container.services.transaction_service]),
) -> TransactionListResponse:
    """거래 내역 - 가입자는 본인 거래만 조회"""
    if not actor.is_admin:
        user_id = actor.id
    return service.list_transactions(
        user_scheme_id=user_scheme_id,
        user_id=user_id,
        transaction_type=transaction_type,
        limit=limit,
        offset=offset,
    )


@router.get("/summary/{user_scheme_id}", response_model=TransactionSummary)
@inject
def get_summary(
    user_scheme_id: int,
    actor: Actor = Depends(get_current_actor),
    service: TransactionService = Depends(Provide[Container.services.transaction_service]),
    user_scheme_service: UserSchemeService = Depends(
        Provide[Container.services.user_scheme_service]
    ),
) -> TransactionSummary:
    if not actor.is_admin:
        # 본인 가입이 아니면 NotFoundError
        user_scheme_service.get_user_scheme(user_scheme_id, user_id=actor.id)
    return service.get_summary(user_scheme_id)


@router.get("/export")
@inject
def export_transactions(
    user_id: Optional[int] = Query(None),
    user_scheme_id: Optional[int] = Query(None),
    transaction_type: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _: Actor = Depends(require_admin),
    service: TransactionService = Depends(Provide[Container.services.transaction_service]),
) -> Response:
    """거래 내역 CSV 다운로드 (관리자)"""
    filename, content = service.export_transactions_csv(
        user_id=user_id,
        user_scheme_id=user_scheme_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
