"""
금 시세 API

- GET /gold-prices/current: 최신 시세
- GET /gold-prices/history: 최근 N일 추이 및 통계
- GET /gold-prices: 시세 목록
- GET /gold-prices/{price_date}: 특정 일자 시세
- POST /gold-prices: 시세 등록/대체 (관리자) - 전일 시세가 있으면 보너스 지급
- DELETE /gold-prices/{price_id}: 시세 삭제 (관리자)
"""

from datetime import date

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_admin
from goldapi.schemas.auth import BaseResponse
from goldapi.schemas.gold_price import (
    GoldPriceHistoryResponse,
    GoldPriceListResponse,
    GoldPriceResponse,
    GoldPriceSetRequest,
    GoldPriceSetResult,
)
from goldapi.schemas.user import Actor
from goldapi.services.gold_price_service import GoldPriceService

router = APIRouter(prefix="/gold-prices", tags=["gold-prices"])


@router.get("/current", response_model=GoldPriceResponse)
@inject
def get_current_price(
    _: Actor = Depends(get_current_actor),
    service: GoldPriceService = Depends(Provide[Container.services.gold_price_service]),
) -> GoldPriceResponse:
    return service.get_current_price()


@router.get("/history", response_model=GoldPriceHistoryResponse)
@inject
def get_price_history(
    days: int = Query(30, ge=1, le=365, description="조회 일수"),
    _: Actor = Depends(get_current_actor),
    service: GoldPriceService = Depends(Provide[Container.services.gold_price_service]),
) -> GoldPriceHistoryResponse:
    return service.get_price_history(days)


@router.get("", response_model=GoldPriceListResponse)
@inject
def list_gold_prices(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _: Actor = Depends(get_current_actor),
    service: GoldPriceService = Depends(Provide[Container.services.gold_price_service]),
) -> GoldPriceListResponse:
    return service.list_gold_prices(limit=limit, offset=offset)


@router.get("/{price_date}", response_model=GoldPriceResponse)
@inject
def get_price_by_date(
    price_date: date,
    _: Actor = Depends(get_current_actor),
    service: GoldPriceService = Depends(Provide[Container.services.gold_price_service]),
) -> GoldPriceResponse:
    return service.get_price_by_date(price_date)


@router.post("", response_model=GoldPriceSetResult)
@inject
def set_gold_price(
    request: GoldPriceSetRequest,
    _: Actor = Depends(require_admin),
    service: GoldPriceService = Depends(Provide[Container.services.gold_price_service]),
) -> GoldPriceSetResult:
    """일별 시세 등록 (같은 날짜 시세는 대체되고 해당 보너스는 무효화)"""
    return service.set_gold_price(request.date, request.price_per_gram)


@router.delete("/{price_id}", response_model=BaseResponse)
@inject
def delete_gold_price(
    price_id: int,
    _: Actor = Depends(require_admin),
    service: GoldPriceService = Depends(Provide[Container.services.gold_price_service]),
) -> BaseResponse:
    reversed_count = service.delete_gold_price(price_id)
    return BaseResponse(
        data={"price_id": price_id, "reversed_transactions": reversed_count}
    )
