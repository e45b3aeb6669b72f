"""
가입 상담 요청 서비스

가입자가 희망 금 그램/품목/연락 가능 시간을 남기면 관리자가 연락 후 처리 표시합니다.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.core.exceptions import NotFoundError
from goldapi.repositories.scheme_request_repository import SchemeRequestRepository
from goldapi.repositories.user_repository import UserRepository
from goldapi.schemas.scheme_request import (
    SchemeRequestCreate,
    SchemeRequestListResponse,
    SchemeRequestResponse,
    SchemeRequestUpdate,
)

logger = logging.getLogger(__name__)


class SchemeRequestService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.scheme_request_repo = SchemeRequestRepository(db)

    def create_scheme_request(
        self, user_id: int, request: SchemeRequestCreate
    ) -> SchemeRequestResponse:
        if self.user_repo.get_model(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

        scheme_request = self.scheme_request_repo.create(
            user_id=user_id,
            desired_gold_grams=Decimal(str(request.desired_gold_grams)),
            desired_item=request.desired_item.strip(),
            convenient_time=request.convenient_time.strip(),
            comments=request.comments,
            is_addressed=False,
        )
        logger.info(f"Scheme request {scheme_request.id} created by user {user_id}")
        return scheme_request

    def get_scheme_request(
        self, request_id: int, user_id: Optional[int] = None
    ) -> SchemeRequestResponse:
        """상담 요청 조회 - user_id 가 주어지면 본인 요청만 허용"""
        scheme_request = self.scheme_request_repo.get_by_id(request_id)
        if scheme_request is None or (
            user_id is not None and scheme_request.user_id != user_id
        ):
            raise NotFoundError(f"Scheme request {request_id} not found")
        return scheme_request

    def list_scheme_requests(
        self,
        user_id: Optional[int] = None,
        is_addressed: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> SchemeRequestListResponse:
        if limit > 100:
            limit = 100
        requests, total = self.scheme_request_repo.list_filtered(
            user_id=user_id, is_addressed=is_addressed, limit=limit, offset=offset
        )
        return SchemeRequestListResponse(
            requests=requests,
            total_count=total,
            has_next=offset + len(requests) < total,
            limit=limit,
            offset=offset,
        )

    def update_scheme_request(
        self, request_id: int, update: SchemeRequestUpdate
    ) -> SchemeRequestResponse:
        """관리자 처리 - 전달된 필드만 변경"""
        changes = update.model_dump(exclude_unset=True)
        scheme_request = self.scheme_request_repo.update(request_id, **changes)
        if scheme_request is None:
            raise NotFoundError(f"Scheme request {request_id} not found")
        logger.info(f"Scheme request {request_id} updated: {changes}")
        return scheme_request
