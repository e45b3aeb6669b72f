import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from goldapi.core.exceptions import ConflictError, NotFoundError
from goldapi.repositories.scheme_repository import SchemeRepository
from goldapi.schemas.scheme import SchemeCreate, SchemeListResponse, SchemeResponse

logger = logging.getLogger(__name__)


class SchemeService:
    def __init__(self, db: Session):
        self.db = db
        self.scheme_repo = SchemeRepository(db)

    def create_scheme(self, request: SchemeCreate) -> SchemeResponse:
        name = request.name.strip()
        if self.scheme_repo.get_by_name(name):
            raise ConflictError(f"Scheme '{name}' already exists")

        scheme = self.scheme_repo.create(
            name=name,
            duration_months=request.duration_months,
            gold_grams=Decimal(str(request.gold_grams)),
        )
        logger.info(f"Scheme {scheme.id} created: {name}")
        return scheme

    def get_scheme(self, scheme_id: int) -> SchemeResponse:
        scheme = self.scheme_repo.get_by_id(scheme_id)
        if scheme is None:
            raise NotFoundError(f"Scheme {scheme_id} not found")
        return scheme

    def list_schemes(self) -> SchemeListResponse:
        schemes = self.scheme_repo.list_schemes()
        return SchemeListResponse(schemes=schemes, total_count=len(schemes))
