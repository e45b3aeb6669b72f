import logging
import time
import uuid

from fastapi import Request, Response
from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

# Use the goldapi logger so it goes to the JSON handler
logger = logging.getLogger("goldapi")

REQUEST_ID_HEADER = "X-Request-ID"


def _level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청/응답 로깅 미들웨어 - 요청마다 request id를 부여하고 처리 시간을 기록"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.time()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "-"

        logger.info(f"[Request:{request_id}] {method} {path} from {client}")
        try:
            response = await call_next(request)
        except HTTPException as http_exc:
            logger.log(
                _level_for_status(http_exc.status_code),
                f"[HTTPException:{request_id}] {method} {path} -> {http_exc.status_code}: {http_exc.detail}",
            )
            raise
        except Exception:
            logger.exception(f"[Unhandled Error:{request_id}] {method} {path} from {client}")
            raise

        duration_ms = (time.time() - start) * 1000
        logger.log(
            _level_for_status(response.status_code),
            f"[Response:{request_id}] {method} {path} -> {response.status_code} in {duration_ms:.1f}ms",
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
