import logging
import traceback
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import ConflictError, InternalServerError

logger = logging.getLogger("goldapi")


def _request_context(request: Request) -> Dict[str, Any]:
    client = request.client.host if request.client else "-"
    return {
        "method": request.method,
        "path": request.url.path,
        "client": client,
        "request_id": getattr(request.state, "request_id", "-"),
    }


def _prefix(kind: str, ctx: Dict[str, Any]) -> str:
    return f"[{kind}:{ctx['request_id']}] {ctx['method']} {ctx['path']} from {ctx['client']}"


async def handle_base_api_exception(request, exc):
    ctx = _request_context(request)
    message = f"{_prefix('BaseAPIException', ctx)} -> {exc.status_code}: {exc.detail}"
    if getattr(exc, "status_code", 500) >= 500:
        logger.error(message)
    else:
        logger.warning(message)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)  # type: ignore[arg-type]


async def handle_http_exception(request, exc):
    ctx = _request_context(request)
    error_msg = f"{_prefix('HTTPException', ctx)} -> {exc.status_code}: {exc.detail}"

    if getattr(exc, "status_code", 500) >= 500:
        # 500번대 에러는 스택 트레이스 포함
        tb_str = "".join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{error_msg}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(error_msg)

    if isinstance(exc.detail, dict) and "error" in exc.detail:  # type: ignore[truthy-bool]
        content = exc.detail  # type: ignore[assignment]
    else:
        content = {
            "success": False,
            "error": {
                "code": "HTTP_ERROR",
                "message": str(exc.detail),
                "details": {},
            },
        }
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def handle_validation_error(request, exc):
    ctx = _request_context(request)
    logger.warning(f"{_prefix('ValidationError', ctx)} -> 422: {exc.errors()}")

    # 필드 경로 -> 메시지 맵
    fields: Dict[str, str] = {}
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        fields[loc or "request"] = err.get("msg", "invalid")

    content = {
        "success": False,
        "error": {
            "code": "VALIDATION_001",
            "message": "Validation failed",
            "details": {"fields": fields},
        },
    }
    return JSONResponse(status_code=422, content=content)


async def handle_integrity_error(request, exc):
    """unique 제약 위반 등 저장소 제약 오류 -> 400"""
    ctx = _request_context(request)
    logger.warning(f"{_prefix('IntegrityError', ctx)} -> 400: {exc.orig}")
    conflict = ConflictError("Request conflicts with existing data")
    return JSONResponse(status_code=conflict.status_code, content=conflict.detail)  # type: ignore[arg-type]


async def handle_unexpected_error(request, exc):
    ctx = _request_context(request)

    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"\n{'=' * 80}\n"
        f"{_prefix('Unhandled Error', ctx)}\n"
        f"Exception Type: {type(exc).__name__}\n"
        f"Exception Message: {str(exc)}\n\n"
        f"Full Stack Trace:\n{tb_str}"
        f"{'=' * 80}"
    )

    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
