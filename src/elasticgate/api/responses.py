"""统一响应信封.

成功: ``{ts, code, message, data?}``；失败: ``{ts, code, message, details?, type}``。
details 仅在详细错误模式下返回。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse

from ..exceptions import ElasticGateError


def now_ts() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(message: str, data: Any = None, code: int = 200) -> JSONResponse:
    content: dict[str, Any] = {"ts": now_ts(), "code": code, "message": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=code, content=content)


def error(
    code: int,
    message: str,
    error_type: str,
    details: str | None = None,
    detail_error: bool = False,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"ts": now_ts(), "code": code, "message": message}
    if detail_error and details:
        content["details"] = details
    content["type"] = error_type
    return JSONResponse(status_code=code, content=content, headers=headers)


def error_from_exception(exc: ElasticGateError, detail_error: bool = False) -> JSONResponse:
    return error(
        exc.status_code,
        exc.message,
        exc.type_name,
        details=exc.details,
        detail_error=detail_error,
    )
