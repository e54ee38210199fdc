"""ElasticGate 异常定义模块.

所有核心异常都继承自 ElasticGateError，并携带 HTTP 状态码、
面向用户的提示信息、原始错误详情以及错误类型，
由 API 层统一转换为错误响应信封。
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from elasticsearch import ApiError, SerializationError, TransportError

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    """错误类型枚举."""

    CONNECTION_ERROR = "connection_error"
    PARSE_ERROR = "parse_error"
    NO_RESPONSE = "no_response"
    DECODE_ERROR = "decode_error"
    MARSHALING_ERROR = "marshaling_error"
    BAD_REQUEST = "bad_request"
    RESOURCE_ALREADY_EXISTS = "resource_already_exists_exception"
    INDEX_NOT_FOUND = "index_not_found_exception"
    ILLEGAL_ARGUMENT = "illegal_argument_exception"
    VALIDATION = "validation_exception"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    SERVER_ERROR = "server_error"


# 引擎原生错误类型 -> 面向用户的提示信息
_USER_MESSAGES: dict[str, str] = {
    ErrorType.RESOURCE_ALREADY_EXISTS.value: "index already exists",
    ErrorType.INDEX_NOT_FOUND.value: "index does not exist",
    ErrorType.ILLEGAL_ARGUMENT.value: "invalid request",
    ErrorType.VALIDATION.value: "validation error",
}


class ElasticGateError(Exception):
    """ElasticGate 基础异常类.

    Attributes:
        message: 面向用户的简要信息
        details: 原始错误原因，仅在详细错误模式下返回给调用方
        status_code: 对应的 HTTP 状态码
        error_type: 错误类型
    """

    status_code: int = 500
    error_type: ErrorType | str = ErrorType.SERVER_ERROR

    def __init__(
        self,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
        error_type: ErrorType | str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message
        if status_code is not None:
            self.status_code = status_code
        if error_type is not None:
            self.error_type = error_type

    @property
    def type_name(self) -> str:
        """错误类型的字符串形式."""
        if isinstance(self.error_type, ErrorType):
            return self.error_type.value
        return str(self.error_type)

    def __str__(self) -> str:
        return (
            f"Status: {self.status_code}, Type: {self.type_name}, "
            f"Message: {self.message}, Details: {self.details}"
        )


class EngineError(ElasticGateError):
    """搜索引擎返回或调用搜索引擎时产生的异常."""

    pass


class ConnectionFailedError(EngineError):
    """无法连接搜索引擎."""

    error_type = ErrorType.CONNECTION_ERROR


class BadRequestError(ElasticGateError):
    """调用方输入不合法，不会发送到搜索引擎."""

    status_code = 400
    error_type = ErrorType.BAD_REQUEST


class UnauthorizedError(ElasticGateError):
    """认证失败."""

    status_code = 401
    error_type = ErrorType.UNAUTHORIZED


def _error_status(exc: ApiError) -> int:
    meta = getattr(exc, "meta", None)
    status = getattr(meta, "status", None)
    return status if isinstance(status, int) else 500


def from_engine_error(exc: Exception, default_message: str) -> ElasticGateError:
    """将 elasticsearch 客户端异常归类为 ElasticGate 异常.

    引擎返回结构化错误（``{"error": {"type": ..., "reason": ...}}``）时，
    错误类型取引擎原生类型，提示信息取固定的用户提示，原始原因保存在 details 中。

    Args:
        exc: elasticsearch 客户端抛出的异常
        default_message: 无法识别错误类型时使用的提示信息

    Returns:
        归类后的 ElasticGateError
    """
    if isinstance(exc, ElasticGateError):
        return exc

    if isinstance(exc, SerializationError):
        return EngineError(
            default_message,
            details=str(exc),
            status_code=500,
            error_type=ErrorType.DECODE_ERROR,
        )

    if isinstance(exc, TransportError):
        return ConnectionFailedError(
            "failed to connect to elastic server",
            details=str(exc),
            status_code=500,
        )

    if isinstance(exc, ApiError):
        status = _error_status(exc)
        body: Any = exc.body
        error = body.get("error") if isinstance(body, dict) else None

        if isinstance(error, dict):
            err_type = error.get("type") or ""
            reason = error.get("reason") or default_message
            return EngineError(
                _USER_MESSAGES.get(err_type, default_message),
                details=reason,
                status_code=status,
                error_type=err_type or ErrorType.SERVER_ERROR,
            )

        if status == 404:
            return EngineError(
                default_message,
                details=str(body) if body else default_message,
                status_code=404,
                error_type=ErrorType.NOT_FOUND,
            )

        return EngineError(
            default_message,
            details="failed to decode error response",
            status_code=status,
            error_type=ErrorType.DECODE_ERROR,
        )

    logger.error(f"未识别的异常: {exc!r}")
    return ElasticGateError(default_message, details=str(exc))
