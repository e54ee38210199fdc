"""批量传输异常定义模块."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import ElasticGateError, ErrorType

if TYPE_CHECKING:
    from .models import BulkResult


class BulkOperationError(ElasticGateError):
    """批量操作基础异常类."""

    pass


class BulkValidationError(BulkOperationError):
    """导入内容校验异常，不会向集群发送任何写请求."""

    status_code = 400
    error_type = ErrorType.BAD_REQUEST


class BulkWriteError(BulkOperationError):
    """批量写入中存在失败文档.

    集群以单个批次接收写入，部分文档失败只以汇总形式报告。

    Attributes:
        result: 批量写入结果
    """

    status_code = 500
    error_type = ErrorType.SERVER_ERROR

    def __init__(self, message: str, result: BulkResult):
        super().__init__(message, details=result.get_error_summary())
        self.result = result
