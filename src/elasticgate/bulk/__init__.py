"""批量传输模块.

主要组件:
    - BulkTransferTool: scroll 分页导出、文档数组与 bulk 动作流导入
    - parse_bulk_stream / parse_document_array: 导入内容解析
    - render_bulk_stream / render_document_array: 导出结果渲染

使用示例:
    from elasticgate.bulk import BulkTransferTool

    tool = BulkTransferTool(es_client, resolver)
    result = tool.export("products")
    ndjson = render_bulk_stream(result.records, "products")
"""

from .exceptions import BulkOperationError, BulkValidationError, BulkWriteError
from .models import BulkErrorItem, BulkRecord, BulkResult, ExportResult, ExportStopReason
from .parser import parse_bulk_stream, parse_document_array
from .tool import BulkTransferTool, render_bulk_stream, render_document_array

__all__ = [
    # 工具类
    "BulkTransferTool",
    # 解析与渲染
    "parse_bulk_stream",
    "parse_document_array",
    "render_bulk_stream",
    "render_document_array",
    # 数据模型
    "BulkRecord",
    "BulkResult",
    "BulkErrorItem",
    "ExportResult",
    "ExportStopReason",
    # 异常
    "BulkOperationError",
    "BulkValidationError",
    "BulkWriteError",
]
