"""文档网关模块.

主要组件:
    - DocumentGateway: 按逻辑索引名进行文档的增删改查、搜索、补全与分页列表

使用示例:
    from elasticgate.documents import DocumentGateway

    gateway = DocumentGateway(es_client, resolver, bulk_tool)
    gateway.update("products", "1", {"price": 12.5})
"""

from .exceptions import DocumentError, DocumentNotFoundError, DocumentValidationError
from .tool import DocumentGateway

__all__ = [
    "DocumentGateway",
    "DocumentError",
    "DocumentNotFoundError",
    "DocumentValidationError",
]
