"""
ES 查询结果解析器模块.

提供将 Elasticsearch 原始响应解析为结构化数据对象的功能.

使用示例:
    from elasticgate.parsers import ResponseParser

    parser = ResponseParser()
    result = parser.parse_search(response)
    suggestions = parser.parse_suggestions(response, "suggestions")
"""

from elasticgate.parsers.response import ResponseParser
from elasticgate.parsers.types import (
    PagedResponse,
    SearchDocument,
    SearchResult,
    SuggestionItem,
)

__all__ = [
    "ResponseParser",
    "PagedResponse",
    "SearchDocument",
    "SearchResult",
    "SuggestionItem",
]
