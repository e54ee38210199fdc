"""
ES 查询结果解析器.

提供将 Elasticsearch 原始响应解析为结构化数据对象的功能.
"""

from __future__ import annotations

import logging
from typing import Any

from elasticgate.parsers.types import (
    PagedResponse,
    SearchDocument,
    SearchResult,
    SuggestionItem,
)

# 模块级别日志记录器
logger = logging.getLogger(__name__)


class ResponseParser:
    """
    ES 查询结果解析器.

    使用示例:
        parser = ResponseParser()
        result = parser.parse_search(es_client.search(index="products_20240101120000", ...))

        for doc in result.documents:
            print(doc.id, doc.score)
    """

    # ========== 命中解析方法 ==========

    def parse_hits(self, response: Any) -> list[SearchDocument]:
        """
        解析命中文档列表.

        Args:
            response: ES 原始响应（dict 或 ObjectApiResponse）

        Returns:
            命中文档列表
        """
        response_dict = self._ensure_dict(response)
        hits = response_dict.get("hits", {}).get("hits", [])
        return [self._transform_hit(hit) for hit in hits]

    def parse_search(self, response: Any) -> SearchResult:
        """解析搜索响应."""
        return SearchResult(
            total=self.get_total(response),
            max_score=self.get_max_score(response),
            documents=self.parse_hits(response),
        )

    def parse_paged(self, response: Any, page: int, page_size: int) -> PagedResponse:
        """
        解析分页响应.

        Args:
            response: ES 原始响应
            page: 当前页码（从1开始）
            page_size: 每页大小

        Returns:
            分页响应对象，items 为文档源数据
        """
        response_dict = self._ensure_dict(response)
        hits = response_dict.get("hits", {}).get("hits", [])
        return PagedResponse(
            items=[hit.get("_source", {}) for hit in hits],
            total=self.get_total(response_dict),
            page=page,
            page_size=page_size,
        )

    # ========== 建议解析方法 ==========

    def parse_suggestions(self, response: Any, suggest_name: str) -> list[SuggestionItem]:
        """
        解析搜索建议结果.

        Args:
            response: ES 原始响应
            suggest_name: 建议器名称

        Returns:
            建议项列表
        """
        response_dict = self._ensure_dict(response)
        suggest_data = response_dict.get("suggest", {}).get(suggest_name, [])

        results: list[SuggestionItem] = []
        for suggest_entry in suggest_data:
            for option in suggest_entry.get("options", []):
                results.append(
                    SuggestionItem(text=option.get("text", ""), score=option.get("_score"))
                )
        return results

    # ========== 工具方法 ==========

    def get_total(self, response: Any) -> int:
        """
        获取命中总数.

        兼容 ES 7.x 和 8.x 格式.
        """
        response_dict = self._ensure_dict(response)
        total_info = response_dict.get("hits", {}).get("total", 0)

        if isinstance(total_info, dict):
            return total_info.get("value", 0)
        return total_info or 0

    def get_max_score(self, response: Any) -> float | None:
        response_dict = self._ensure_dict(response)
        return response_dict.get("hits", {}).get("max_score")

    # ========== 内部辅助方法 ==========

    def _ensure_dict(self, response: Any) -> dict[str, Any]:
        """
        确保响应为字典格式.

        支持 elasticsearch 客户端的 ObjectApiResponse 对象和原始字典.
        """
        if hasattr(response, "body"):
            return response.body
        if isinstance(response, dict):
            return response
        raise TypeError(f"不支持的响应类型: {type(response)}")

    def _transform_hit(self, hit: dict[str, Any]) -> SearchDocument:
        return SearchDocument(
            id=hit.get("_id", ""),
            score=hit.get("_score"),
            data=hit.get("_source", {}),
        )
