"""搜索请求体构建器模块.

将简化的搜索参数转换为 Elasticsearch 查询 DSL，本身不访问集群。
"""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch.dsl import Q, Search

from .exceptions import QueryBuildError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS = ["name.fulltext", "description.fulltext"]
DEFAULT_PAGE_SIZE = 10
SUGGEST_NAME = "suggestions"


class SearchBodyBuilder:
    """
    搜索请求体构建器.

    查询规则:
    - match_all 为真时使用 match_all
    - 提供 query 时使用 bool.should 组合短语匹配（boost 2）与模糊匹配（boost 1），
      filters 作为 term 过滤
    - 只提供 filters 时仅做过滤
    - 都未提供时报错

    使用示例:
        body = (
            SearchBodyBuilder()
            .query("Product A")
            .filters({"category": "books"})
            .pagination(0, 20)
            .min_score(0.5)
            .build()
        )
    """

    def __init__(self):
        self._query: str = ""
        self._match_all: bool = False
        self._filters: dict[str, Any] = {}
        self._search_fields: list[str] = list(DEFAULT_SEARCH_FIELDS)
        self._from: int = 0
        self._size: int = DEFAULT_PAGE_SIZE
        self._min_score: float = 0.0

    def query(self, text: str | None) -> SearchBodyBuilder:
        self._query = (text or "").strip()
        return self

    def match_all(self, enabled: bool = True) -> SearchBodyBuilder:
        self._match_all = enabled
        return self

    def filters(self, filters: dict[str, Any] | None) -> SearchBodyBuilder:
        self._filters = dict(filters or {})
        return self

    def search_fields(self, fields: list[str] | None) -> SearchBodyBuilder:
        """设置全文检索字段，为空时使用默认字段."""
        self._search_fields = list(fields) if fields else list(DEFAULT_SEARCH_FIELDS)
        return self

    def pagination(self, from_: int = 0, size: int = 0) -> SearchBodyBuilder:
        """
        设置分页.

        Args:
            from_: 起始偏移，最小为 0
            size: 每页大小，小于等于 0 时使用默认值 10
        """
        self._from = max(0, from_)
        self._size = size if size > 0 else DEFAULT_PAGE_SIZE
        return self

    def min_score(self, score: float | None) -> SearchBodyBuilder:
        self._min_score = score or 0.0
        return self

    def _filter_clauses(self) -> list[Q]:
        clauses = []
        for field, value in self._filters.items():
            if isinstance(value, list):
                clauses.append(Q("terms", **{field: value}))
            else:
                clauses.append(Q("term", **{field: value}))
        return clauses

    def build_query(self) -> Q:
        """
        构建查询子句.

        Raises:
            QueryBuildError: 未提供任何查询条件时抛出
        """
        if self._match_all:
            return Q("match_all")

        if self._query:
            return Q(
                "bool",
                should=[
                    Q(
                        "multi_match",
                        query=self._query,
                        fields=self._search_fields,
                        type="phrase",
                        boost=2,
                    ),
                    Q(
                        "multi_match",
                        query=self._query,
                        fields=self._search_fields,
                        fuzziness="AUTO",
                        boost=1,
                    ),
                ],
                minimum_should_match=1,
                filter=self._filter_clauses(),
            )

        if self._filters:
            return Q("bool", filter=self._filter_clauses())

        raise QueryBuildError("no valid query provided")

    def build(self) -> dict[str, Any]:
        """构建完整的搜索请求体."""
        search = Search().query(self.build_query()).extra(from_=self._from, size=self._size)
        if self._min_score > 0:
            search = search.extra(min_score=self._min_score)
        body = search.to_dict()
        logger.debug(f"构建搜索请求体: {body}")
        return body


def build_suggest_body(field: str, text: str, size: int | None = None) -> dict[str, Any]:
    """
    构建补全建议请求体.

    使用字段的 suggest（completion）子字段。

    Args:
        field: 字段名
        text: 用户输入
        size: 最多返回的建议数

    Raises:
        QueryBuildError: 字段名或输入为空时抛出
    """
    if not field:
        raise QueryBuildError("field is required")
    if not text:
        raise QueryBuildError("input is required")

    completion: dict[str, Any] = {"field": f"{field}.suggest", "skip_duplicates": True}
    if size:
        completion["size"] = size
    return {"suggest": {SUGGEST_NAME: {"prefix": text, "completion": completion}}}
