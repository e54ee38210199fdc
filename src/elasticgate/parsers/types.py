"""
结果解析器数据类型定义.

包含搜索命中、搜索结果、分页响应与建议项数据类.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SearchDocument:
    """
    搜索命中文档.

    Attributes:
        id: 文档 ID
        score: 相关性得分
        data: 文档源数据
    """

    id: str
    score: float | None
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "score": self.score, "data": self.data}


@dataclass
class SearchResult:
    """
    搜索结果.

    Attributes:
        total: 命中总数
        max_score: 最高相关性得分
        documents: 命中文档列表
    """

    total: int
    max_score: float | None
    documents: list[SearchDocument] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "max_score": self.max_score,
            "documents": [doc.to_dict() for doc in self.documents],
        }


@dataclass
class PagedResponse:
    """
    分页响应封装.

    Attributes:
        items: 文档源数据列表
        total: 总文档数
        page: 当前页码（从1开始）
        page_size: 每页大小
        total_pages: 总页数
        has_next: 是否有下一页
        has_prev: 是否有上一页
    """

    items: list[dict[str, Any]]
    total: int
    page: int
    page_size: int
    total_pages: int = field(init=False)
    has_next: bool = field(init=False)
    has_prev: bool = field(init=False)

    def __post_init__(self) -> None:
        """计算分页相关字段."""
        if self.page_size > 0:
            self.total_pages = math.ceil(self.total / self.page_size)
        else:
            self.total_pages = 0
        self.has_next = self.page < self.total_pages
        self.has_prev = self.page > 1

    def to_dict(self) -> dict[str, Any]:
        """
        转换为字典格式.

        用于 API 响应序列化.
        """
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


@dataclass
class SuggestionItem:
    """
    搜索建议项.

    Attributes:
        text: 建议文本
        score: 建议得分
    """

    text: str
    score: float | None = None
