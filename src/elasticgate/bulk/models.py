"""批量传输数据模型定义模块."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class BulkRecord:
    """单条待写入或已导出的文档.

    Attributes:
        source: 文档内容
        doc_id: 文档ID，None 表示由集群生成
        index_name: 目标索引
    """

    source: dict[str, Any]
    doc_id: str | None = None
    index_name: str | None = None


@dataclass
class BulkErrorItem:
    """批量写入错误项数据类.

    Attributes:
        index_name: 索引名称
        doc_id: 文档ID
        error_type: 错误类型
        error_reason: 错误原因
        status: HTTP状态码
        caused_by: 根本原因
    """

    index_name: str
    doc_id: str | None
    error_type: str
    error_reason: str
    status: int
    caused_by: str | None = None


@dataclass
class BulkResult:
    """批量写入结果数据类.

    Attributes:
        total: 总文档数
        success: 成功数
        failed: 失败数
        errors: 错误详情列表
        took: 集群耗时（毫秒）
    """

    total: int = 0
    success: int = 0
    failed: int = 0
    errors: list[BulkErrorItem] = field(default_factory=list)
    took: int = 0

    def is_success(self) -> bool:
        """判断操作是否全部成功."""
        return self.failed == 0

    def add_error(
        self,
        index_name: str,
        doc_id: str | None,
        error_type: str,
        error_reason: str,
        status: int,
        caused_by: str | None = None,
    ) -> None:
        """添加错误项."""
        self.errors.append(
            BulkErrorItem(
                index_name=index_name,
                doc_id=doc_id,
                error_type=error_type,
                error_reason=error_reason,
                status=status,
                caused_by=caused_by,
            )
        )

    def get_error_summary(self) -> str:
        """获取错误摘要."""
        if not self.errors:
            return "No errors"
        summary = f"{self.failed} of {self.total} documents failed\n"
        for i, error in enumerate(self.errors[:10], 1):  # 只显示前10个错误
            summary += (
                f"{i}. Index: {error.index_name}, DocID: {error.doc_id}, "
                f"Status: {error.status}, Reason: {error.error_type}: {error.error_reason}\n"
            )
        if len(self.errors) > 10:
            summary += f"... and {len(self.errors) - 10} more errors\n"
        return summary

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "success": self.success, "failed": self.failed}


class ExportStopReason(Enum):
    """导出提前结束原因."""

    CEILING = "ceiling"
    DEADLINE = "deadline"
    INCOMPLETE = "incomplete"


@dataclass
class ExportResult:
    """导出结果数据类.

    Attributes:
        records: 按集群返回顺序排列的文档
        total: 查询命中总数
        pages: 实际读取的页数（含首页）
        truncated: 是否为部分结果
        reason: 部分结果的原因
    """

    records: list[BulkRecord] = field(default_factory=list)
    total: int = 0
    pages: int = 0
    truncated: bool = False
    reason: ExportStopReason | None = None

    @property
    def documents(self) -> list[dict[str, Any]]:
        return [record.source for record in self.records]

    def __len__(self) -> int:
        return len(self.records)
