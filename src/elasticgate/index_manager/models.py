"""索引管理器数据模型定义模块."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import SchemaValidationError

NESTED_TYPE = "nested"


@dataclass
class FieldSchema:
    """字段定义数据类.

    Attributes:
        type: 字段类型（text, keyword, float, nested 等）
        analyzer: 索引时使用的分析器
        search_analyzer: 查询时使用的分析器
        autocomplete: 是否生成前缀补全子字段
        search: 是否生成全文检索子字段
        properties: 嵌套字段定义，仅 nested 类型可用
    """

    type: str
    analyzer: str | None = None
    search_analyzer: str | None = None
    autocomplete: bool = False
    search: bool = False
    properties: dict[str, FieldSchema] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Any) -> FieldSchema:
        """从请求体构建字段定义并校验结构.

        Args:
            name: 字段名，用于错误提示
            data: 字段定义字典

        Returns:
            FieldSchema 实例

        Raises:
            SchemaValidationError: 字段定义不合法时抛出
        """
        if not isinstance(data, dict):
            raise SchemaValidationError(f"field '{name}' must be an object")

        field_type = data.get("type")
        if not isinstance(field_type, str) or not field_type:
            raise SchemaValidationError(f"field '{name}' is missing type")

        raw_properties = data.get("properties")
        if field_type == NESTED_TYPE:
            if not isinstance(raw_properties, dict) or not raw_properties:
                raise SchemaValidationError(
                    f"nested field '{name}' requires non-empty properties"
                )
        elif raw_properties:
            raise SchemaValidationError(
                f"field '{name}' of type {field_type} must not have properties"
            )

        return cls(
            type=field_type,
            analyzer=data.get("analyzer") or None,
            search_analyzer=data.get("search_analyzer") or None,
            autocomplete=bool(data.get("autocomplete", False)),
            search=bool(data.get("search", False)),
            properties={
                child: cls.from_dict(f"{name}.{child}", child_def)
                for child, child_def in (raw_properties or {}).items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为请求体格式，省略空值."""
        result: dict[str, Any] = {"type": self.type}
        if self.analyzer:
            result["analyzer"] = self.analyzer
        if self.search_analyzer:
            result["search_analyzer"] = self.search_analyzer
        if self.autocomplete:
            result["autocomplete"] = True
        if self.search:
            result["search"] = True
        if self.properties:
            result["properties"] = {
                name: child.to_dict() for name, child in self.properties.items()
            }
        return result


def parse_schema(fields: Any) -> dict[str, FieldSchema]:
    """解析请求中的 fields 映射.

    Args:
        fields: 字段名到字段定义的映射

    Returns:
        字段名到 FieldSchema 的有序字典

    Raises:
        SchemaValidationError: fields 为空或任一字段定义不合法时抛出
    """
    if not isinstance(fields, dict) or not fields:
        raise SchemaValidationError("fields must not be empty")
    return {name: FieldSchema.from_dict(name, data) for name, data in fields.items()}


class MigrationState(Enum):
    """结构迁移状态枚举."""

    RESOLVING = "resolving"
    CREATE_NEW = "create_new"
    TRY_INPLACE_UPDATE = "try_inplace_update"
    REINDEX = "reindex"
    SWAP_ALIAS = "swap_alias"
    RETIRE_OLD = "retire_old"
    DONE = "done"


class MigrationOutcome(Enum):
    """结构迁移结果类型."""

    CREATED = "created"
    UPDATED_IN_PLACE = "updated_in_place"
    REINDEXED = "reindexed"


@dataclass
class MigrationResult:
    """结构迁移结果数据类.

    Attributes:
        alias: 逻辑索引名
        physical_index: 迁移完成后别名指向的物理索引
        outcome: 结果类型
        previous_index: 迁移前的物理索引（仅重建索引时存在）
        states: 依次经过的状态
        degraded: 旧索引删除失败时为 True，此时旧索引成为孤儿索引
        warnings: 降级原因
    """

    alias: str
    physical_index: str
    outcome: MigrationOutcome
    previous_index: str | None = None
    states: list[MigrationState] = field(default_factory=list)
    degraded: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.outcome is MigrationOutcome.CREATED:
            return "index created successfully"
        if self.outcome is MigrationOutcome.UPDATED_IN_PLACE:
            return "index updated successfully"
        if self.degraded:
            return "index updated successfully (re-indexed, old index not removed)"
        return "index updated successfully (re-indexed)"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "index": self.alias,
            "physical_index": self.physical_index,
            "outcome": self.outcome.value,
        }
        if self.previous_index:
            result["previous_index"] = self.previous_index
        if self.degraded:
            result["degraded"] = True
            result["warnings"] = list(self.warnings)
        return result


@dataclass
class IndexInfo:
    """逻辑索引信息数据类.

    Attributes:
        index: 逻辑索引名（别名）
        physical_index: 当前绑定的物理索引
        fields: 从映射反推的字段定义
    """

    index: str
    physical_index: str
    fields: dict[str, FieldSchema] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "physical_index": self.physical_index,
            "fields": {name: schema.to_dict() for name, schema in self.fields.items()},
        }
