"""索引管理器模块.

该模块以逻辑索引名（别名）屏蔽物理索引，包括：
- 别名解析
- 带时间戳后缀的物理索引创建与别名绑定
- 字段映射转换
- 映射变更时的在线重建索引与别名原子切换

示例用法:
    >>> from elasticgate.index_manager import IndexManager
    >>> manager = IndexManager(es_client)
    >>> manager.create_index("products", {"name": {"type": "text", "autocomplete": True}})
    >>> manager.resolve("products")
    'products_20240101120000'
"""

from .exceptions import (
    AliasNotFoundError,
    IndexAlreadyExistsError,
    IndexManagerError,
    SchemaValidationError,
)
from .mapping import ANALYSIS_SETTINGS, build_index_body, build_properties, parse_properties
from .migration import NamedLockRegistry, SchemaMigrationCoordinator
from .models import (
    FieldSchema,
    IndexInfo,
    MigrationOutcome,
    MigrationResult,
    MigrationState,
    parse_schema,
)
from .provisioner import IndexProvisioner
from .resolver import AliasResolver, validate_index_name
from .tool import IndexManager

__all__ = [
    # 核心类
    "IndexManager",
    "AliasResolver",
    "IndexProvisioner",
    "SchemaMigrationCoordinator",
    "NamedLockRegistry",
    # 数据模型
    "FieldSchema",
    "IndexInfo",
    "MigrationOutcome",
    "MigrationResult",
    "MigrationState",
    "parse_schema",
    # 映射转换
    "ANALYSIS_SETTINGS",
    "build_index_body",
    "build_properties",
    "parse_properties",
    "validate_index_name",
    # 异常类
    "IndexManagerError",
    "AliasNotFoundError",
    "IndexAlreadyExistsError",
    "SchemaValidationError",
]
