"""索引管理工具模块.

IndexManager 是逻辑索引生命周期的统一入口，组合别名解析器、索引创建器
与结构迁移协调器，调用方只需使用逻辑索引名。
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from elasticsearch import Elasticsearch

from ..exceptions import from_engine_error
from .exceptions import IndexManagerError
from .mapping import parse_properties
from .migration import NamedLockRegistry, SchemaMigrationCoordinator
from .models import IndexInfo, MigrationResult, parse_schema
from .provisioner import IndexProvisioner
from .resolver import AliasResolver

logger = logging.getLogger(__name__)


class IndexManager:
    """逻辑索引管理器.

    Attributes:
        es_client: Elasticsearch 客户端
        resolver: 别名解析器
        provisioner: 索引创建器
        migrations: 结构迁移协调器

    Examples:
        >>> manager = IndexManager(es_client)
        >>> manager.create_index("products", {"name": {"type": "text", "search": True}})
        'products_20240101120000'
        >>> manager.update_index("products", {"name": {"type": "keyword"}}).outcome
        <MigrationOutcome.REINDEXED: 'reindexed'>
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        clock: Callable[[], datetime] | None = None,
        serialize: bool = True,
        reindex_timeout: float | None = None,
    ):
        """初始化索引管理器.

        Args:
            es_client: Elasticsearch 客户端实例
            clock: 当前时间来源，默认 datetime.now
            serialize: 是否对同一逻辑索引的写操作加锁串行执行
            reindex_timeout: reindex 请求超时时间（秒）

        Raises:
            ValueError: 当 es_client 为 None 时
        """
        if es_client is None:
            raise ValueError("es_client 不能为空")

        self.es_client = es_client
        self.resolver = AliasResolver(es_client)
        self.provisioner = IndexProvisioner(es_client, self.resolver, clock=clock)
        self.migrations = SchemaMigrationCoordinator(
            es_client,
            self.resolver,
            self.provisioner,
            locks=NamedLockRegistry() if serialize else None,
            reindex_timeout=reindex_timeout,
        )
        logger.info("初始化索引管理器")

    def resolve(self, alias: str) -> str:
        """解析逻辑索引名对应的物理索引."""
        return self.resolver.resolve(alias)

    def create_index(self, alias: str, fields: dict[str, Any]) -> str:
        """创建逻辑索引.

        Args:
            alias: 逻辑索引名
            fields: 字段定义（请求体格式）

        Returns:
            新建的物理索引名

        Raises:
            SchemaValidationError: 字段定义或索引名不合法
            IndexAlreadyExistsError: 逻辑索引已存在
        """
        schema = parse_schema(fields)
        with self.migrations.guard(alias):
            return self.provisioner.create(alias, schema)

    def update_index(self, alias: str, fields: dict[str, Any]) -> MigrationResult:
        """更新逻辑索引的字段定义，不存在时创建.

        Args:
            alias: 逻辑索引名
            fields: 字段定义（请求体格式）

        Returns:
            迁移结果
        """
        schema = parse_schema(fields)
        return self.migrations.update(alias, schema)

    def delete_index(self, alias: str) -> str:
        """删除逻辑索引当前绑定的物理索引.

        Args:
            alias: 逻辑索引名

        Returns:
            被删除的物理索引名

        Raises:
            AliasNotFoundError: 逻辑索引不存在
        """
        with self.migrations.guard(alias):
            index = self.resolver.resolve(alias)
            try:
                self.es_client.indices.delete(index=index)
            except Exception as e:
                logger.error(f"删除索引 '{index}' 失败: {e}")
                raise from_engine_error(e, "failed to delete index") from e
        logger.info(f"索引 '{index}' 已删除（别名 '{alias}'）")
        return index

    def index_exists(self, alias: str) -> bool:
        """判断逻辑索引是否存在."""
        return self.resolver.exists(alias)

    def get_index(self, alias: str) -> IndexInfo:
        """获取逻辑索引信息，字段定义由当前映射反推.

        Args:
            alias: 逻辑索引名

        Returns:
            IndexInfo 实例

        Raises:
            AliasNotFoundError: 逻辑索引不存在
            IndexManagerError: 映射格式无法解析
        """
        index = self.resolver.resolve(alias)
        try:
            response = self.es_client.indices.get(index=index)
        except Exception as e:
            raise from_engine_error(e, "failed to get index info") from e

        response = getattr(response, "body", response)
        index_data = response.get(index)
        if not isinstance(index_data, dict):
            raise IndexManagerError(
                "failed to parse index data",
                details=f"invalid index map format for {index}",
                error_type="parse_error",
            )

        properties = index_data.get("mappings", {}).get("properties", {})
        return IndexInfo(index=alias, physical_index=index, fields=parse_properties(properties))

    def list_indices(self) -> dict[str, str]:
        """列出所有非系统物理索引及其别名.

        Returns:
            物理索引名到别名的映射，未绑定别名的索引对应空字符串
        """
        try:
            indices = self.es_client.cat.indices(format="json")
            aliases = self.es_client.cat.aliases(format="json")
        except Exception as e:
            raise from_engine_error(e, "failed to get indices") from e

        result: dict[str, str] = {}
        for item in getattr(indices, "body", indices):
            name = item.get("index", "")
            if name and not name.startswith("."):
                result[name] = ""
        for item in getattr(aliases, "body", aliases):
            name = item.get("index", "")
            if name and not name.startswith("."):
                result[name] = item.get("alias", "")
        return result
