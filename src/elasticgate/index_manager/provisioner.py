"""索引创建器.

创建带时间戳后缀的物理索引，并在同一个建索引请求中绑定别名。
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from elasticsearch import Elasticsearch

from ..exceptions import from_engine_error
from .exceptions import IndexAlreadyExistsError, SchemaValidationError
from .mapping import build_index_body
from .models import FieldSchema
from .resolver import AliasResolver, validate_index_name

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class IndexProvisioner:
    """物理索引创建器.

    Attributes:
        es_client: Elasticsearch 客户端
        resolver: 别名解析器
        clock: 当前时间来源，用于生成物理索引名
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        resolver: AliasResolver,
        clock: Callable[[], datetime] | None = None,
    ):
        self.es_client = es_client
        self.resolver = resolver
        self.clock = clock or datetime.now

    def physical_index_name(self, alias: str) -> str:
        """生成物理索引名: ``alias + "_" + YYYYMMDDHHMMSS``."""
        return f"{alias}_{self.clock().strftime(TIMESTAMP_FORMAT)}"

    def create(self, alias: str, fields: dict[str, FieldSchema]) -> str:
        """创建逻辑索引.

        别名已存在时失败；否则创建物理索引并在同一请求中绑定别名，
        两者要么同时存在，要么都不存在。

        Args:
            alias: 逻辑索引名
            fields: 字段定义

        Returns:
            新建的物理索引名

        Raises:
            SchemaValidationError: 索引名不合法时抛出
            IndexAlreadyExistsError: 别名已存在时抛出
        """
        if not validate_index_name(alias):
            raise SchemaValidationError(f"invalid index name '{alias}'")

        if self.resolver.try_resolve(alias) is not None:
            raise IndexAlreadyExistsError(
                "index/alias already exists", details=f"alias [{alias}] already exists"
            )

        index = self.physical_index_name(alias)
        self._create_index(index, fields, alias=alias)
        logger.info(f"索引 '{index}' 创建成功，已绑定别名 '{alias}'")
        return index

    def create_unbound(self, alias: str, fields: dict[str, FieldSchema]) -> str:
        """为迁移创建尚未绑定别名的物理索引.

        Args:
            alias: 逻辑索引名
            fields: 新的字段定义

        Returns:
            新建的物理索引名
        """
        index = self.physical_index_name(alias)
        self._create_index(index, fields)
        logger.info(f"迁移目标索引 '{index}' 创建成功")
        return index

    def _create_index(
        self, index: str, fields: dict[str, FieldSchema], alias: str | None = None
    ) -> None:
        body = build_index_body(fields, alias=alias)
        try:
            self.es_client.indices.create(index=index, **body)
        except Exception as e:
            logger.error(f"创建索引 '{index}' 失败: {e}")
            raise from_engine_error(e, "failed to create index") from e
