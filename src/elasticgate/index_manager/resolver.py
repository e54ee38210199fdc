"""别名解析器.

逻辑索引名（别名）到物理索引的唯一权威来源。每次解析都直接查询集群，
不做任何缓存。
"""

from __future__ import annotations

import logging

from elasticsearch import ApiError, Elasticsearch

from ..exceptions import from_engine_error
from .exceptions import AliasNotFoundError

logger = logging.getLogger(__name__)


def validate_index_name(index_name: str) -> bool:
    """验证逻辑索引名是否符合 Elasticsearch 规范.

    Args:
        index_name: 索引名称

    Returns:
        是否有效

    Note:
        Elasticsearch 索引名称限制：
        - 只能使用小写字母
        - 不能以 . 、 _ 、 - 或 + 开头
        - 不能包含 , # / \\ * ? " < > | : 空格
        - 不能是 . 或 ..
        - 长度不能超过 255 字节（需为时间戳后缀预留空间）
    """
    if not index_name or not isinstance(index_name, str):
        return False

    # 预留 "_" + 14 位时间戳
    if len(index_name.encode("utf-8")) > 255 - 15:
        return False

    if index_name[0] in "._-+":
        return False

    if index_name in (".", ".."):
        return False

    if index_name != index_name.lower():
        return False

    invalid_chars = {",", "#", "/", "\\", '"', "<", ">", "|", ":", "*", "?", " ", "\t", "\n", "\r"}
    if any(char in invalid_chars for char in index_name):
        return False

    return True


class AliasResolver:
    """别名解析器.

    Examples:
        >>> resolver = AliasResolver(es_client)
        >>> resolver.resolve("products")
        'products_20240101120000'
    """

    def __init__(self, es_client: Elasticsearch):
        self.es_client = es_client

    def try_resolve(self, alias: str) -> str | None:
        """解析别名，别名不存在时返回 None.

        Args:
            alias: 逻辑索引名

        名称不合法（含通配符、逗号或以 _ 开头）时直接返回 None，不查询集群；
        集群返回的索引只保留确实绑定了该别名的那些。

        Returns:
            物理索引名，别名不存在时为 None

        Raises:
            ElasticGateError: 集群请求失败（404 除外）时抛出
        """
        if not validate_index_name(alias):
            logger.debug(f"逻辑索引名 '{alias}' 不合法，视为不存在")
            return None

        try:
            response = self.es_client.indices.get_alias(name=alias)
        except ApiError as e:
            if e.meta.status == 404:
                return None
            raise from_engine_error(e, "failed to resolve alias") from e
        except Exception as e:
            raise from_engine_error(e, "failed to resolve alias") from e

        body = getattr(response, "body", response)
        indices = sorted(
            index
            for index, entry in body.items()
            if alias in ((entry or {}).get("aliases") or {})
        )
        if not indices:
            return None
        if len(indices) > 1:
            # 外部操作破坏了一对一绑定，取时间戳后缀最新的物理索引
            logger.warning(f"别名 '{alias}' 同时指向多个索引 {indices}，使用 '{indices[-1]}'")
        return indices[-1]

    def resolve(self, alias: str) -> str:
        """解析别名.

        Args:
            alias: 逻辑索引名

        Returns:
            物理索引名

        Raises:
            AliasNotFoundError: 别名不存在时抛出
        """
        index = self.try_resolve(alias)
        if index is None:
            raise AliasNotFoundError("alias not found", details=f"alias [{alias}] missing")
        logger.debug(f"别名 '{alias}' 解析为 '{index}'")
        return index

    def exists(self, alias: str) -> bool:
        """判断逻辑索引是否存在."""
        return self.try_resolve(alias) is not None
