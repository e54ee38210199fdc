"""ES 客户端工厂工具模块.

提供 ESClientFactory 类，用于统一管理 Elasticsearch 客户端的创建、
连接配置、生命周期管理和健康检查。整个进程共享一个客户端，
其内部连接池可安全地被并发请求使用。

使用示例:
    from elasticgate.connection import ESClientFactory, ClusterConfig

    with ESClientFactory(ClusterConfig(hosts=["http://localhost:9200"])) as factory:
        factory.verify()
        client = factory.get_client()
"""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import Elasticsearch

from ..exceptions import ConnectionFailedError
from .exceptions import ConnectionConfigError
from .models import ClusterConfig, ConnectionConfig

logger = logging.getLogger(__name__)


class ESClientFactory:
    """Elasticsearch 客户端工厂.

    惰性创建并缓存唯一的客户端实例，支持多种认证方式、
    启动校验、健康检查和上下文管理器。

    Attributes:
        _cluster: 集群配置
        _connection_config: 连接配置
        _client: 已缓存的客户端

    Examples:
        >>> factory = ESClientFactory(ClusterConfig(hosts=["http://localhost:9200"]))
        >>> client = factory.get_client()
    """

    def __init__(
        self,
        cluster: ClusterConfig | None = None,
        connection_config: ConnectionConfig | None = None,
        client: Elasticsearch | None = None,
    ) -> None:
        """初始化客户端工厂.

        Args:
            cluster: 集群配置
            connection_config: 连接配置，默认使用 ConnectionConfig 的默认值
            client: 已创建的客户端，提供时直接复用，工厂不负责关闭

        Raises:
            ConnectionConfigError: cluster 与 client 均未提供时抛出
        """
        if cluster is None and client is None:
            raise ConnectionConfigError("cluster 与 client 不能同时为空")
        self._cluster = cluster
        self._connection_config = connection_config or ConnectionConfig()
        self._client: Elasticsearch | None = client
        self._owns_client = client is None

    def _create_client(self) -> Elasticsearch:
        """根据集群配置创建 Elasticsearch 客户端实例.

        根据认证方式（Basic Auth / API Key / Bearer Token / 无认证）
        和 SSL 配置构建客户端。

        Returns:
            Elasticsearch 客户端实例
        """
        cluster = self._cluster
        kwargs: dict = {
            "hosts": cluster.hosts,
            "max_retries": self._connection_config.max_retries,
            "retry_on_timeout": self._connection_config.retry_on_timeout,
            "request_timeout": self._connection_config.request_timeout,
            "http_compress": self._connection_config.http_compress,
        }

        # Basic Auth 认证
        if cluster.username and cluster.password:
            kwargs["basic_auth"] = (cluster.username, cluster.password)

        # API Key 认证
        if cluster.api_key:
            kwargs["api_key"] = cluster.api_key

        # SSL/TLS 配置
        if cluster.ca_certs:
            kwargs["ca_certs"] = cluster.ca_certs
        kwargs["verify_certs"] = cluster.verify_certs

        return Elasticsearch(**kwargs)

    def get_client(self) -> Elasticsearch:
        """获取客户端，首次调用时创建并缓存.

        Returns:
            Elasticsearch 客户端实例
        """
        if self._client is None:
            self._client = self._create_client()
            self._owns_client = True
        return self._client

    def verify(self) -> dict[str, Any]:
        """启动时校验集群可达.

        Returns:
            集群 info() 返回的信息

        Raises:
            ConnectionFailedError: 集群不可达时抛出
        """
        try:
            info = self.get_client().info()
        except Exception as e:
            logger.error(f"连接 Elasticsearch 失败: {e}")
            raise ConnectionFailedError(
                "failed to connect to elastic server", details=str(e)
            ) from e
        info = getattr(info, "body", info)
        version = info.get("version", {}).get("number", "unknown")
        logger.info(f"已连接 Elasticsearch 集群 {info.get('cluster_name')}，版本 {version}")
        return info

    # ============================================================
    # 生命周期管理
    # ============================================================

    def __enter__(self) -> ESClientFactory:
        """上下文管理器入口.

        Returns:
            工厂实例自身
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """上下文管理器退出，自动关闭客户端."""
        self.close()

    def close(self) -> None:
        """关闭已创建的客户端连接并清空缓存.

        关闭后可重新调用 get_client() 创建新的客户端。外部传入的客户端不会被关闭。
        """
        if self._client is None or not self._owns_client:
            return
        try:
            self._client.close()
        except Exception as e:
            logger.warning(f"关闭 Elasticsearch 客户端失败: {e}")
        self._client = None

    # ============================================================
    # 健康检查
    # ============================================================

    def health_check(self) -> dict[str, Any]:
        """检查集群健康状态.

        集群不可达时 status 为 "unreachable"，不抛出异常。

        Returns:
            包含 cluster_name、status、number_of_nodes 的健康信息字典
        """
        try:
            health = self.get_client().cluster.health()
        except Exception as e:
            logger.warning(f"集群健康检查失败: {e}")
            return {
                "cluster_name": "unknown",
                "status": "unreachable",
                "number_of_nodes": 0,
                "error": str(e),
            }
        health = getattr(health, "body", health)
        return {
            "cluster_name": health.get("cluster_name", "unknown"),
            "status": health.get("status", "unknown"),
            "number_of_nodes": health.get("number_of_nodes", 0),
        }
