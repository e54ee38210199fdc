"""ElasticGate - Elasticsearch 逻辑索引网关.

以稳定的逻辑索引名（别名）屏蔽带时间戳后缀的物理索引，
在字段映射不兼容时在线重建索引并原子切换别名，
并提供基于 scroll 的全量导出与 bulk 导入。

主要功能:
    - IndexManager: 逻辑索引创建、更新（含重建）、删除与信息查询
    - BulkTransferTool: 全量导出与批量导入
    - DocumentGateway: 文档增删改查、搜索与补全
    - create_app: HTTP 服务

使用示例:
    from elasticgate import IndexManager

    manager = IndexManager(es_client)
    manager.create_index("products", {"name": {"type": "text", "search": True}})
"""

__version__ = "0.1.0"

from elasticgate.bulk import BulkTransferTool
from elasticgate.connection import ClusterConfig, ConnectionConfig, ESClientFactory
from elasticgate.documents import DocumentGateway
from elasticgate.exceptions import ElasticGateError, ErrorType, from_engine_error
from elasticgate.index_manager import (
    AliasResolver,
    IndexManager,
    IndexProvisioner,
    SchemaMigrationCoordinator,
)

__all__ = [
    # 版本
    "__version__",
    # 核心组件
    "IndexManager",
    "AliasResolver",
    "IndexProvisioner",
    "SchemaMigrationCoordinator",
    "BulkTransferTool",
    "DocumentGateway",
    # 连接
    "ESClientFactory",
    "ClusterConfig",
    "ConnectionConfig",
    # 异常
    "ElasticGateError",
    "ErrorType",
    "from_engine_error",
]
