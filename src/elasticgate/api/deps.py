"""路由依赖：从应用状态中取出共享服务."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from ..bulk import BulkTransferTool
from ..config import Settings
from ..connection import ESClientFactory
from ..documents import DocumentGateway
from ..index_manager import IndexManager


@dataclass
class Services:
    """每个进程一份，在所有请求间共享."""

    settings: Settings
    factory: ESClientFactory
    indices: IndexManager
    bulk: BulkTransferTool
    documents: DocumentGateway


def get_services(request: Request) -> Services:
    return request.app.state.services
