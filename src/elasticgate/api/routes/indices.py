"""逻辑索引路由."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..deps import Services, get_services
from ..responses import success
from ..schemas import CreateIndexRequest, UpdateIndexRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/indices", tags=["indices"])


@router.post("/")
def create_index(body: CreateIndexRequest, services: Services = Depends(get_services)):
    services.indices.create_index(body.index, body.fields)
    return success("index created successfully", data={"index": body.index}, code=201)


@router.get("/")
def list_indices(services: Services = Depends(get_services)):
    return success("indices retrieved successfully", data=services.indices.list_indices())


@router.put("/{alias}")
def update_index(alias: str, body: UpdateIndexRequest, services: Services = Depends(get_services)):
    result = services.indices.update_index(alias, body.fields)
    if result.degraded:
        logger.warning(f"索引 '{alias}' 更新完成但旧索引未删除: {result.warnings}")
    return success(result.message, data=result.to_dict())


@router.delete("/{alias}")
def delete_index(alias: str, services: Services = Depends(get_services)):
    services.indices.delete_index(alias)
    return success("index deleted successfully")


@router.get("/{alias}/info")
def get_index(alias: str, services: Services = Depends(get_services)):
    info = services.indices.get_index(alias)
    return success("index info retrieved successfully", data=info.to_dict())


@router.get("/{alias}/exists")
def index_exists(alias: str, services: Services = Depends(get_services)):
    exists = services.indices.index_exists(alias)
    return success("index exists" if exists else "index does not exist", data={"exists": exists})
