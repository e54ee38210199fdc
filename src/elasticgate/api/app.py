"""FastAPI 应用工厂."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from elasticsearch import Elasticsearch
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..bulk import BulkTransferTool
from ..config import Settings
from ..connection import ESClientFactory
from ..documents import DocumentGateway
from ..exceptions import ElasticGateError, ErrorType
from ..index_manager import IndexManager
from .auth import require_token
from .deps import Services, get_services
from .middleware import request_id_middleware
from .responses import error, error_from_exception, success
from .routes import documents_router, indices_router

logger = logging.getLogger(__name__)

_HTTP_ERROR_TYPES = {
    401: ErrorType.UNAUTHORIZED,
    404: ErrorType.NOT_FOUND,
}


def build_services(settings: Settings, client: Elasticsearch | None = None) -> Services:
    """创建进程内共享的服务对象."""
    es_settings = settings.elastic_search
    if client is None:
        factory = ESClientFactory(es_settings.cluster_config(), es_settings.connection_config())
    else:
        factory = ESClientFactory(client=client)
    es_client = factory.get_client()

    indices = IndexManager(
        es_client,
        serialize=settings.migration.serialize,
        reindex_timeout=settings.migration.reindex_timeout,
    )
    bulk = BulkTransferTool(
        es_client,
        indices.resolver,
        scroll_time=settings.export.scroll_time,
        max_iterations=settings.export.max_iterations,
        page_size=settings.export.page_size,
        deadline_seconds=settings.export.deadline_seconds,
    )
    documents = DocumentGateway(es_client, indices.resolver, bulk)
    return Services(
        settings=settings,
        factory=factory,
        indices=indices,
        bulk=bulk,
        documents=documents,
    )


def _install_exception_handlers(app: FastAPI, detail_error: bool) -> None:
    @app.exception_handler(ElasticGateError)
    async def _handle_gate_error(request: Request, exc: ElasticGateError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} 失败: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} 被拒绝: {exc}")
        return error_from_exception(exc, detail_error=detail_error)

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError):
        return error(
            400,
            "invalid request",
            ErrorType.BAD_REQUEST.value,
            details=str(exc.errors()),
            detail_error=detail_error,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_error(request: Request, exc: StarletteHTTPException):
        error_type = _HTTP_ERROR_TYPES.get(exc.status_code)
        if error_type is None:
            error_type = ErrorType.BAD_REQUEST if exc.status_code < 500 else ErrorType.SERVER_ERROR
        return error(
            exc.status_code,
            str(exc.detail),
            error_type.value,
            details=str(exc.detail),
            detail_error=detail_error,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} 未处理的异常")
        return error(
            500,
            "internal server error",
            ErrorType.SERVER_ERROR.value,
            details=str(exc),
            detail_error=detail_error,
        )


def create_app(settings: Settings, client: Elasticsearch | None = None) -> FastAPI:
    """创建应用.

    Args:
        settings: 服务配置
        client: 已创建的 Elasticsearch 客户端，默认按配置创建

    Returns:
        FastAPI 应用
    """
    services = build_services(settings, client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        services.factory.close()

    app = FastAPI(title="ElasticGate", lifespan=lifespan)
    app.state.settings = settings
    app.state.services = services

    app.middleware("http")(request_id_middleware)

    cors = settings.server.cors
    if cors.enable:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors.origins,
            allow_methods=cors.methods or ["*"],
            allow_headers=cors.headers or ["*"],
            allow_credentials=cors.credentials,
        )

    _install_exception_handlers(app, settings.detail_error)

    base_path = settings.server.base_path
    prefix = base_path.rstrip("/")

    @app.get(base_path)
    def greeting():
        return success("Hello, World!")

    @app.get(f"{prefix}/health")
    def health(services: Services = Depends(get_services)):
        return success("cluster health retrieved", data=services.factory.health_check())

    protected = [Depends(require_token)]
    app.include_router(indices_router, prefix=prefix, dependencies=protected)
    app.include_router(documents_router, prefix=prefix, dependencies=protected)

    logger.info(f"应用已创建，路由前缀 '{base_path}'")
    return app
