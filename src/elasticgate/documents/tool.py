"""文档网关.

所有操作都先通过别名解析器得到物理索引，再对集群发起一次请求，不做重试。
"""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import ApiError, Elasticsearch

from ..builders import SUGGEST_NAME, SearchBodyBuilder, build_suggest_body
from ..bulk.models import BulkRecord, BulkResult
from ..bulk.tool import BulkTransferTool
from ..exceptions import from_engine_error
from ..index_manager.resolver import AliasResolver
from ..parsers import PagedResponse, ResponseParser, SearchResult
from .exceptions import DocumentNotFoundError, DocumentValidationError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 10000


def _has_structured_error(e: ApiError) -> bool:
    return isinstance(e.body, dict) and isinstance(e.body.get("error"), dict)


class DocumentGateway:
    """文档网关.

    Attributes:
        es_client: Elasticsearch 客户端
        resolver: 别名解析器
        bulk_tool: 批量写入工具，用于添加文档
        parser: 响应解析器

    Examples:
        >>> gateway = DocumentGateway(es_client, resolver, bulk_tool)
        >>> gateway.get("products", "1")
        {'name': 'Product A', 'price': 10.0}
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        resolver: AliasResolver,
        bulk_tool: BulkTransferTool,
        parser: ResponseParser | None = None,
    ):
        self.es_client = es_client
        self.resolver = resolver
        self.bulk_tool = bulk_tool
        self.parser = parser or ResponseParser()

    # ========== 单文档操作 ==========

    def get(self, alias: str, doc_id: str) -> dict[str, Any]:
        """获取文档源数据.

        Raises:
            AliasNotFoundError: 逻辑索引不存在
            DocumentNotFoundError: 文档不存在
        """
        index = self.resolver.resolve(alias)
        try:
            response = self.es_client.get(index=index, id=doc_id)
        except ApiError as e:
            if e.meta.status == 404 and not _has_structured_error(e):
                raise DocumentNotFoundError(
                    "document not found", details=f"document [{doc_id}] missing"
                ) from e
            raise from_engine_error(e, "failed to fetch document") from e
        except Exception as e:
            raise from_engine_error(e, "failed to fetch document") from e

        response = getattr(response, "body", response)
        if not response.get("found", False):
            raise DocumentNotFoundError(
                "document not found", details=f"document [{doc_id}] missing"
            )
        return response.get("_source", {})

    def update(
        self, alias: str, doc_id: str, data: dict[str, Any], refresh: bool = False
    ) -> None:
        """局部更新文档，data 与原文档合并.

        Raises:
            DocumentValidationError: data 为空
            AliasNotFoundError: 逻辑索引不存在
        """
        if not isinstance(data, dict) or not data:
            raise DocumentValidationError("data must be a non-empty object")

        index = self.resolver.resolve(alias)
        kwargs: dict[str, Any] = {"index": index, "id": doc_id, "doc": data}
        if refresh:
            kwargs["refresh"] = True
        try:
            self.es_client.update(**kwargs)
        except Exception as e:
            logger.error(f"更新文档 '{doc_id}' 失败: {e}")
            raise from_engine_error(e, "failed to update document") from e
        logger.info(f"文档 '{doc_id}' 已更新（索引 '{index}'）")

    def delete(self, alias: str, doc_id: str, refresh: bool = False) -> None:
        """删除文档.

        Raises:
            AliasNotFoundError: 逻辑索引不存在
            DocumentNotFoundError: 文档不存在
        """
        index = self.resolver.resolve(alias)
        kwargs: dict[str, Any] = {"index": index, "id": doc_id}
        if refresh:
            kwargs["refresh"] = True
        try:
            self.es_client.delete(**kwargs)
        except ApiError as e:
            if e.meta.status == 404 and not _has_structured_error(e):
                raise DocumentNotFoundError(
                    "document not found", details=f"document [{doc_id}] missing"
                ) from e
            raise from_engine_error(e, "failed to delete document") from e
        except Exception as e:
            raise from_engine_error(e, "failed to delete document") from e
        logger.info(f"文档 '{doc_id}' 已删除（索引 '{index}'）")

    # ========== 批量与查询 ==========

    def add(
        self, alias: str, documents: list[dict[str, Any]], refresh: bool = False
    ) -> BulkResult:
        """以单个 bulk 请求添加文档.

        Raises:
            DocumentValidationError: documents 为空或包含非对象元素
            BulkWriteError: 部分文档写入失败
        """
        if not isinstance(documents, list) or not documents:
            raise DocumentValidationError("data must be a non-empty array of documents")
        if not all(isinstance(doc, dict) for doc in documents):
            raise DocumentValidationError("every document must be a JSON object")

        index = self.resolver.resolve(alias)
        records = [BulkRecord(source=doc) for doc in documents]
        return self.bulk_tool.write_records(index, records, refresh=refresh)

    def search(self, alias: str, builder: SearchBodyBuilder) -> SearchResult:
        """执行搜索.

        Raises:
            QueryBuildError: 未提供任何查询条件
            AliasNotFoundError: 逻辑索引不存在
        """
        body = builder.build()
        index = self.resolver.resolve(alias)
        params = dict(body)
        if "from" in params:
            params["from_"] = params.pop("from")
        try:
            response = self.es_client.search(index=index, **params)
        except Exception as e:
            logger.error(f"搜索索引 '{index}' 失败: {e}")
            raise from_engine_error(e, "failed to search") from e
        return self.parser.parse_search(response)

    def suggest(self, alias: str, field: str, text: str, size: int | None = None) -> list[str]:
        """基于 completion 子字段返回补全建议."""
        body = build_suggest_body(field, text, size=size)
        index = self.resolver.resolve(alias)
        try:
            response = self.es_client.search(index=index, suggest=body["suggest"], source=False)
        except Exception as e:
            logger.error(f"获取补全建议失败: {e}")
            raise from_engine_error(e, "failed to fetch suggestions") from e
        return [item.text for item in self.parser.parse_suggestions(response, SUGGEST_NAME)]

    def list_documents(self, alias: str, page: int = 1, size: int = 10) -> PagedResponse:
        """分页列出文档.

        Raises:
            DocumentValidationError: page < 1 或 size 不在 1..10000 范围内
        """
        if page < 1:
            raise DocumentValidationError("page must be greater than or equal to 1")
        if size < 1 or size > MAX_PAGE_SIZE:
            raise DocumentValidationError(f"size must be between 1 and {MAX_PAGE_SIZE}")

        index = self.resolver.resolve(alias)
        try:
            response = self.es_client.search(
                index=index,
                query={"match_all": {}},
                from_=(page - 1) * size,
                size=size,
                track_total_hits=True,
            )
        except Exception as e:
            raise from_engine_error(e, "failed to list documents") from e
        return self.parser.parse_paged(response, page=page, page_size=size)
