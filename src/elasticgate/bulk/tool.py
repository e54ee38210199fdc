"""批量传输核心工具类.

导出使用 scroll 游标分页读取全部文档，受最大迭代次数与调用方截止时间约束；
导入先在本地完成格式校验，再以单个 bulk 请求写入集群。
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from elasticsearch import Elasticsearch

from ..exceptions import from_engine_error
from ..index_manager.resolver import AliasResolver
from .exceptions import BulkWriteError
from .models import BulkRecord, BulkResult, ExportResult, ExportStopReason
from .parser import parse_bulk_stream, parse_document_array

logger = logging.getLogger(__name__)


def _hits_total(response: dict[str, Any]) -> int:
    total = response.get("hits", {}).get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total or 0)


def render_bulk_stream(records: Iterable[BulkRecord], alias: str) -> str:
    """将导出结果渲染为 bulk 动作流（NDJSON）.

    每个文档前是一行 ``{"index": {"_index": alias, "_id": ...}}`` 元数据。
    """
    lines: list[str] = []
    for record in records:
        action: dict[str, Any] = {"_index": alias}
        if record.doc_id is not None:
            action["_id"] = record.doc_id
        lines.append(json.dumps({"index": action}, ensure_ascii=False))
        lines.append(json.dumps(record.source, ensure_ascii=False))
    return "\n".join(lines) + "\n" if lines else ""


def render_document_array(records: Iterable[BulkRecord]) -> str:
    """将导出结果渲染为文档数组."""
    return json.dumps([record.source for record in records], ensure_ascii=False)


class BulkTransferTool:
    """批量传输工具类.

    Args:
        es_client: Elasticsearch 客户端实例
        resolver: 别名解析器
        scroll_time: scroll 游标存活时间，默认 2m
        max_iterations: 最大读取页数（含首页），默认 100
        page_size: 每页文档数，默认 1000
        deadline_seconds: 默认导出截止时间（秒），None 表示不限制
        clock: 单调时钟，用于截止时间判断
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        resolver: AliasResolver,
        scroll_time: str = "2m",
        max_iterations: int = 100,
        page_size: int = 1000,
        deadline_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_iterations < 1:
            raise ValueError(f"max_iterations 必须 >= 1，当前值: {max_iterations}")
        if page_size < 1:
            raise ValueError(f"page_size 必须 >= 1，当前值: {page_size}")

        self.es_client = es_client
        self.resolver = resolver
        self.scroll_time = scroll_time
        self.max_iterations = max_iterations
        self.page_size = page_size
        self.deadline_seconds = deadline_seconds
        self.clock = clock
        logger.info(
            f"初始化批量传输工具: scroll_time={scroll_time}, "
            f"max_iterations={max_iterations}, page_size={page_size}"
        )

    # ========== 导出 ==========

    def export(
        self,
        alias: str,
        query: dict[str, Any] | None = None,
        deadline: float | None = None,
    ) -> ExportResult:
        """导出逻辑索引中匹配查询的全部文档.

        首页已包含全部命中时不再发起 scroll 请求；否则逐页读取，直到读完、
        遇到空页、没有游标、达到最大页数或超过截止时间。
        游标在结束时总会被释放，释放失败只记录日志。

        Args:
            alias: 逻辑索引名
            query: 过滤查询，默认 match_all
            deadline: 截止时间（秒），默认使用 deadline_seconds

        Returns:
            ExportResult，达到最大页数、超过截止时间或未读满命中总数时 truncated 为 True

        Raises:
            AliasNotFoundError: 逻辑索引不存在
            ElasticGateError: 查询或翻页失败
        """
        index = self.resolver.resolve(alias)
        deadline = deadline if deadline is not None else self.deadline_seconds
        started = self.clock()

        try:
            response = self.es_client.search(
                index=index,
                query=query or {"match_all": {}},
                size=self.page_size,
                scroll=self.scroll_time,
                track_total_hits=True,
            )
        except Exception as e:
            logger.error(f"导出索引 '{index}' 失败: {e}")
            raise from_engine_error(e, "failed to export documents") from e

        response = getattr(response, "body", response)
        result = ExportResult(total=_hits_total(response), pages=1)
        self._collect(result, response, alias)
        scroll_id = response.get("_scroll_id")

        try:
            if len(result) < result.total:
                scroll_id = self._scroll_pages(result, scroll_id, alias, started, deadline)
        finally:
            self._release(scroll_id)

        if not result.truncated and len(result) < result.total:
            # 空页或游标丢失导致提前结束
            result.truncated = True
            result.reason = ExportStopReason.INCOMPLETE
            logger.warning(f"导出提前结束，仅读取 {len(result)}/{result.total} 条文档")

        logger.info(
            f"导出索引 '{index}' 完成: {len(result)}/{result.total} 条文档，"
            f"{result.pages} 页，truncated={result.truncated}"
        )
        return result

    def _scroll_pages(
        self,
        result: ExportResult,
        scroll_id: str | None,
        alias: str,
        started: float,
        deadline: float | None,
    ) -> str | None:
        while scroll_id:
            if result.pages >= self.max_iterations:
                result.truncated = True
                result.reason = ExportStopReason.CEILING
                logger.warning(f"导出达到最大页数 {self.max_iterations}，返回部分结果")
                break
            if deadline is not None and self.clock() - started >= deadline:
                result.truncated = True
                result.reason = ExportStopReason.DEADLINE
                logger.warning(f"导出超过截止时间 {deadline}s，返回部分结果")
                break

            try:
                response = self.es_client.scroll(scroll_id=scroll_id, scroll=self.scroll_time)
            except Exception as e:
                logger.error(f"scroll 翻页失败: {e}")
                raise from_engine_error(e, "failed to fetch documents") from e

            response = getattr(response, "body", response)
            scroll_id = response.get("_scroll_id") or scroll_id
            if not self._collect(result, response, alias):
                break
            result.pages += 1
            if len(result) >= result.total:
                break
        return scroll_id

    @staticmethod
    def _collect(result: ExportResult, response: dict[str, Any], alias: str) -> int:
        hits = response.get("hits", {}).get("hits", [])
        for hit in hits:
            result.records.append(
                BulkRecord(source=hit.get("_source", {}), doc_id=hit.get("_id"), index_name=alias)
            )
        return len(hits)

    def _release(self, scroll_id: str | None) -> None:
        if not scroll_id:
            return
        try:
            self.es_client.clear_scroll(scroll_id=scroll_id)
            logger.debug("scroll 游标已释放")
        except Exception as e:
            logger.warning(f"释放 scroll 游标失败: {e}")

    # ========== 导入 ==========

    def import_documents(
        self,
        alias: str,
        payload: str,
        bulk: bool = False,
        refresh: bool = False,
    ) -> BulkResult:
        """将文档导入逻辑索引.

        Args:
            alias: 目标逻辑索引名
            payload: 文档数组 JSON 或 bulk 动作流
            bulk: payload 是否为 bulk 动作流
            refresh: 写入后是否立即刷新

        Returns:
            BulkResult

        Raises:
            BulkValidationError: 内容格式不合法，未发送写请求
            AliasNotFoundError: 逻辑索引不存在
            BulkWriteError: 集群报告部分文档写入失败
        """
        records = parse_bulk_stream(payload) if bulk else parse_document_array(payload)
        index = self.resolver.resolve(alias)
        return self.write_records(index, records, refresh=refresh)

    def write_records(
        self,
        index: str,
        records: list[BulkRecord],
        refresh: bool = False,
    ) -> BulkResult:
        """以单个 bulk 请求写入文档.

        Args:
            index: 物理索引名
            records: 待写入文档
            refresh: 写入后是否立即刷新

        Returns:
            BulkResult

        Raises:
            BulkWriteError: 响应中 errors 为 true 时抛出
        """
        operations: list[dict[str, Any]] = []
        for record in records:
            action: dict[str, Any] = {"_index": index}
            if record.doc_id is not None:
                action["_id"] = record.doc_id
            operations.append({"index": action})
            operations.append(record.source)

        kwargs: dict[str, Any] = {"operations": operations}
        if refresh:
            kwargs["refresh"] = True

        start = time.time()
        try:
            response = self.es_client.bulk(**kwargs)
        except Exception as e:
            logger.error(f"批量写入索引 '{index}' 失败: {e}")
            raise from_engine_error(e, "failed to index documents") from e

        response = getattr(response, "body", response)
        result = self._process_response(response, len(records))
        logger.info(
            f"批量写入索引 '{index}': 成功 {result.success}, 失败 {result.failed}, "
            f"集群耗时 {result.took}ms, 总耗时 {time.time() - start:.2f}s"
        )

        if response.get("errors"):
            logger.error(f"批量写入存在失败文档: {result.get_error_summary()}")
            raise BulkWriteError("failed to index some documents", result)
        return result

    @staticmethod
    def _process_response(response: dict[str, Any], total: int) -> BulkResult:
        result = BulkResult(total=total, took=response.get("took", 0))
        for item in response.get("items", []):
            op = next(iter(item.values()), {})
            error = op.get("error")
            if not error:
                result.success += 1
                continue
            result.failed += 1
            if isinstance(error, dict):
                caused_by = error.get("caused_by")
                result.add_error(
                    index_name=op.get("_index", ""),
                    doc_id=op.get("_id"),
                    error_type=error.get("type", "unknown"),
                    error_reason=error.get("reason", "unknown error"),
                    status=op.get("status", 0),
                    caused_by=(
                        f"{caused_by.get('type', '')}: {caused_by.get('reason', '')}"
                        if isinstance(caused_by, dict)
                        else None
                    ),
                )
            else:
                result.add_error(
                    index_name=op.get("_index", ""),
                    doc_id=op.get("_id"),
                    error_type="unknown",
                    error_reason=str(error),
                    status=op.get("status", 0),
                )
        return result
