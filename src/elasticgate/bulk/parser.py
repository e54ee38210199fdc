"""导入内容解析.

支持两种格式：
- 文档数组: ``[{...}, {...}]``
- bulk 动作流: 元数据行与文档行严格交替的 NDJSON

任何一处格式错误都会使整个导入失败，且不会向集群发送写请求。
"""

from __future__ import annotations

import json
from typing import Any

from .exceptions import BulkValidationError
from .models import BulkRecord


def _load_line(line: str, line_no: int, kind: str) -> Any:
    try:
        return json.loads(line)
    except json.JSONDecodeError as e:
        raise BulkValidationError(
            f"invalid JSON in {kind} line {line_no}", details=str(e)
        ) from e


def parse_bulk_stream(payload: str) -> list[BulkRecord]:
    """解析 bulk 动作流.

    每条元数据行必须是包含 ``index`` 动作的对象，紧随其后的一行必须是文档对象。
    ``index`` 动作中的 ``_id`` 会保留，``_index`` 被忽略（以导入目标为准）。

    Args:
        payload: NDJSON 文本

    Returns:
        BulkRecord 列表

    Raises:
        BulkValidationError: 行数为奇数、缺少 index 动作或 JSON 不合法时抛出
    """
    lines = [line for line in payload.splitlines() if line.strip()]
    if not lines:
        raise BulkValidationError("no documents to import")
    if len(lines) % 2 != 0:
        raise BulkValidationError(
            "invalid bulk format: metadata and document lines must come in pairs",
            details=f"got {len(lines)} non-empty lines",
        )

    records: list[BulkRecord] = []
    for i in range(0, len(lines), 2):
        meta_no, doc_no = i + 1, i + 2
        meta = _load_line(lines[i], meta_no, "metadata")
        if not isinstance(meta, dict) or "index" not in meta:
            raise BulkValidationError(
                f"invalid bulk format: metadata line {meta_no} must contain an 'index' action"
            )
        action = meta["index"] or {}
        if not isinstance(action, dict):
            raise BulkValidationError(
                f"invalid bulk format: 'index' action on line {meta_no} must be an object"
            )

        doc = _load_line(lines[i + 1], doc_no, "document")
        if not isinstance(doc, dict):
            raise BulkValidationError(
                f"invalid bulk format: document line {doc_no} must be a JSON object"
            )

        doc_id = action.get("_id")
        records.append(BulkRecord(source=doc, doc_id=str(doc_id) if doc_id is not None else None))

    return records


def parse_document_array(payload: str) -> list[BulkRecord]:
    """解析文档数组.

    Raises:
        BulkValidationError: 不是对象数组或数组为空时抛出
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise BulkValidationError("invalid JSON", details=str(e)) from e

    if not isinstance(data, list):
        raise BulkValidationError("invalid JSON format: expected an array of documents")
    if not data:
        raise BulkValidationError("no documents to import")
    for position, doc in enumerate(data):
        if not isinstance(doc, dict):
            raise BulkValidationError(
                f"invalid JSON format: element {position} is not an object"
            )
    return [BulkRecord(source=doc) for doc in data]
