"""文档路由."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from ...builders import SearchBodyBuilder
from ...bulk import BulkValidationError, render_bulk_stream, render_document_array
from ..deps import Services, get_services
from ..responses import success
from ..schemas import (
    AddDocumentsRequest,
    ExportRequest,
    SearchRequest,
    SuggestRequest,
    UpdateDocumentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/{alias}")
def list_documents(
    alias: str,
    page: int = Query(1),
    size: int = Query(10),
    services: Services = Depends(get_services),
):
    paged = services.documents.list_documents(alias, page=page, size=size)
    return success("documents retrieved successfully", data=paged.to_dict())


@router.post("/{alias}/add")
def add_documents(
    alias: str,
    body: AddDocumentsRequest,
    refresh: bool = Query(False),
    services: Services = Depends(get_services),
):
    result = services.documents.add(alias, body.data, refresh=refresh)
    return success("documents added successfully", data=result.to_dict(), code=201)


@router.post("/{alias}/search")
def search_documents(alias: str, body: SearchRequest, services: Services = Depends(get_services)):
    builder = (
        SearchBodyBuilder()
        .match_all(body.match_all)
        .query(body.query)
        .filters(body.filters)
        .search_fields(body.search_fields)
        .pagination(body.pagination.from_, body.pagination.size)
        .min_score(body.min_score)
    )
    result = services.documents.search(alias, builder)
    return success("search completed successfully", data=result.to_dict())


@router.post("/{alias}/suggest")
def suggest(alias: str, body: SuggestRequest, services: Services = Depends(get_services)):
    suggestions = services.documents.suggest(alias, body.field, body.input, size=body.size)
    return success("suggestions retrieved successfully", data={"suggestions": suggestions})


@router.post("/{alias}/export")
def export_documents(
    alias: str,
    body: ExportRequest | None = Body(default=None),
    bulk: bool = Query(False),
    timeout: float | None = Query(default=None, gt=0),
    services: Services = Depends(get_services),
):
    query = body.query if body else None
    result = services.bulk.export(alias, query=query, deadline=timeout)

    if bulk:
        content = render_bulk_stream(result.records, alias)
        media_type, filename = "application/x-ndjson", "export.ndjson"
    else:
        content = render_document_array(result.records)
        media_type, filename = "application/json", "export.json"

    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Export-Truncated": "true" if result.truncated else "false",
        "X-Export-Total": str(result.total),
    }
    if result.reason is not None:
        headers["X-Export-Reason"] = result.reason.value
    return Response(content=content, media_type=media_type, headers=headers)


@router.post("/{alias}/import")
def import_documents(
    alias: str,
    index: str | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    json_content: str | None = Form(default=None, alias="json"),
    bulk_form: bool | None = Form(default=None, alias="bulk"),
    bulk_query: bool = Query(default=False, alias="bulk"),
    refresh: bool = Query(False),
    services: Services = Depends(get_services),
):
    bulk = bulk_form if bulk_form is not None else bulk_query

    if file is not None:
        raw = file.file.read()
        try:
            payload = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BulkValidationError("file must be UTF-8 encoded JSON", details=str(e)) from e
    elif json_content:
        payload = json_content
    else:
        raise BulkValidationError("either file or json must be provided")

    target = index or alias
    result = services.bulk.import_documents(target, payload, bulk=bulk, refresh=refresh)
    return success("documents imported successfully", data={"index": target, **result.to_dict()})


@router.get("/{alias}/{doc_id}")
def get_document(alias: str, doc_id: str, services: Services = Depends(get_services)):
    document = services.documents.get(alias, doc_id)
    return success("document retrieved successfully", data={"document": document})


@router.put("/{alias}/{doc_id}")
def update_document(
    alias: str,
    doc_id: str,
    body: UpdateDocumentRequest,
    refresh: bool = Query(False),
    services: Services = Depends(get_services),
):
    services.documents.update(alias, doc_id, body.data, refresh=refresh)
    return success("document updated successfully")


@router.delete("/{alias}/{doc_id}")
def delete_document(
    alias: str,
    doc_id: str,
    refresh: bool = Query(False),
    services: Services = Depends(get_services),
):
    services.documents.delete(alias, doc_id, refresh=refresh)
    return success("document deleted successfully")
