"""请求体模型."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CreateIndexRequest(BaseModel):
    index: str = Field(min_length=1)
    fields: dict[str, Any]


class UpdateIndexRequest(BaseModel):
    fields: dict[str, Any]


class AddDocumentsRequest(BaseModel):
    data: list[Any]


class UpdateDocumentRequest(BaseModel):
    data: dict[str, Any]


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: int = Field(default=0, alias="from", ge=0)
    size: int = Field(default=0, ge=0)


class SearchRequest(BaseModel):
    query: str | None = None
    filters: dict[str, Any] = Field(default_factory=dict)
    match_all: bool = False
    pagination: Pagination = Field(default_factory=Pagination)
    min_score: float = 0.0
    search_fields: list[str] = Field(default_factory=list)


class SuggestRequest(BaseModel):
    field: str = Field(min_length=1)
    input: str = Field(min_length=1)
    size: int | None = Field(default=None, ge=1)


class ExportRequest(BaseModel):
    query: dict[str, Any] | None = None
