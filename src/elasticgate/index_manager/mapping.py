"""字段定义与 Elasticsearch 映射之间的转换.

正向转换在建索引和更新映射时使用，反向转换用于索引信息查询。
"""

from __future__ import annotations

from typing import Any

from .models import NESTED_TYPE, FieldSchema

AUTOCOMPLETE_ANALYZER = "autocomplete_analyzer"
STANDARD_ANALYZER = "standard_analyzer"

# 子字段名
RAW_SUBFIELD = "raw"
SUGGEST_SUBFIELD = "suggest"
AUTOCOMPLETE_SUBFIELD = "autocomplete"
FULLTEXT_SUBFIELD = "fulltext"

ANALYSIS_SETTINGS: dict[str, Any] = {
    "analysis": {
        "tokenizer": {
            "autocomplete_tokenizer": {
                "type": "edge_ngram",
                "min_gram": 2,
                "max_gram": 20,
                "token_chars": ["letter", "digit"],
            }
        },
        "analyzer": {
            AUTOCOMPLETE_ANALYZER: {
                "type": "custom",
                "tokenizer": "autocomplete_tokenizer",
                "filter": ["lowercase"],
            },
            STANDARD_ANALYZER: {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase"],
            },
        },
    }
}


def build_field_mapping(schema: FieldSchema) -> dict[str, Any]:
    """将单个字段定义转换为映射属性.

    text 字段开启 autocomplete 或 search 时总会附带 raw 关键字子字段；
    autocomplete 额外生成 suggest（completion）与 autocomplete（edge n-gram）子字段，
    search 额外生成 fulltext 子字段。nested 字段递归处理 properties。

    Args:
        schema: 字段定义

    Returns:
        映射属性字典
    """
    mapping: dict[str, Any] = {"type": schema.type}

    if schema.type == NESTED_TYPE:
        mapping["properties"] = build_properties(schema.properties)
        return mapping

    if schema.analyzer:
        mapping["analyzer"] = schema.analyzer
    if schema.search_analyzer:
        mapping["search_analyzer"] = schema.search_analyzer

    if schema.type == "text" and (schema.autocomplete or schema.search):
        subfields: dict[str, Any] = {RAW_SUBFIELD: {"type": "keyword"}}
        if schema.autocomplete:
            subfields[SUGGEST_SUBFIELD] = {"type": "completion"}
            subfields[AUTOCOMPLETE_SUBFIELD] = {
                "type": "text",
                "analyzer": AUTOCOMPLETE_ANALYZER,
                "search_analyzer": STANDARD_ANALYZER,
            }
        if schema.search:
            subfields[FULLTEXT_SUBFIELD] = {
                "type": "text",
                "analyzer": STANDARD_ANALYZER,
            }
        mapping["fields"] = subfields

    return mapping


def build_properties(fields: dict[str, FieldSchema]) -> dict[str, Any]:
    """将字段定义集合转换为映射 properties."""
    return {name: build_field_mapping(schema) for name, schema in fields.items()}


def build_index_body(
    fields: dict[str, FieldSchema], alias: str | None = None
) -> dict[str, Any]:
    """构建建索引请求体.

    Args:
        fields: 字段定义
        alias: 需要在创建时一并绑定的别名，None 表示不绑定

    Returns:
        包含 settings、mappings 以及可选 aliases 的请求体
    """
    body: dict[str, Any] = {
        "settings": ANALYSIS_SETTINGS,
        "mappings": {"properties": build_properties(fields)},
    }
    if alias:
        body["aliases"] = {alias: {}}
    return body


def parse_field_mapping(mapping: dict[str, Any]) -> FieldSchema:
    """将映射属性还原为字段定义."""
    properties = mapping.get("properties") or {}
    # object 类型在映射中不带 type
    field_type = mapping.get("type") or ("object" if properties else "")
    subfields = mapping.get("fields") or {}

    return FieldSchema(
        type=field_type,
        analyzer=mapping.get("analyzer"),
        search_analyzer=mapping.get("search_analyzer"),
        autocomplete=SUGGEST_SUBFIELD in subfields or AUTOCOMPLETE_SUBFIELD in subfields,
        search=FULLTEXT_SUBFIELD in subfields,
        properties=parse_properties(properties),
    )


def parse_properties(properties: dict[str, Any]) -> dict[str, FieldSchema]:
    """将映射 properties 还原为字段定义集合."""
    return {
        name: parse_field_mapping(mapping)
        for name, mapping in properties.items()
        if isinstance(mapping, dict)
    }
