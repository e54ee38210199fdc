"""端到端场景测试，经由 HTTP 接口驱动内存集群."""

import json
import re

import pytest

PRODUCT_FIELDS = {
    "name": {"type": "text", "autocomplete": True, "search": True},
    "price": {"type": "float"},
}


@pytest.fixture
def products(client):
    response = client.post("/indices/", json={"index": "products", "fields": PRODUCT_FIELDS})
    assert response.status_code == 201
    return client


def _physical(app, alias):
    return app.state.services.indices.resolve(alias)


def test_create_then_resolve_and_recreate(app, products) -> None:
    """创建后别名解析为带时间戳的物理索引，重复创建返回 409."""
    assert re.fullmatch(r"products_\d{14}", _physical(app, "products"))

    response = products.post("/indices/", json={"index": "products", "fields": PRODUCT_FIELDS})
    assert response.status_code == 409


def test_unchanged_schema_keeps_binding(app, products, engine) -> None:
    """相同字段定义更新时原地完成，不触发重建."""
    before = _physical(app, "products")

    response = products.put("/indices/products", json={"fields": PRODUCT_FIELDS})

    assert response.json()["data"]["outcome"] == "updated_in_place"
    assert _physical(app, "products") == before
    assert engine.called("reindex") == []


def test_incompatible_update_preserves_documents(app, products, engine) -> None:
    """不兼容变更后别名指向新索引，原有文档仍可读取."""
    before = _physical(app, "products")
    products.post("/documents/products/add", json={"data": [{"name": "Product A", "price": 9.5}]})
    doc_id = next(iter(engine.data[before].docs))

    fields = {"name": {"type": "keyword"}, "price": {"type": "float"}}
    assert products.put("/indices/products", json={"fields": fields}).status_code == 200

    assert _physical(app, "products") != before
    response = products.get(f"/documents/products/{doc_id}")
    assert response.json()["data"]["document"] == {"name": "Product A", "price": 9.5}


def test_export_multi_page_without_duplicates(app, products) -> None:
    """多页导出得到全部文档且无重复."""
    docs = [{"name": f"item {i}", "price": float(i)} for i in range(7)]
    products.post("/documents/products/add", json={"data": docs})
    app.state.services.bulk.page_size = 3

    response = products.post("/documents/products/export", params={"bulk": "true"})
    lines = response.text.splitlines()
    ids = {json.loads(line)["index"]["_id"] for line in lines[::2]}

    assert response.headers["x-export-truncated"] == "false"
    assert len(ids) == 7


def test_export_ceiling_partial_size(app, products) -> None:
    """超过最大页数时返回 ceiling × page size 条文档."""
    products.post(
        "/documents/products/add",
        json={"data": [{"name": f"item {i}", "price": 1.0} for i in range(10)]},
    )
    bulk = app.state.services.bulk
    bulk.page_size, bulk.max_iterations = 2, 3

    response = products.post("/documents/products/export")

    assert response.status_code == 200
    assert len(json.loads(response.content)) == 6
    assert response.headers["x-export-reason"] == "ceiling"


def test_bulk_round_trip_into_new_index(app, products, engine) -> None:
    """bulk 格式导出后导入新逻辑索引，文档逐字段一致."""
    docs = [{"name": "Product A", "price": 10.0}, {"name": "Product B", "price": 20.0}]
    products.post("/documents/products/add", json={"data": docs})
    exported = products.post("/documents/products/export", params={"bulk": "true"}).text

    products.post("/indices/", json={"index": "products_copy", "fields": PRODUCT_FIELDS})
    response = products.post(
        "/documents/products_copy/import",
        data={"bulk": "true"},
        files={"file": ("export.ndjson", exported.encode("utf-8"), "application/x-ndjson")},
    )

    assert response.json()["data"]["success"] == 2
    original = engine.data[_physical(app, "products")].docs
    copied = engine.data[_physical(app, "products_copy")].docs
    assert copied == original


@pytest.mark.parametrize(
    "payload",
    [
        '{"index": {}}\n{"name": "x"}\n{"index": {}}\n',
        '{"create": {}}\n{"name": "x"}\n',
    ],
)
def test_malformed_bulk_stream_writes_nothing(products, engine, payload) -> None:
    """非法 bulk 动作流整体失败且不写入."""
    response = products.post("/documents/products/import", data={"bulk": "true", "json": payload})

    assert response.status_code == 400
    assert response.json()["type"] == "bad_request"
    assert engine.called("bulk") == []


def test_search_with_min_score(products) -> None:
    """短语匹配的文档得分更高，min_score 过滤掉另一篇."""
    products.post(
        "/documents/products/add",
        json={"data": [{"name": "Product A", "price": 10.0}, {"name": "Product B", "price": 20.0}]},
    )

    everything = products.post("/documents/products/search", json={"query": "Product A"}).json()
    scores = {doc["data"]["name"]: doc["score"] for doc in everything["data"]["documents"]}
    assert scores["Product A"] > scores["Product B"] > 0

    filtered = products.post(
        "/documents/products/search",
        json={"query": "Product A", "min_score": scores["Product B"] + 0.5},
    ).json()
    names = [doc["data"]["name"] for doc in filtered["data"]["documents"]]
    assert names == ["Product A"]
