"""索引管理器单元测试."""

import unittest
from unittest.mock import MagicMock

import pytest

from elasticgate.exceptions import ElasticGateError
from elasticgate.index_manager import (
    AliasNotFoundError,
    IndexManager,
    MigrationOutcome,
    SchemaValidationError,
)
from fakes import FakeClock, FakeElasticsearch

PRODUCT_FIELDS = {
    "name": {"type": "text", "autocomplete": True, "search": True},
    "price": {"type": "float"},
}


class TestIndexManager(unittest.TestCase):
    """IndexManager 类单元测试."""

    def setUp(self):
        """设置测试环境."""
        self.engine = FakeElasticsearch()
        self.manager = IndexManager(self.engine, clock=FakeClock())

    def test_initialization(self):
        """测试初始化."""
        self.assertIs(self.manager.resolver.es_client, self.engine)
        self.assertIsNotNone(self.manager.migrations.locks)

    def test_initialization_without_client(self):
        """测试 es_client 为空."""
        with self.assertRaises(ValueError):
            IndexManager(None)

    def test_create_and_resolve(self):
        """测试创建后可以通过别名解析."""
        index = self.manager.create_index("products", PRODUCT_FIELDS)
        self.assertEqual(self.manager.resolve("products"), index)
        self.assertTrue(self.manager.index_exists("products"))

    def test_create_invalid_schema_sends_nothing(self):
        """测试字段定义非法时不访问集群."""
        with self.assertRaises(SchemaValidationError):
            self.manager.create_index("products", {"name": {}})
        self.assertEqual(self.engine.calls, [])

    def test_delete_index(self):
        """测试删除逻辑索引."""
        index = self.manager.create_index("products", PRODUCT_FIELDS)
        self.assertEqual(self.manager.delete_index("products"), index)
        self.assertFalse(self.manager.index_exists("products"))
        self.assertEqual(self.engine.data, {})

    def test_delete_missing(self):
        """测试删除不存在的逻辑索引."""
        with self.assertRaises(AliasNotFoundError):
            self.manager.delete_index("products")

    def test_pattern_names_never_reach_other_indices(self):
        """测试通配符名称不会删除或更新其他逻辑索引的物理索引."""
        es_client = MagicMock()
        es_client.indices.get_alias.return_value = {
            "orders_20240101000000": {"aliases": {"orders": {}}}
        }
        manager = IndexManager(es_client)

        self.assertFalse(manager.index_exists("*"))
        with self.assertRaises(AliasNotFoundError):
            manager.delete_index("*")
        with self.assertRaises(SchemaValidationError):
            manager.update_index("ord*", {"name": {"type": "keyword"}})

        es_client.indices.delete.assert_not_called()
        es_client.indices.put_mapping.assert_not_called()
        es_client.reindex.assert_not_called()

    def test_get_index_reconstructs_fields(self):
        """测试索引信息从映射反推字段定义."""
        index = self.manager.create_index("products", PRODUCT_FIELDS)
        info = self.manager.get_index("products")
        self.assertEqual(info.physical_index, index)
        self.assertEqual(info.to_dict()["fields"], PRODUCT_FIELDS)

    def test_get_index_bad_format(self):
        """测试索引信息格式无法解析."""
        es_client = MagicMock()
        es_client.indices.get_alias.return_value = {"products_1": {"aliases": {"products": {}}}}
        es_client.indices.get.return_value = {"other": {}}
        manager = IndexManager(es_client)
        with self.assertRaises(ElasticGateError) as ctx:
            manager.get_index("products")
        self.assertEqual(ctx.exception.type_name, "parse_error")

    def test_update_then_resolve_follows_swap(self):
        """测试重建后别名解析到新索引."""
        old = self.manager.create_index("products", PRODUCT_FIELDS)
        result = self.manager.update_index("products", {"name": {"type": "keyword"}})
        self.assertEqual(result.outcome, MigrationOutcome.REINDEXED)
        self.assertNotEqual(self.manager.resolve("products"), old)
        self.assertEqual(self.manager.resolve("products"), result.physical_index)

    def test_list_indices(self):
        """测试列出索引及别名，排除系统索引."""
        index = self.manager.create_index("products", PRODUCT_FIELDS)
        self.engine.seed(".kibana_1", {})
        self.engine.seed("orphan_20230101000000", {})
        self.assertEqual(
            self.manager.list_indices(),
            {index: "products", "orphan_20230101000000": ""},
        )


@pytest.mark.parametrize("serialize", [True, False])
def test_serialize_flag(serialize) -> None:
    """测试串行化开关."""
    manager = IndexManager(FakeElasticsearch(), serialize=serialize)
    assert (manager.migrations.locks is not None) is serialize
