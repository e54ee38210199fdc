"""别名解析器单元测试."""

import unittest
from unittest.mock import MagicMock

from elasticsearch import ConnectionError, NotFoundError

from elasticgate.exceptions import ConnectionFailedError
from elasticgate.index_manager import AliasNotFoundError, AliasResolver
from fakes import api_error


class TestAliasResolver(unittest.TestCase):
    """AliasResolver 类单元测试."""

    def setUp(self):
        """设置测试环境."""
        self.es_client = MagicMock()
        self.resolver = AliasResolver(self.es_client)

    def test_resolve_single_index(self):
        """测试解析到唯一物理索引."""
        self.es_client.indices.get_alias.return_value = {
            "products_20240101120000": {"aliases": {"products": {}}}
        }
        self.assertEqual(self.resolver.resolve("products"), "products_20240101120000")
        self.es_client.indices.get_alias.assert_called_once_with(name="products")

    def test_resolve_multiple_indices_picks_latest(self):
        """测试别名指向多个索引时取最新的一个."""
        self.es_client.indices.get_alias.return_value = {
            "products_20240102000000": {"aliases": {"products": {}}},
            "products_20240101000000": {"aliases": {"products": {}}},
        }
        with self.assertLogs("elasticgate.index_manager.resolver", level="WARNING"):
            self.assertEqual(self.resolver.resolve("products"), "products_20240102000000")

    def test_resolve_missing_alias(self):
        """测试别名不存在."""
        self.es_client.indices.get_alias.side_effect = api_error(
            NotFoundError, 404, body={"error": "alias [products] missing", "status": 404}
        )
        with self.assertRaises(AliasNotFoundError) as ctx:
            self.resolver.resolve("products")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.message, "alias not found")
        self.assertIsNone(self.resolver.try_resolve("products"))
        self.assertFalse(self.resolver.exists("products"))

    def test_resolve_connection_failure(self):
        """测试集群不可达."""
        self.es_client.indices.get_alias.side_effect = ConnectionError("refused")
        with self.assertRaises(ConnectionFailedError):
            self.resolver.resolve("products")

    def test_no_caching(self):
        """测试每次解析都查询集群."""
        self.es_client.indices.get_alias.side_effect = [
            {"products_1": {"aliases": {"products": {}}}},
            {"products_2": {"aliases": {"products": {}}}},
        ]
        self.assertEqual(self.resolver.resolve("products"), "products_1")
        self.assertEqual(self.resolver.resolve("products"), "products_2")

    def test_pattern_names_are_not_sent_to_cluster(self):
        """测试通配符、逗号列表与 _all 不会匹配其他别名."""
        self.es_client.indices.get_alias.return_value = {
            "orders_20240101000000": {"aliases": {"orders": {}}}
        }
        for name in ("*", "ord*", "_all", "orders,products", "Orders"):
            with self.subTest(name=name):
                self.assertIsNone(self.resolver.try_resolve(name))
                self.assertFalse(self.resolver.exists(name))
                with self.assertRaises(AliasNotFoundError):
                    self.resolver.resolve(name)
        self.es_client.indices.get_alias.assert_not_called()

    def test_ignores_indices_bound_to_other_aliases(self):
        """测试只保留绑定了该别名的索引."""
        self.es_client.indices.get_alias.return_value = {
            "orders_20240101000000": {"aliases": {"orders": {}}},
            "products_20240101000000": {"aliases": {"products": {}}},
        }
        self.assertEqual(self.resolver.resolve("products"), "products_20240101000000")

    def test_no_matching_binding(self):
        """测试响应中没有绑定该别名的索引."""
        self.es_client.indices.get_alias.return_value = {
            "orders_20240101000000": {"aliases": {"orders": {}}}
        }
        self.assertIsNone(self.resolver.try_resolve("products"))


if __name__ == "__main__":
    unittest.main()
