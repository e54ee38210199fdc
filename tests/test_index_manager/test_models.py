"""字段定义解析单元测试."""

import pytest

from elasticgate.index_manager import (
    FieldSchema,
    MigrationOutcome,
    MigrationResult,
    SchemaValidationError,
    parse_schema,
)


class TestParseSchema:
    """parse_schema 测试."""

    def test_parse_flat_fields(self) -> None:
        """测试解析普通字段."""
        schema = parse_schema(
            {
                "name": {"type": "text", "autocomplete": True, "search": True},
                "price": {"type": "float"},
            }
        )
        assert schema["name"] == FieldSchema(type="text", autocomplete=True, search=True)
        assert schema["price"].type == "float"
        assert list(schema) == ["name", "price"]

    def test_parse_nested_fields(self) -> None:
        """测试解析 nested 字段."""
        schema = parse_schema(
            {"variants": {"type": "nested", "properties": {"sku": {"type": "keyword"}}}}
        )
        assert schema["variants"].properties["sku"].type == "keyword"

    def test_empty_fields(self) -> None:
        """测试空字段定义."""
        with pytest.raises(SchemaValidationError, match="fields must not be empty"):
            parse_schema({})

    def test_missing_type(self) -> None:
        """测试缺少 type."""
        with pytest.raises(SchemaValidationError, match="'name' is missing type"):
            parse_schema({"name": {"analyzer": "standard"}})

    def test_field_not_object(self) -> None:
        """测试字段定义不是对象."""
        with pytest.raises(SchemaValidationError, match="must be an object"):
            parse_schema({"name": "text"})

    def test_nested_without_properties(self) -> None:
        """测试 nested 字段缺少 properties."""
        with pytest.raises(SchemaValidationError, match="requires non-empty properties"):
            parse_schema({"variants": {"type": "nested"}})

    def test_properties_on_non_nested(self) -> None:
        """测试非 nested 字段带 properties."""
        with pytest.raises(SchemaValidationError, match="must not have properties"):
            parse_schema({"name": {"type": "text", "properties": {"x": {"type": "keyword"}}}})

    def test_error_in_nested_child_reports_path(self) -> None:
        """测试嵌套字段错误包含完整路径."""
        with pytest.raises(SchemaValidationError, match="'variants.sku' is missing type"):
            parse_schema({"variants": {"type": "nested", "properties": {"sku": {}}}})

    def test_to_dict_omits_defaults(self) -> None:
        """测试 to_dict 省略默认值."""
        assert FieldSchema(type="keyword").to_dict() == {"type": "keyword"}
        assert FieldSchema(type="text", search=True).to_dict() == {"type": "text", "search": True}


class TestMigrationResult:
    """MigrationResult 测试."""

    def test_messages(self) -> None:
        """测试不同结果的提示信息."""
        created = MigrationResult("a", "a_1", MigrationOutcome.CREATED)
        in_place = MigrationResult("a", "a_1", MigrationOutcome.UPDATED_IN_PLACE)
        reindexed = MigrationResult("a", "a_2", MigrationOutcome.REINDEXED, previous_index="a_1")
        assert created.message == "index created successfully"
        assert in_place.message == "index updated successfully"
        assert reindexed.message == "index updated successfully (re-indexed)"

    def test_degraded_to_dict(self) -> None:
        """测试降级结果."""
        result = MigrationResult(
            "a",
            "a_2",
            MigrationOutcome.REINDEXED,
            previous_index="a_1",
            degraded=True,
            warnings=["old index a_1 could not be removed"],
        )
        data = result.to_dict()
        assert data["degraded"] is True
        assert data["previous_index"] == "a_1"
        assert data["outcome"] == "reindexed"
        assert "old index not removed" in result.message
