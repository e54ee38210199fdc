"""索引创建器单元测试."""

import pytest
from elasticsearch import BadRequestError

from elasticgate.exceptions import ElasticGateError
from elasticgate.index_manager import (
    AliasResolver,
    FieldSchema,
    IndexAlreadyExistsError,
    IndexProvisioner,
    SchemaValidationError,
    validate_index_name,
)
from fakes import api_error

FIELDS = {"name": FieldSchema(type="text", search=True)}


@pytest.fixture
def provisioner(engine, clock):
    return IndexProvisioner(engine, AliasResolver(engine), clock=clock)


class TestValidateIndexName:
    """索引名校验测试."""

    @pytest.mark.parametrize("name", ["products", "my-index", "logs.2024", "a1_b2"])
    def test_valid_names(self, name) -> None:
        assert validate_index_name(name) is True

    @pytest.mark.parametrize(
        "name", ["", "Products", "_hidden", "-x", "+x", ".", "..", "a b", "a/b", "a*", "x" * 241]
    )
    def test_invalid_names(self, name) -> None:
        assert validate_index_name(name) is False


class TestIndexProvisioner:
    """IndexProvisioner 测试."""

    def test_physical_index_name(self, provisioner) -> None:
        """测试物理索引名带时间戳后缀."""
        assert provisioner.physical_index_name("products") == "products_20240101120000"

    def test_create_binds_alias_in_same_request(self, provisioner, engine) -> None:
        """测试创建物理索引时一并绑定别名."""
        index = provisioner.create("products", FIELDS)

        assert index == "products_20240101120000"
        create_calls = engine.called("indices.create")
        assert len(create_calls) == 1
        assert create_calls[0]["aliases"] == {"products": {}}
        assert engine.data[index].aliases == {"products"}
        assert not engine.called("indices.update_aliases")

    def test_create_existing_alias(self, provisioner, engine) -> None:
        """测试别名已存在时失败且不创建物理索引."""
        provisioner.create("products", FIELDS)
        with pytest.raises(IndexAlreadyExistsError) as exc_info:
            provisioner.create("products", FIELDS)
        assert exc_info.value.status_code == 409
        assert len(engine.data) == 1

    def test_create_invalid_name(self, provisioner, engine) -> None:
        """测试非法索引名."""
        with pytest.raises(SchemaValidationError, match="invalid index name"):
            provisioner.create("Products", FIELDS)
        assert engine.data == {}

    def test_create_engine_rejection(self, provisioner, engine) -> None:
        """测试集群拒绝建索引."""
        engine.fail(
            "indices.create",
            api_error(BadRequestError, 400, "mapper_parsing_exception", "unknown analyzer"),
        )
        with pytest.raises(ElasticGateError) as exc_info:
            provisioner.create("products", FIELDS)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "failed to create index"
        assert exc_info.value.details == "unknown analyzer"

    def test_create_unbound(self, provisioner, engine) -> None:
        """测试迁移目标索引不绑定别名."""
        index = provisioner.create_unbound("products", FIELDS)
        assert engine.data[index].aliases == set()
        assert engine.called("indices.create")[0]["aliases"] is None
