"""连接数据模型单元测试."""

import pytest

from elasticgate.connection.exceptions import ConnectionConfigError
from elasticgate.connection.models import ClusterConfig, ConnectionConfig


class TestClusterConfig:
    """ClusterConfig 测试."""

    def test_empty_hosts_raises_error(self) -> None:
        """测试空地址列表抛出 ConnectionConfigError."""
        with pytest.raises(ConnectionConfigError, match="hosts 不能为空"):
            ClusterConfig(hosts=[])

    def test_defaults(self) -> None:
        """测试默认值."""
        config = ClusterConfig(hosts=["http://localhost:9200"])
        assert config.username is None
        assert config.api_key is None
        assert config.verify_certs is True


class TestConnectionConfig:
    """ConnectionConfig 测试."""

    def test_defaults_disable_retries(self) -> None:
        """测试默认不重试."""
        config = ConnectionConfig()
        assert config.max_retries == 0
        assert config.retry_on_timeout is False
        assert config.request_timeout == 30

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"max_retries": -1}, "max_retries"),
            ({"request_timeout": -5}, "request_timeout"),
        ],
    )
    def test_negative_values_raise_error(self, kwargs, match) -> None:
        """测试负值抛出 ConnectionConfigError."""
        with pytest.raises(ConnectionConfigError, match=match):
            ConnectionConfig(**kwargs)
