"""ES 客户端工厂异常定义模块."""

from ..exceptions import ElasticGateError


class ESClientFactoryError(ElasticGateError):
    """客户端工厂基础异常类.

    所有客户端工厂相关异常的基类，继承自 ElasticGateError。
    """

    pass


class ConnectionConfigError(ESClientFactoryError):
    """连接配置校验异常.

    当连接配置参数不合法时抛出，例如 hosts 为空、request_timeout 小于 0 等。
    """

    status_code = 500
