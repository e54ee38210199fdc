"""索引管理器异常定义模块."""

from ..exceptions import ElasticGateError, ErrorType


class IndexManagerError(ElasticGateError):
    """索引管理器基础异常类."""

    pass


class AliasNotFoundError(IndexManagerError):
    """别名不存在异常."""

    status_code = 404
    error_type = ErrorType.NOT_FOUND


class IndexAlreadyExistsError(IndexManagerError):
    """索引或别名已存在异常."""

    status_code = 409
    error_type = ErrorType.RESOURCE_ALREADY_EXISTS


class SchemaValidationError(IndexManagerError):
    """字段定义校验异常."""

    status_code = 400
    error_type = ErrorType.BAD_REQUEST
