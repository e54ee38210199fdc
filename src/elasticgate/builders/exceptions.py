"""查询构建异常定义模块."""

from ..exceptions import ElasticGateError, ErrorType


class QueryBuildError(ElasticGateError):
    """查询参数无法构建为合法的查询."""

    status_code = 400
    error_type = ErrorType.BAD_REQUEST
