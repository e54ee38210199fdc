"""文档操作异常定义模块."""

from ..exceptions import ElasticGateError, ErrorType


class DocumentError(ElasticGateError):
    """文档操作基础异常类."""

    pass


class DocumentNotFoundError(DocumentError):
    """文档不存在异常."""

    status_code = 404
    error_type = ErrorType.NOT_FOUND


class DocumentValidationError(DocumentError):
    """文档请求参数不合法."""

    status_code = 400
    error_type = ErrorType.BAD_REQUEST
