"""构建器模块导出."""

from elasticgate.builders.exceptions import QueryBuildError
from elasticgate.builders.search import (
    DEFAULT_SEARCH_FIELDS,
    SUGGEST_NAME,
    SearchBodyBuilder,
    build_suggest_body,
)

__all__ = [
    "SearchBodyBuilder",
    "build_suggest_body",
    "DEFAULT_SEARCH_FIELDS",
    "SUGGEST_NAME",
    "QueryBuildError",
]
