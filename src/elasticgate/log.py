"""日志配置.

所有模块使用 ``logging.getLogger(__name__)``，这里只负责安装根处理器，
并把当前请求 ID 注入到每条日志记录中。
"""

from __future__ import annotations

import logging
import logging.config
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """为日志记录附加 request_id 属性，请求之外为 "-"."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def parse_level(level: str | None) -> int:
    """将级别名转换为 logging 级别，未知级别按 info 处理."""
    return LEVELS.get((level or "").strip().lower(), logging.INFO)


def configure_logging(level: str | None = "info") -> None:
    """安装根日志处理器."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_id": {"()": RequestIdFilter}},
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["request_id"],
                }
            },
            "root": {"level": parse_level(level), "handlers": ["console"]},
        }
    )
