"""
ElasticGate 命令行入口.

Usage:
    elasticgate --config config.yaml
    elasticgate --config config.yaml --port 9000
    elasticgate --config config.yaml --check
"""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from .api import create_app
from .config import load_settings
from .connection import ESClientFactory
from .exceptions import ElasticGateError
from .log import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elasticgate",
        description="ElasticGate - simplified HTTP interface over Elasticsearch",
    )
    parser.add_argument("--config", help="YAML config file (default: $ELASTICGATE_CONFIG or config.yaml)")
    parser.add_argument("--host", help="Override server.host")
    parser.add_argument("--port", type=int, help="Override server.port")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify the cluster connection and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ValidationError as e:
        print(f"invalid configuration:\n{e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    es_settings = settings.elastic_search
    factory = ESClientFactory(es_settings.cluster_config(), es_settings.connection_config())
    try:
        factory.verify()
    except ElasticGateError as e:
        logger.error(f"启动失败: {e}")
        factory.close()
        return 1

    if args.check:
        factory.close()
        return 0

    app = create_app(settings, client=factory.get_client())
    host = args.host or settings.server.host
    port = args.port or settings.server.port
    logger.info(f"服务启动于 {host}:{port}")
    try:
        uvicorn.run(app, host=host, port=port, log_config=None)
    finally:
        factory.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
