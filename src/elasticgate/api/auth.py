"""Bearer JWT 认证依赖.

配置了 ``server.api_secret`` 时，请求必须携带以该密钥 HS256 签名的令牌。
"""

from __future__ import annotations

import logging

import jwt
from fastapi import Header, Request

from ..exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def verify_token(token: str, secret: str) -> dict:
    """校验令牌签名与有效期，返回载荷."""
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.PyJWTError as e:
        logger.debug(f"令牌校验失败: {e}")
        raise UnauthorizedError("invalid token", details=str(e)) from e


def require_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> dict | None:
    secret = request.app.state.settings.server.api_secret
    if not secret:
        return None

    if not authorization:
        raise UnauthorizedError("authorization token required")
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("invalid authorization format")

    return verify_token(authorization[len(BEARER_PREFIX):].strip(), secret)
