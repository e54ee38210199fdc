"""HTTP 接口模块.

主要组件:
    - create_app: FastAPI 应用工厂
    - build_services: 创建进程内共享的服务对象
"""

from .app import build_services, create_app

__all__ = ["create_app", "build_services"]
