"""服务配置.

配置来源优先级（高到低）：初始化参数、``ELASTICGATE_`` 前缀环境变量、YAML 配置文件。
YAML 文件路径依次取自 load_settings 的 config_path、``ELASTICGATE_CONFIG``，
默认 ``config.yaml``，文件不存在时忽略。

示例 config.yaml::

    log_level: info
    detail_error: false
    server:
      port: 8080
      base_path: /
      api_secret: change-me
    elastic_search:
      addresses:
        - http://localhost:9200
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .connection import ClusterConfig, ConnectionConfig

CONFIG_ENV = "ELASTICGATE_CONFIG"
DEFAULT_CONFIG_FILE = "config.yaml"

PEM_MARKER = "-----BEGIN CERTIFICATE-----"


class CorsSettings(BaseModel):
    enable: bool = False
    origins: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)
    headers: list[str] = Field(default_factory=list)
    credentials: bool = False


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    base_path: str = Field(default="/", description="All routes are mounted under this prefix.")
    api_secret: str | None = Field(
        default=None, description="HS256 secret for bearer tokens. Auth is off when unset."
    )
    cors: CorsSettings = Field(default_factory=CorsSettings)

    @field_validator("base_path")
    @classmethod
    def _normalize_base_path(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        return value if value == "/" else value + "/"


class ElasticSearchSettings(BaseModel):
    addresses: list[str] = Field(min_length=1)
    api_key: str | None = None
    username: str | None = None
    password: str | None = None
    ca_path: str | None = Field(default=None, description="PEM CA bundle used to verify the cluster.")
    verify_certs: bool = True
    request_timeout: int = Field(default=30, ge=0)

    @field_validator("ca_path")
    @classmethod
    def _validate_ca_path(cls, value: str | None) -> str | None:
        if not value:
            return None
        path = Path(value)
        if not path.is_file():
            raise ValueError(f"CA certificate file not found: {value}")
        if PEM_MARKER not in path.read_text(encoding="utf-8", errors="ignore"):
            raise ValueError(f"CA certificate file is not PEM encoded: {value}")
        return value

    def cluster_config(self) -> ClusterConfig:
        return ClusterConfig(
            hosts=list(self.addresses),
            api_key=self.api_key,
            username=self.username,
            password=self.password,
            ca_certs=self.ca_path,
            verify_certs=self.verify_certs,
        )

    def connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(request_timeout=self.request_timeout)


class ExportSettings(BaseModel):
    scroll_time: str = "2m"
    max_iterations: int = Field(default=100, ge=1)
    page_size: int = Field(default=1000, ge=1, le=10000)
    deadline_seconds: float | None = Field(
        default=None, gt=0, description="Default export deadline when the caller gives none."
    )


class MigrationSettings(BaseModel):
    serialize: bool = Field(
        default=True,
        description="Serialize create/update/delete of the same logical index in-process.",
    )
    reindex_timeout: float | None = Field(default=None, gt=0)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ELASTICGATE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # 显式指定的 YAML 文件，None 时取 ELASTICGATE_CONFIG
    config_file: ClassVar[str | None] = None

    log_level: str = Field(default="info", description="debug | info | warning | error")
    detail_error: bool = Field(
        default=False, description="Include raw engine reasons in error responses."
    )
    server: ServerSettings = Field(default_factory=ServerSettings)
    elastic_search: ElasticSearchSettings
    export: ExportSettings = Field(default_factory=ExportSettings)
    migration: MigrationSettings = Field(default_factory=MigrationSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_file = settings_cls.config_file or os.environ.get(CONFIG_ENV, DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file),
        )


def load_settings(config_path: str | None = None) -> Settings:
    """加载配置，config_path 优先于 ELASTICGATE_CONFIG，不修改进程环境变量."""
    if not config_path:
        return Settings()

    class FileSettings(Settings):
        config_file = config_path

    return FileSettings()
