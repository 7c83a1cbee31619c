from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel


class RedisConfig(BaseModel):
    """Configuration for Redis transport."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None


class TransportConfig(BaseModel):
    """Transport configuration settings."""

    backend: Literal["inmemory", "redis"] = "inmemory"
    redis: RedisConfig = RedisConfig()


class HttpDirectoryConfig(BaseModel):
    """Configuration for the HTTP directory lookup."""

    base_url: Optional[str] = None
    timeout: float = 5.0


class DirectoryConfig(BaseModel):
    """Directory lookup settings."""

    backend: Literal["inmemory", "http"] = "inmemory"
    http: HttpDirectoryConfig = HttpDirectoryConfig()


class CruxConnectConfig(BaseModel):
    """Top-level configuration model."""

    transport: TransportConfig = TransportConfig()
    directory: DirectoryConfig = DirectoryConfig()


def load_config(path: Optional[str] = None) -> CruxConnectConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to CRUXCONNECT_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("CRUXCONNECT_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        return CruxConnectConfig(**data)
    return CruxConnectConfig()
