"""
配置模块
"""
from .settings import ClientConfig, load_config

__all__ = [
    "ClientConfig",
    "load_config",
]
