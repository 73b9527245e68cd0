"""
工具模块
提供日志、脱敏、重试等通用功能
"""
from .logger import setup_logger, setup_colored_logger
from .security import mask_sensitive, mask_url_credentials
from .retry import linear_backoff, cancellable_sleep, SleepFunc

__all__ = [
    "setup_logger",
    "setup_colored_logger",
    "mask_sensitive",
    "mask_url_credentials",
    "linear_backoff",
    "cancellable_sleep",
    "SleepFunc",
]
