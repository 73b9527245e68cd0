"""
配置管理模块
支持 YAML 配置文件、环境变量以及只传 API Key 的旧用法
"""
import os
import yaml
import logging
from typing import Dict, Any, Optional, List, Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from urllib.parse import urlparse

from ..constants import (
    APIEndpoints,
    HTTPDefaults,
    SolverDefaults,
    SecurityDefaults,
    DefaultPaths,
)
from ..utils.security import mask_sensitive


logger = logging.getLogger(__name__)


# 旧版选项名（camelCase）到字段名的映射
_OPTION_ALIASES: Dict[str, str] = {
    "clientKey": "api_key",
    "apiKey": "api_key",
    "pollingInterval": "polling_interval_ms",
    "pollingIntervalMs": "polling_interval_ms",
    "maxPollingRetries": "max_polling_attempts",
    "maxPollingAttempts": "max_polling_attempts",
    "createTaskMaxRetries": "create_task_max_retries",
    "createTaskDelay": "create_task_base_delay_ms",
    "createTaskBaseDelayMs": "create_task_base_delay_ms",
    "baseUrl": "base_url",
    "requestTimeoutMs": "request_timeout_ms",
    "userAgent": "user_agent",
}


_INT_FIELDS = (
    "polling_interval_ms",
    "max_polling_attempts",
    "create_task_max_retries",
    "create_task_base_delay_ms",
    "request_timeout_ms",
)


def _coerce_int(key: str, value: Any) -> int:
    """YAML 中的数值可能写成字符串，统一转换为整数"""
    if isinstance(value, bool):
        raise ValueError(f"配置项 {key} 必须是整数: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"配置项 {key} 必须是整数: {value!r}") from None


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class ClientConfig:
    """打码客户端配置"""
    api_key: str = field(repr=False)
    polling_interval_ms: int = SolverDefaults.POLLING_INTERVAL_MS
    max_polling_attempts: int = SolverDefaults.MAX_POLLING_ATTEMPTS
    create_task_max_retries: int = SolverDefaults.CREATE_TASK_MAX_RETRIES
    create_task_base_delay_ms: int = SolverDefaults.CREATE_TASK_BASE_DELAY_MS
    debug: bool = False

    base_url: str = APIEndpoints.BASE_URL
    request_timeout_ms: int = HTTPDefaults.TIMEOUT_MS
    user_agent: str = HTTPDefaults.USER_AGENT

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key='{mask_sensitive(self.api_key)}', "
            f"polling_interval_ms={self.polling_interval_ms}, "
            f"max_polling_attempts={self.max_polling_attempts}, "
            f"create_task_max_retries={self.create_task_max_retries}, "
            f"create_task_base_delay_ms={self.create_task_base_delay_ms}, "
            f"debug={self.debug})"
        )

    @property
    def poll_budget_ms(self) -> int:
        """轮询等待总时长上限"""
        return self.polling_interval_ms * self.max_polling_attempts

    @classmethod
    def from_api_key(cls, api_key: str) -> "ClientConfig":
        """旧用法：只传 API Key，其余使用默认值"""
        return cls(api_key=api_key.strip())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientConfig":
        """
        从字典创建配置

        同时接受 snake_case 字段名和旧版 camelCase 选项名，
        未提供的字段使用默认值，未知键忽略。
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}

        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                logger.debug(f"忽略未知配置项: {key}")
                continue
            if value is None:
                continue
            if name in _INT_FIELDS:
                value = _coerce_int(key, value)
            elif name == "debug":
                value = _coerce_bool(value)
            kwargs[name] = value

        kwargs["api_key"] = str(kwargs.get("api_key", "")).strip()
        return cls(**kwargs)

    @classmethod
    def from_env(cls, base: Optional["ClientConfig"] = None) -> "ClientConfig":
        """用环境变量中的 API Key 覆盖配置"""
        api_key = os.environ.get(DefaultPaths.ENV_API_KEY, "").strip()
        if base is None:
            return cls(api_key=api_key)
        if api_key:
            return replace(base, api_key=api_key)
        return base

    def validate(self) -> List[str]:
        """验证配置，返回错误列表"""
        errors = []

        if not self.api_key:
            errors.append("api_key 未配置")
        elif len(self.api_key) < SecurityDefaults.MIN_API_KEY_LENGTH:
            logger.warning("API Key 长度异常，请检查配置")

        if self.polling_interval_ms <= 0:
            errors.append(f"polling_interval_ms 必须大于 0: {self.polling_interval_ms}")
        if self.max_polling_attempts <= 0:
            errors.append(f"max_polling_attempts 必须大于 0: {self.max_polling_attempts}")
        if self.create_task_max_retries < 0:
            errors.append(f"create_task_max_retries 不能为负数: {self.create_task_max_retries}")
        if self.create_task_base_delay_ms < 0:
            errors.append(f"create_task_base_delay_ms 不能为负数: {self.create_task_base_delay_ms}")
        if self.request_timeout_ms <= 0:
            errors.append(f"request_timeout_ms 必须大于 0: {self.request_timeout_ms}")

        parsed = urlparse(self.base_url)
        if parsed.scheme not in SecurityDefaults.ALLOWED_URL_SCHEMES or not parsed.netloc:
            errors.append(f"base_url 无效: {self.base_url}")

        return errors


def load_config(
    config_file: str = DefaultPaths.CONFIG_FILE,
    section: str = "yescaptcha"
) -> ClientConfig:
    """
    加载配置

    读取 YAML 文件中的 ``yescaptcha`` 段，再用环境变量
    YESCAPTCHA_API_KEY 覆盖 API Key。文件不存在时使用默认配置。

    Args:
        config_file: 配置文件路径
        section: 配置段名称

    Returns:
        ClientConfig 实例
    """
    config_path = Path(config_file)
    data: Dict[str, Any] = {}

    if not config_path.exists():
        logger.warning(f"配置文件不存在: {config_file}，使用默认配置")
    else:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"配置文件格式错误: {config_file}")
        data = raw.get(section) or {}
        logger.info(f"配置文件加载成功: {config_file}")

    return ClientConfig.from_env(ClientConfig.from_dict(data))
