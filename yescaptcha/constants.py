"""
常量定义模块
集中管理项目中使用的所有常量
"""
from typing import Final

# ==============================================================================
# 版本信息
# ==============================================================================
__version__: Final[str] = "1.2.0"
VERSION: Final[str] = __version__


# ==============================================================================
# YesCaptcha API
# ==============================================================================
class APIEndpoints:
    """YesCaptcha 接口地址"""

    BASE_URL: Final[str] = "https://api.yescaptcha.com"
    CREATE_TASK: Final[str] = "createTask"
    GET_TASK_RESULT: Final[str] = "getTaskResult"


class TaskStatus:
    """getTaskResult 返回的任务状态"""

    READY: Final[str] = "ready"
    PROCESSING: Final[str] = "processing"


# ==============================================================================
# HTTP 请求配置
# ==============================================================================
class HTTPDefaults:
    """HTTP 请求默认配置"""

    TIMEOUT_MS: Final[int] = 15000
    USER_AGENT: Final[str] = f"YesCaptcha-Python-Client/{VERSION}-AntiSpam"


# ==============================================================================
# 打码客户端默认值（兼容只传 API Key 的旧用法）
# ==============================================================================
class SolverDefaults:
    """打码客户端默认配置"""

    POLLING_INTERVAL_MS: Final[int] = 3000
    MAX_POLLING_ATTEMPTS: Final[int] = 60
    CREATE_TASK_MAX_RETRIES: Final[int] = 3
    CREATE_TASK_BASE_DELAY_MS: Final[int] = 3000


# ==============================================================================
# 安全相关
# ==============================================================================
class SecurityDefaults:
    """安全相关默认值"""

    # API Key 最小长度，低于该值只告警
    MIN_API_KEY_LENGTH: Final[int] = 16

    # 允许的 URL 协议
    ALLOWED_URL_SCHEMES: Final[tuple] = ("http", "https")


# ==============================================================================
# 文件路径 / 环境变量
# ==============================================================================
class DefaultPaths:
    """默认文件路径"""

    CONFIG_FILE: Final[str] = "config.yaml"
    ENV_API_KEY: Final[str] = "YESCAPTCHA_API_KEY"


# ==============================================================================
# 日志级别
# ==============================================================================
VALID_LOG_LEVELS: Final[tuple] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
