"""
HTTP 传输层

Transport 只负责把 JSON 发到服务端并取回 JSON，
所有 HTTP 层面的失败统一转换为 TransportError。
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

import aiohttp
from aiohttp import ClientError

from ..config.settings import ClientConfig
from ..constants import APIEndpoints, HTTPDefaults
from ..utils.security import mask_url_credentials
from .errors import TransportError


logger = logging.getLogger(__name__)


class Transport(ABC):
    """传输层接口，便于在测试中替换"""

    @abstractmethod
    async def post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST JSON 到 endpoint，返回解析后的 JSON 对象"""

    async def close(self):
        """释放连接资源"""


class AiohttpTransport(Transport):
    """基于 aiohttp 的传输实现"""

    def __init__(
        self,
        base_url: str = APIEndpoints.BASE_URL,
        timeout_ms: int = HTTPDefaults.TIMEOUT_MS,
        user_agent: str = HTTPDefaults.USER_AGENT
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_ms = timeout_ms
        self.headers = {"User-Agent": user_agent}
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config: ClientConfig) -> "AiohttpTransport":
        return cls(
            base_url=config.base_url,
            timeout_ms=config.request_timeout_ms,
            user_agent=config.user_agent,
        )

    def __repr__(self) -> str:
        return (
            f"AiohttpTransport(base_url='{mask_url_credentials(self.base_url)}', "
            f"timeout_ms={self.timeout_ms})"
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
            )
        return self._session

    async def close(self):
        """关闭会话"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """发起一次 HTTP 请求，不做重试"""
        session = await self._get_session()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            async with session.post(url, json=payload) as resp:
                if resp.status >= 400:
                    # 不暴露响应内容，可能包含敏感信息
                    raise TransportError(f"请求失败: HTTP {resp.status}")

                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise TransportError("响应不是有效的 JSON") from e

        except (ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"网络错误: {type(e).__name__}") from e

        if not isinstance(data, dict):
            raise TransportError("响应格式错误: 不是 JSON 对象")

        return data
