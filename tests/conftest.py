"""
测试公共夹具：内存传输层和记录等待时长的 sleep
"""
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from yescaptcha.captcha.errors import TransportError
from yescaptcha.captcha.transport import Transport
from yescaptcha.config.settings import ClientConfig


TEST_API_KEY = "test-client-key-0123456789"


class FakeTransport(Transport):
    """
    按 endpoint 依次返回预设响应

    响应可以是 dict（作为 JSON 返回）或异常实例（直接抛出）。
    某个 endpoint 的响应用完后重复最后一个。
    """

    def __init__(self, responses: Dict[str, List[Any]]):
        self.responses = {k: list(v) for k, v in responses.items()}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    def count(self, endpoint: str) -> int:
        return sum(1 for name, _ in self.calls if name == endpoint)

    async def post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((endpoint, payload))
        queue = self.responses[endpoint]
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


class RecordingSleep:
    """不真正等待，只记录时长；cancel_after 次后模拟取消"""

    def __init__(self, cancel_after: int = -1):
        self.delays: List[float] = []
        self.cancel_after = cancel_after

    async def __call__(self, seconds, cancel_event=None) -> bool:
        if len(self.delays) == self.cancel_after:
            return True
        self.delays.append(seconds)
        return cancel_event is not None and cancel_event.is_set()


def network_error() -> TransportError:
    return TransportError("网络错误: ClientConnectorError")


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def config():
    return ClientConfig(
        api_key=TEST_API_KEY,
        polling_interval_ms=3000,
        max_polling_attempts=5,
        create_task_max_retries=3,
        create_task_base_delay_ms=1000,
    )
