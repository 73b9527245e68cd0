"""
重试工具模块
提供退避延迟计算和可取消的等待
"""
import asyncio
import logging
from typing import Optional, Awaitable, Callable


logger = logging.getLogger(__name__)


# sleep(seconds, cancel_event) -> 是否被取消
SleepFunc = Callable[[float, Optional[asyncio.Event]], Awaitable[bool]]


def linear_backoff(base_delay_ms: int, attempt: int) -> float:
    """
    线性退避延迟（秒）

    第 1 次重试等待 1 个单位，第 2 次等待 2 个单位，以此类推；
    第 0 次尝试不等待。

    Examples:
        >>> linear_backoff(3000, 0)
        0.0
        >>> linear_backoff(3000, 2)
        6.0
    """
    if attempt <= 0:
        return 0.0
    return base_delay_ms * attempt / 1000


async def cancellable_sleep(
    seconds: float,
    cancel_event: Optional[asyncio.Event] = None
) -> bool:
    """
    等待指定秒数，cancel_event 被触发时提前返回

    Returns:
        True 表示等待被取消
    """
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return False

    if cancel_event.is_set():
        return True

    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True
