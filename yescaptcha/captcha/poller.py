"""
结果轮询
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Callable

from ..config.settings import ClientConfig
from ..constants import APIEndpoints, TaskStatus
from ..utils.retry import SleepFunc, cancellable_sleep
from .errors import PollTimeout, RemoteRejected, SolveCancelled, TransportError
from .models import RemoteError, TaskHandle
from .transport import Transport


logger = logging.getLogger(__name__)


class PollState(Enum):
    """轮询状态"""
    WAITING = "waiting"
    READY = "ready"
    REMOTE_ERROR = "remote_error"
    TIMED_OUT = "timed_out"


@dataclass
class PollStats:
    """单次轮询调用的统计"""
    attempts: int = 0
    transport_failures: int = 0
    state: PollState = PollState.WAITING


# on_poll_error(task_id, error, stats)
PollErrorHook = Callable[[TaskHandle, TransportError, PollStats], None]


class ResultPoller:
    """
    轮询任务结果

    每轮先等待 polling_interval_ms 再查询，最多 max_polling_attempts 轮。
    网络错误只计数不中断（服务端可能仍在处理），服务端报错立即失败。
    """

    def __init__(
        self,
        transport: Transport,
        config: ClientConfig,
        sleep: SleepFunc = cancellable_sleep,
        on_poll_error: Optional[PollErrorHook] = None
    ):
        self.transport = transport
        self.config = config
        self.on_poll_error = on_poll_error
        self._sleep = sleep

    async def poll_until_ready(
        self,
        task_id: TaskHandle,
        cancel_event: Optional[asyncio.Event] = None
    ) -> Dict[str, Any]:
        """
        等待任务完成并返回 solution

        Raises:
            RemoteRejected: 服务端返回非零 errorId
            PollTimeout: 轮询次数用尽
            SolveCancelled: cancel_event 被触发
        """
        stats = PollStats()
        interval = self.config.polling_interval_ms / 1000

        while stats.attempts < self.config.max_polling_attempts:
            stats.attempts += 1

            if await self._sleep(interval, cancel_event):
                raise SolveCancelled(f"任务 {task_id} 轮询已取消")

            try:
                data = await self.transport.post(
                    APIEndpoints.GET_TASK_RESULT,
                    {
                        "clientKey": self.config.api_key,
                        "taskId": task_id,
                    }
                )
            except TransportError as e:
                stats.transport_failures += 1
                logger.debug(
                    f"轮询任务 {task_id} 网络波动 "
                    f"(第 {stats.attempts} 轮, 累计 {stats.transport_failures} 次): {e}"
                )
                if self.on_poll_error:
                    self.on_poll_error(task_id, e, stats)
                continue

            remote = RemoteError.from_response(data)
            if remote is not None:
                stats.state = PollState.REMOTE_ERROR
                raise RemoteRejected(task_id, remote)

            status = data.get("status")
            if status == TaskStatus.READY:
                stats.state = PollState.READY
                logger.debug(f"任务 {task_id} 已完成 (第 {stats.attempts} 轮)")
                solution = data.get("solution")
                return solution if isinstance(solution, dict) else {}

            logger.debug(f"任务 {task_id} 状态: {status}, 等待中...")

        stats.state = PollState.TIMED_OUT
        if stats.transport_failures:
            logger.warning(
                f"任务 {task_id} 轮询超时，其中 {stats.transport_failures} 轮网络失败"
            )
        raise PollTimeout(task_id, stats.attempts)
