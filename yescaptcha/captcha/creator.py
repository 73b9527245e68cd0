"""
任务创建

createTask 失败时按线性退避重试：第 k 次重试前等待 base_delay * k，
避免重试请求以固定或递减的间隔打到服务端而被判定为刷接口。
"""
import asyncio
import logging
from typing import Optional

from ..config.settings import ClientConfig
from ..constants import APIEndpoints
from ..utils.retry import SleepFunc, cancellable_sleep, linear_backoff
from .errors import (
    CaptchaError,
    RemoteServiceError,
    SolveCancelled,
    SubmissionFailed,
    TransportError,
)
from .models import CreateTaskResponse, RemoteError, TaskDescriptor, TaskHandle
from .transport import Transport


logger = logging.getLogger(__name__)


class TaskCreator:
    """提交任务，负责创建阶段的重试策略"""

    def __init__(
        self,
        transport: Transport,
        config: ClientConfig,
        sleep: SleepFunc = cancellable_sleep
    ):
        self.transport = transport
        self.config = config
        self._sleep = sleep

    async def create_task(
        self,
        descriptor: TaskDescriptor,
        cancel_event: Optional[asyncio.Event] = None
    ) -> TaskHandle:
        """创建任务并返回任务 ID"""
        response = await self.submit(descriptor, cancel_event)
        return response.task_id

    async def submit(
        self,
        descriptor: TaskDescriptor,
        cancel_event: Optional[asyncio.Event] = None
    ) -> CreateTaskResponse:
        """
        提交任务（带重试）

        共尝试 create_task_max_retries + 1 次。服务端错误和网络错误
        同样重试，全部失败后抛出 SubmissionFailed，携带最后一次的错误。

        Raises:
            SubmissionFailed: 重试用尽
            SolveCancelled: cancel_event 被触发
        """
        max_retries = self.config.create_task_max_retries
        task_data = descriptor.to_payload()
        last_error: Optional[CaptchaError] = None

        # 不记录包含图片内容的完整 task_data
        logger.debug(f"创建任务: {task_data.get('type')}")

        for attempt in range(max_retries + 1):
            if attempt > 0:
                wait_time = linear_backoff(self.config.create_task_base_delay_ms, attempt)
                logger.debug(
                    f"重试创建任务 ({attempt}/{max_retries})，等待 {wait_time:.1f}s"
                )
                if await self._sleep(wait_time, cancel_event):
                    raise SolveCancelled("创建任务已取消")

            if cancel_event is not None and cancel_event.is_set():
                raise SolveCancelled("创建任务已取消")

            try:
                data = await self.transport.post(
                    APIEndpoints.CREATE_TASK,
                    {
                        "clientKey": self.config.api_key,
                        "task": task_data,
                    }
                )
            except TransportError as e:
                logger.warning(
                    f"创建任务失败 (尝试 {attempt + 1}/{max_retries + 1}, 网络): {e}"
                )
                last_error = e
                continue

            remote = RemoteError.from_response(data)
            if remote is not None:
                # TODO: 余额不足、Key 无效等账号类错误重试无意义，拿到官方错误码清单后直接失败
                logger.warning(
                    f"创建任务失败 (尝试 {attempt + 1}/{max_retries + 1}, 服务端): {remote}"
                )
                last_error = RemoteServiceError(remote)
                continue

            task_id = data.get("taskId")
            solution = data.get("solution")
            if not isinstance(solution, dict):
                solution = None

            if not task_id and solution is None:
                last_error = TransportError("响应格式错误: 缺少 taskId")
                logger.warning(f"创建任务失败 (尝试 {attempt + 1}/{max_retries + 1}): {last_error}")
                continue

            logger.info(f"任务已创建: {task_id}")
            return CreateTaskResponse(
                task_id=TaskHandle(str(task_id or "")),
                solution=solution,
            )

        raise SubmissionFailed(last_error, attempts=max_retries + 1)
