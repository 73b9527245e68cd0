"""
打码客户端 - 统一接口
"""
import asyncio
import logging
from typing import Optional, Dict, Any, Union

from ..config.settings import ClientConfig
from ..utils.retry import SleepFunc, cancellable_sleep
from .creator import TaskCreator
from .errors import TransportError
from .models import (
    ChallengeSolution,
    ChallengeTask,
    ImageSolution,
    ImageTask,
    SolutionResult,
    TaskDescriptor,
    TaskKind,
)
from .poller import PollErrorHook, ResultPoller
from .transport import AiohttpTransport, Transport


logger = logging.getLogger(__name__)


def parse_solution(kind: TaskKind, solution: Dict[str, Any]) -> SolutionResult:
    """按任务类别解析 solution，缺少必需字段视为响应格式错误"""
    if kind is TaskKind.IMAGE:
        text = solution.get("text")
        if text is None:
            raise TransportError("响应格式错误: solution 缺少 text")
        return ImageSolution(text=str(text))

    token = solution.get("gRecaptchaResponse")
    if not token:
        raise TransportError("响应格式错误: solution 缺少 gRecaptchaResponse")
    return ChallengeSolution(
        token=token,
        user_agent=solution.get("userAgent", ""),
        response_key=solution.get("respKey"),
    )


class YesCaptchaSolver:
    """
    YesCaptcha 打码客户端

    创建任务（带退避重试）后轮询结果。本类不做额外重试，
    子组件抛出的异常原样传给调用方。

    Usage:
        async with YesCaptchaSolver("your-client-key") as solver:
            text = await solver.solve_image(image_bytes)
    """

    def __init__(
        self,
        config: Union[ClientConfig, str],
        transport: Optional[Transport] = None,
        sleep: SleepFunc = cancellable_sleep,
        on_poll_error: Optional[PollErrorHook] = None
    ):
        # 兼容旧用法：直接传 API Key
        if isinstance(config, str):
            config = ClientConfig.from_api_key(config)

        errors = config.validate()
        if errors:
            raise ValueError(f"配置无效: {'; '.join(errors)}")

        self.config = config
        self._owns_transport = transport is None
        self.transport = transport or AiohttpTransport.from_config(config)
        self.creator = TaskCreator(self.transport, config, sleep=sleep)
        self.poller = ResultPoller(
            self.transport, config, sleep=sleep, on_poll_error=on_poll_error
        )

    def __repr__(self) -> str:
        return f"YesCaptchaSolver({self.config!r})"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """关闭自己创建的传输层，外部注入的交给调用方管理"""
        if self._owns_transport:
            await self.transport.close()

    def _log(self, msg: str):
        logger.log(logging.INFO if self.config.debug else logging.DEBUG, f"[YesCaptcha] {msg}")

    async def solve(
        self,
        descriptor: TaskDescriptor,
        cancel_event: Optional[asyncio.Event] = None
    ) -> SolutionResult:
        """提交任务并等待结果，返回完整的 solution"""
        self._log(f"开始 {descriptor.kind.value} 任务")

        created = await self.creator.submit(descriptor, cancel_event)

        # 图片任务可能在 createTask 中直接返回结果，其余情况一律轮询
        if (
            descriptor.kind is TaskKind.IMAGE
            and created.solution is not None
            and created.solution.get("text")
        ):
            self._log(f"任务 {created.task_id or '-'} 已同步返回结果")
            return parse_solution(descriptor.kind, created.solution)

        if not created.task_id:
            raise TransportError("响应格式错误: 缺少 taskId")

        self._log(f"任务已创建 ID: {created.task_id}")
        solution = await self.poller.poll_until_ready(created.task_id, cancel_event)
        self._log(f"任务 {created.task_id} 已解决")

        return parse_solution(descriptor.kind, solution)

    async def solve_image(
        self,
        payload: bytes,
        cancel_event: Optional[asyncio.Event] = None
    ) -> str:
        """识别图片验证码，返回文本"""
        result = await self.solve(ImageTask(payload=payload), cancel_event)
        return result.text

    async def solve_challenge(
        self,
        site_key: str,
        site_url: str,
        user_agent: Optional[str] = None,
        invisible: Optional[bool] = None,
        extra_data: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> str:
        """
        解决 hCaptcha 验证

        Args:
            site_key: hCaptcha sitekey
            site_url: 目标网站 URL
            user_agent: 可选的 User-Agent
            invisible: 是否为隐形验证
            extra_data: 可选的 rqdata
            cancel_event: 触发后放弃本次打码

        Returns:
            gRecaptchaResponse token
        """
        self._log(f"开始 HCaptcha: {site_url}")
        task = ChallengeTask(
            site_key=site_key,
            site_url=site_url,
            user_agent=user_agent,
            invisible=invisible,
            extra_data=extra_data,
        )
        result = await self.solve(task, cancel_event)
        return result.token
