"""
打码服务异常定义

所有异常都继承 CaptchaError，并带有 ErrorKind 标签，
调用方可以直接匹配 ``err.kind``，不必依赖具体的异常类。
"""
from enum import Enum
from typing import Optional

from .models import RemoteError


class ErrorKind(Enum):
    """错误类别"""
    TRANSPORT = "transport"
    REMOTE = "remote"
    SUBMISSION_FAILED = "submission_failed"
    POLL_TIMEOUT = "poll_timeout"
    REMOTE_REJECTED = "remote_rejected"
    CANCELLED = "cancelled"


class CaptchaError(Exception):
    """验证码服务基础异常"""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, remote: Optional[RemoteError] = None):
        super().__init__(message)
        self.remote = remote


class TransportError(CaptchaError):
    """HTTP 层错误：连接失败、超时、响应格式错误"""
    kind = ErrorKind.TRANSPORT


class RemoteServiceError(CaptchaError):
    """服务端返回了非零 errorId"""
    kind = ErrorKind.REMOTE

    def __init__(self, remote: RemoteError):
        super().__init__(str(remote), remote=remote)


class SubmissionFailed(CaptchaError):
    """创建任务重试用尽"""
    kind = ErrorKind.SUBMISSION_FAILED

    def __init__(self, last_error: Optional[CaptchaError], attempts: int):
        detail = str(last_error) if last_error else "未知错误"
        super().__init__(
            f"创建任务失败，共尝试 {attempts} 次: {detail}",
            remote=last_error.remote if last_error else None,
        )
        self.last_error = last_error
        self.attempts = attempts


class PollTimeout(CaptchaError):
    """轮询次数用尽仍未拿到结果"""
    kind = ErrorKind.POLL_TIMEOUT

    def __init__(self, task_id: str, attempts: int):
        super().__init__(f"任务 {task_id} 超时，已轮询 {attempts} 次仍未完成")
        self.task_id = task_id
        self.attempts = attempts


class RemoteRejected(CaptchaError):
    """轮询时服务端报错，不再重试"""
    kind = ErrorKind.REMOTE_REJECTED

    def __init__(self, task_id: str, remote: RemoteError):
        super().__init__(f"任务 {task_id} 被服务端拒绝: {remote}", remote=remote)
        self.task_id = task_id


class SolveCancelled(CaptchaError):
    """调用方取消了本次打码"""
    kind = ErrorKind.CANCELLED
