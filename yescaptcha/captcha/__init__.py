"""
验证码处理模块
"""
from .errors import (
    CaptchaError,
    ErrorKind,
    PollTimeout,
    RemoteRejected,
    RemoteServiceError,
    SolveCancelled,
    SubmissionFailed,
    TransportError,
)
from .models import (
    ChallengeSolution,
    ChallengeTask,
    CreateTaskResponse,
    ImageSolution,
    ImageTask,
    RemoteError,
    SolutionResult,
    TaskDescriptor,
    TaskHandle,
    TaskKind,
    TaskType,
)
from .transport import Transport, AiohttpTransport
from .creator import TaskCreator
from .poller import ResultPoller, PollState, PollStats
from .solver import YesCaptchaSolver, parse_solution

__all__ = [
    "CaptchaError",
    "ErrorKind",
    "PollTimeout",
    "RemoteRejected",
    "RemoteServiceError",
    "SolveCancelled",
    "SubmissionFailed",
    "TransportError",
    "ChallengeSolution",
    "ChallengeTask",
    "CreateTaskResponse",
    "ImageSolution",
    "ImageTask",
    "RemoteError",
    "SolutionResult",
    "TaskDescriptor",
    "TaskHandle",
    "TaskKind",
    "TaskType",
    "Transport",
    "AiohttpTransport",
    "TaskCreator",
    "ResultPoller",
    "PollState",
    "PollStats",
    "YesCaptchaSolver",
    "parse_solution",
]
