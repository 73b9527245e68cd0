"""
YesCaptcha 异步打码客户端
"""
from .constants import __version__
from .config import ClientConfig, load_config
from .captcha import (
    CaptchaError,
    ErrorKind,
    PollTimeout,
    RemoteRejected,
    SubmissionFailed,
    SolveCancelled,
    TransportError,
    YesCaptchaSolver,
)

__all__ = [
    "__version__",
    "ClientConfig",
    "load_config",
    "CaptchaError",
    "ErrorKind",
    "PollTimeout",
    "RemoteRejected",
    "SubmissionFailed",
    "SolveCancelled",
    "TransportError",
    "YesCaptchaSolver",
]
