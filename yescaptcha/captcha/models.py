"""
打码任务与结果的数据模型
"""
import base64
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Union, NewType


TaskHandle = NewType("TaskHandle", str)


class TaskKind(Enum):
    """任务类别"""
    IMAGE = "image"
    CHALLENGE = "challenge"


class TaskType(Enum):
    """YesCaptcha 任务类型"""
    IMAGE_TO_TEXT_M1 = "ImageToTextTaskM1"
    IMAGE_TO_TEXT_MUGGLE = "ImageToTextTaskMuggle"
    HCAPTCHA_PROXYLESS = "HCaptchaTaskProxyless"


@dataclass(frozen=True)
class ImageTask:
    """图片识别任务"""
    payload: bytes
    task_type: TaskType = TaskType.IMAGE_TO_TEXT_M1

    kind = TaskKind.IMAGE

    def __post_init__(self):
        if not self.payload:
            raise ValueError("图片内容不能为空")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": self.task_type.value,
            "body": base64.b64encode(self.payload).decode("ascii"),
        }


@dataclass(frozen=True)
class ChallengeTask:
    """交互式验证（hCaptcha）任务"""
    site_key: str
    site_url: str
    user_agent: Optional[str] = None
    invisible: Optional[bool] = None
    extra_data: Optional[str] = None

    kind = TaskKind.CHALLENGE

    def __post_init__(self):
        if not self.site_key:
            raise ValueError("site_key 不能为空")
        if not self.site_url:
            raise ValueError("site_url 不能为空")

    def to_payload(self) -> Dict[str, Any]:
        task_data: Dict[str, Any] = {
            "type": TaskType.HCAPTCHA_PROXYLESS.value,
            "websiteKey": self.site_key,
            "websiteURL": self.site_url,
        }

        if self.user_agent:
            task_data["userAgent"] = self.user_agent
        if self.invisible is not None:
            task_data["isInvisible"] = self.invisible
        if self.extra_data:
            task_data["rqdata"] = self.extra_data

        return task_data


TaskDescriptor = Union[ImageTask, ChallengeTask]


@dataclass(frozen=True)
class ImageSolution:
    """图片识别结果"""
    text: str

    kind = TaskKind.IMAGE


@dataclass(frozen=True)
class ChallengeSolution:
    """hCaptcha 结果"""
    token: str
    user_agent: str
    response_key: Optional[str] = None

    kind = TaskKind.CHALLENGE


SolutionResult = Union[ImageSolution, ChallengeSolution]


@dataclass(frozen=True)
class RemoteError:
    """服务端返回的错误信息"""
    error_id: int
    code: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> Optional["RemoteError"]:
        """errorId 为 0 时返回 None"""
        error_id = data.get("errorId", 0)
        if not error_id:
            return None
        return cls(
            error_id=error_id,
            code=data.get("errorCode"),
            description=data.get("errorDescription"),
        )

    def __str__(self) -> str:
        return f"[YesCaptcha Error {self.error_id}] {self.code or ''}: {self.description or 'Unknown Error'}"


@dataclass(frozen=True)
class CreateTaskResponse:
    """createTask 的成功响应"""
    task_id: TaskHandle
    solution: Optional[Dict[str, Any]] = None
