"""
打码客户端端到端测试（使用内存传输层）
"""
import asyncio
import logging
from dataclasses import replace

import pytest

from conftest import FakeTransport, RecordingSleep, network_error, TEST_API_KEY
from yescaptcha.captcha.errors import (
    PollTimeout,
    SolveCancelled,
    RemoteRejected,
    SubmissionFailed,
    TransportError,
)
from yescaptcha.captcha.models import ChallengeSolution, ChallengeTask, TaskKind
from yescaptcha.captcha.solver import YesCaptchaSolver, parse_solution
from yescaptcha.config.settings import ClientConfig


PROCESSING = {"errorId": 0, "status": "processing"}


@pytest.mark.asyncio
async def test_solve_image_round_trip(config, sleep):
    """提交一次、轮询三次后得到文本"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1"}],
        "getTaskResult": [
            PROCESSING,
            PROCESSING,
            {"errorId": 0, "status": "ready", "solution": {"text": "ab12"}},
        ],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    text = await solver.solve_image(b"\x89PNG\r\n")

    assert text == "ab12"
    assert transport.count("createTask") == 1
    assert transport.count("getTaskResult") == 3
    task = transport.calls[0][1]["task"]
    assert task == {"type": "ImageToTextTaskM1", "body": "iVBORw0K"}


@pytest.mark.asyncio
async def test_solve_image_inline_solution(config, sleep):
    """createTask 直接返回结果时不轮询"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1", "solution": {"text": "q7w8"}}],
        "getTaskResult": [PROCESSING],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    assert await solver.solve_image(b"img") == "q7w8"
    assert transport.count("getTaskResult") == 0


@pytest.mark.asyncio
async def test_solve_challenge(config, sleep):
    """hCaptcha 返回 gRecaptchaResponse"""
    transport = FakeTransport({
        "createTask": [network_error(), {"errorId": 0, "taskId": "H1"}],
        "getTaskResult": [
            {
                "errorId": 0,
                "status": "ready",
                "solution": {
                    "gRecaptchaResponse": "P0_token",
                    "userAgent": "Mozilla/5.0",
                    "respKey": "E0_key",
                },
            },
        ],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    token = await solver.solve_challenge(
        "site-key",
        "https://example.com/login",
        user_agent="Mozilla/5.0",
        invisible=True,
        extra_data="rq",
    )

    assert token == "P0_token"
    assert transport.calls[1][1]["task"] == {
        "type": "HCaptchaTaskProxyless",
        "websiteKey": "site-key",
        "websiteURL": "https://example.com/login",
        "userAgent": "Mozilla/5.0",
        "isInvisible": True,
        "rqdata": "rq",
    }
    # 一次创建退避 + 一次轮询间隔
    assert sleep.delays == [1.0, 3.0]


@pytest.mark.asyncio
async def test_solve_returns_typed_solution(config, sleep):
    """solve 返回完整的结果对象"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "H1"}],
        "getTaskResult": [{
            "errorId": 0,
            "status": "ready",
            "solution": {"gRecaptchaResponse": "tok", "userAgent": "UA"},
        }],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    result = await solver.solve(ChallengeTask("k", "https://example.com"))

    assert result == ChallengeSolution(token="tok", user_agent="UA", response_key=None)
    assert result.kind is TaskKind.CHALLENGE


@pytest.mark.asyncio
async def test_errors_propagate_unchanged(config, sleep):
    """子组件的异常原样抛出"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1"}],
        "getTaskResult": [{"errorId": 16, "errorCode": "ERROR_NO_SUCH_CAPCHA_ID"}],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    with pytest.raises(RemoteRejected):
        await solver.solve_image(b"img")

    transport = FakeTransport({"createTask": [network_error()]})
    solver = YesCaptchaSolver(config, transport=transport, sleep=RecordingSleep())
    with pytest.raises(SubmissionFailed):
        await solver.solve_challenge("k", "https://example.com")

    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T2"}],
        "getTaskResult": [PROCESSING],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=RecordingSleep())
    with pytest.raises(PollTimeout):
        await solver.solve_image(b"img")


@pytest.mark.asyncio
async def test_malformed_solution(config, sleep):
    """solution 缺少必需字段视为格式错误"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1"}],
        "getTaskResult": [{"errorId": 0, "status": "ready"}],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    with pytest.raises(TransportError):
        await solver.solve_image(b"img")


@pytest.mark.asyncio
async def test_concurrent_solves_are_independent(config, sleep):
    """多个 solve 可以并发执行"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1"}],
        "getTaskResult": [{"errorId": 0, "status": "ready", "solution": {"text": "ok"}}],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    results = await asyncio.gather(*(solver.solve_image(b"img") for _ in range(5)))

    assert results == ["ok"] * 5
    assert transport.count("createTask") == 5


@pytest.mark.asyncio
async def test_debug_logging(config, sleep, caplog):
    """debug 开启时阶段日志以 INFO 输出"""
    config = replace(config, debug=True)
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1"}],
        "getTaskResult": [{"errorId": 0, "status": "ready", "solution": {"text": "ok"}}],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    with caplog.at_level(logging.INFO, logger="yescaptcha.captcha.solver"):
        await solver.solve_image(b"img")

    assert "任务已创建 ID: T1" in caplog.text
    assert TEST_API_KEY not in caplog.text


@pytest.mark.asyncio
async def test_injected_transport_not_closed(config):
    """外部注入的传输层不由客户端关闭"""
    transport = FakeTransport({"createTask": [{"errorId": 0, "taskId": "T1"}]})
    async with YesCaptchaSolver(config, transport=transport):
        pass
    assert transport.closed is False


def test_bare_api_key_uses_defaults():
    """只传 API Key 时使用默认配置"""
    solver = YesCaptchaSolver(TEST_API_KEY, transport=FakeTransport({}))

    assert solver.config == ClientConfig(api_key=TEST_API_KEY)
    assert solver.config.polling_interval_ms == 3000
    assert solver.config.max_polling_attempts == 60
    assert solver.config.create_task_max_retries == 3
    assert solver.config.create_task_base_delay_ms == 3000
    assert solver.config.debug is False
    assert TEST_API_KEY not in repr(solver)


def test_invalid_config_rejected():
    """配置无效时拒绝创建"""
    with pytest.raises(ValueError):
        YesCaptchaSolver("", transport=FakeTransport({}))

    with pytest.raises(ValueError):
        YesCaptchaSolver(
            ClientConfig(api_key=TEST_API_KEY, max_polling_attempts=0),
            transport=FakeTransport({}),
        )


def test_parse_solution():
    """按任务类别解析结果"""
    assert parse_solution(TaskKind.IMAGE, {"text": "abc"}).text == "abc"

    result = parse_solution(TaskKind.CHALLENGE, {"gRecaptchaResponse": "t", "userAgent": "u", "respKey": "r"})
    assert (result.token, result.user_agent, result.response_key) == ("t", "u", "r")

    with pytest.raises(TransportError):
        parse_solution(TaskKind.CHALLENGE, {"userAgent": "u"})


@pytest.mark.asyncio
async def test_empty_inline_solution_still_polls(config, sleep):
    """createTask 返回空 solution 时按 taskId 轮询"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T1", "solution": {}}],
        "getTaskResult": [{"errorId": 0, "status": "ready", "solution": {"text": "ab12"}}],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    assert await solver.solve_image(b"img") == "ab12"
    assert transport.count("getTaskResult") == 1


@pytest.mark.asyncio
async def test_challenge_ignores_create_task_solution(config, sleep):
    """hCaptcha 总是轮询，不使用 createTask 中的 solution"""
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "H1", "solution": {"gRecaptchaResponse": "stale"}}],
        "getTaskResult": [{
            "errorId": 0,
            "status": "ready",
            "solution": {"gRecaptchaResponse": "fresh", "userAgent": "UA"},
        }],
    })
    solver = YesCaptchaSolver(config, transport=transport, sleep=sleep)

    assert await solver.solve_challenge("k", "https://example.com") == "fresh"
    assert transport.count("getTaskResult") == 1


@pytest.mark.asyncio
async def test_solve_with_real_sleep(config):
    """使用默认 sleep 完整走一遍，并可通过 cancel_event 中断轮询"""
    config = replace(config, polling_interval_ms=10, create_task_base_delay_ms=10)
    transport = FakeTransport({
        "createTask": [network_error(), {"errorId": 0, "taskId": "T1"}],
        "getTaskResult": [
            PROCESSING,
            {"errorId": 0, "status": "ready", "solution": {"text": "ok"}},
        ],
    })
    solver = YesCaptchaSolver(config, transport=transport)

    assert await solver.solve_image(b"img") == "ok"
    assert transport.count("getTaskResult") == 2

    config = replace(config, polling_interval_ms=5000)
    transport = FakeTransport({
        "createTask": [{"errorId": 0, "taskId": "T2"}],
        "getTaskResult": [PROCESSING],
    })
    solver = YesCaptchaSolver(config, transport=transport)
    event = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, event.set)

    loop = asyncio.get_running_loop()
    started = loop.time()
    with pytest.raises(SolveCancelled):
        await solver.solve_image(b"img", cancel_event=event)

    assert loop.time() - started < 1
    assert transport.count("getTaskResult") == 0
