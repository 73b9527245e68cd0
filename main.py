#!/usr/bin/env python3
"""
YesCaptcha 打码客户端 - 命令行入口
支持图片识别和 hCaptcha 两种任务
"""
import sys
import asyncio
import argparse
from dataclasses import replace
from pathlib import Path

import yaml

from yescaptcha.config.settings import ClientConfig, load_config
from yescaptcha.captcha.errors import CaptchaError
from yescaptcha.captcha.solver import YesCaptchaSolver
from yescaptcha.constants import DefaultPaths
from yescaptcha.utils.logger import setup_colored_logger
from yescaptcha.utils.security import mask_sensitive


async def run_image(config: ClientConfig, image_file: str) -> str:
    """识别图片文件"""
    payload = Path(image_file).read_bytes()
    async with YesCaptchaSolver(config) as solver:
        return await solver.solve_image(payload)


async def run_challenge(config: ClientConfig, args) -> str:
    """解决 hCaptcha"""
    async with YesCaptchaSolver(config) as solver:
        return await solver.solve_challenge(
            site_key=args.site_key,
            site_url=args.site_url,
            user_agent=args.user_agent,
            invisible=True if args.invisible else None,
            extra_data=args.rqdata,
        )


def parse_args(argv=None):
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="YesCaptcha 打码客户端",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python main.py image captcha.png
  python main.py challenge --site-key KEY --site-url https://example.com
  python main.py -c my-config.yaml --validate
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=DefaultPaths.CONFIG_FILE,
        help=f"配置文件路径 (默认: {DefaultPaths.CONFIG_FILE})"
    )

    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help=f"YesCaptcha clientKey，覆盖配置文件和 {DefaultPaths.ENV_API_KEY}"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="输出调试日志"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="验证配置并退出"
    )

    subparsers = parser.add_subparsers(dest="command")

    image_parser = subparsers.add_parser("image", help="识别图片验证码")
    image_parser.add_argument("file", help="图片文件路径")

    challenge_parser = subparsers.add_parser("challenge", help="解决 hCaptcha")
    challenge_parser.add_argument("--site-key", required=True, help="hCaptcha sitekey")
    challenge_parser.add_argument("--site-url", required=True, help="目标网站 URL")
    challenge_parser.add_argument("--user-agent", default=None, help="User-Agent")
    challenge_parser.add_argument("--invisible", action="store_true", help="隐形验证")
    challenge_parser.add_argument("--rqdata", default=None, help="附加 rqdata")

    return parser.parse_args(argv)


def build_config(args) -> ClientConfig:
    """加载配置并应用命令行覆盖"""
    config = load_config(args.config)
    if args.api_key:
        config = replace(config, api_key=args.api_key.strip())
    if args.debug:
        config = replace(config, debug=True)
    return config


def main(argv=None) -> int:
    """主函数"""
    args = parse_args(argv)

    setup_colored_logger(level="DEBUG" if args.debug else "WARNING")

    try:
        config = build_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"❌ 配置加载失败: {e}", file=sys.stderr)
        return 1

    errors = config.validate()

    if args.validate:
        print(f"📄 验证配置: {args.config}")
        if errors:
            print("\n❌ 配置验证失败:")
            for error in errors:
                print(f"   - {error}")
            return 1

        print("\n✅ 配置验证通过!")
        print("\n📋 配置摘要:")
        print(f"   - API Key: {mask_sensitive(config.api_key)}")
        print(f"   - 接口地址: {config.base_url}")
        print(f"   - 轮询间隔: {config.polling_interval_ms} ms × {config.max_polling_attempts} 次")
        print(f"   - 创建重试: {config.create_task_max_retries} 次, 基础延迟 {config.create_task_base_delay_ms} ms")
        return 0

    if errors:
        for error in errors:
            print(f"❌ 配置错误: {error}", file=sys.stderr)
        return 1

    if args.command is None:
        print("❌ 请指定任务类型: image 或 challenge", file=sys.stderr)
        return 1

    try:
        if args.command == "image":
            result = asyncio.run(run_image(config, args.file))
        else:
            result = asyncio.run(run_challenge(config, args))
    except OSError as e:
        print(f"❌ 读取文件失败: {e}", file=sys.stderr)
        return 1
    except CaptchaError as e:
        print(f"❌ 打码失败 ({e.kind.value}): {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n收到中断信号...", file=sys.stderr)
        return 130

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
