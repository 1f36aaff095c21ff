#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Intercom CLI - 统一入口文件
在终端中处理 Intercom 会话、联系人、工单、标签、团队和备注
具备请求预算跟踪、429 限流重试、游标分页等功能
"""

import sys
import logging
import argparse
from typing import List, Optional

from api import APIError
from commands import CommandContext, CommandError, register_all
from core import ConfigManager, ConsoleDisplay


__version__ = "0.1.0"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def setup_logger(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """设置基础日志器（输出到 stderr，可选文件）"""
    logger = logging.getLogger()
    if not logger.handlers:  # 避免重复设置
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='intercom',
        description='Intercom CLI for support agents: conversations, contacts, tickets and more',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS,
                        help='日志级别（默认 WARNING，可用 INTERCOM_LOG_LEVEL 覆盖）')
    parser.add_argument('--log-file', type=str, help='额外写入的日志文件')

    subparsers = parser.add_subparsers(dest='command', metavar='<command>')
    register_all(subparsers)
    return parser


def main(argv: Optional[List[str]] = None, context: Optional[CommandContext] = None) -> int:
    """
    主函数

    Args:
        argv: 命令行参数，默认 sys.argv[1:]
        context: 预先构造的命令上下文（测试注入用）

    Returns:
        int: 进程退出码
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, 'handler', None):
        parser.print_help(sys.stderr)
        return 1

    if context is None:
        config_manager = ConfigManager()
        settings = config_manager.load_settings()
        context = CommandContext(display=ConsoleDisplay(), config_manager=config_manager, settings=settings)

    logger = setup_logger(args.log_level or context.settings.log_level, args.log_file)
    json_mode = bool(getattr(args, 'json', False))
    display = context.display

    try:
        args.handler(args, context)
        return 0
    except APIError as e:
        logger.debug(f"命令失败: {e.kind.code} ({e.status}) {e.message}")
        display.fatal(e.user_message, e.kind.code, e.status, json_mode)
        return e.exit_code
    except CommandError as e:
        display.fatal(e.message, e.code, e.status, json_mode)
        return e.exit_code
    except KeyboardInterrupt:
        display.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
