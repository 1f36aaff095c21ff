#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Intercom CLI 测试配置文件

模块概述：
    此模块提供 pytest 共享 fixtures：可控时钟、会话、模拟响应工厂、
    记录型显示器以及基于临时目录的配置管理器。

Fixtures 分类：
    网络层 Fixtures：
        - fake_clock: 可手动推进的单调时钟
        - session: 美国区域的 ApiSession
        - make_response: 构造模拟 requests.Response

    命令层 Fixtures：
        - display: 记录所有输出的显示器
        - config_dir: 临时配置目录
        - config_manager: 无环境变量的配置管理器

临时文件处理：
    使用 pytest 的 tmp_path fixture 创建临时目录，
    测试结束后自动清理。

作者: Intercom CLI Team
版本: 0.1.0
"""

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import Mock

import pytest

from api import ApiSession, Credentials, Region
from core.config import ConfigManager


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingDisplay:
    """记录所有输出调用的显示器"""

    def __init__(self):
        self.warnings = []
        self.waits = []
        self.tables = []
        self.json_outputs = []
        self.successes = []
        self.infos = []
        self.errors = []
        self.lines = []
        self.fatals = []

    def warn(self, message):
        self.warnings.append(message)

    @contextmanager
    def waiting(self, message):
        self.waits.append(message)
        yield

    def table(self, headers, rows):
        self.tables.append((list(headers), [list(r) for r in rows]))

    def json(self, data):
        self.json_outputs.append(data)

    def success(self, message):
        self.successes.append(message)

    def info(self, message):
        self.infos.append(message)

    def error(self, message):
        self.errors.append(message)

    def line(self, text=""):
        self.lines.append(text)

    def fatal(self, message, code, status=None, json_mode=False):
        self.fatals.append({"message": message, "code": code, "status": status, "json_mode": json_mode})


@pytest.fixture
def fake_clock() -> FakeClock:
    """返回从 1000 秒开始的假时钟"""
    return FakeClock()


@pytest.fixture
def session() -> ApiSession:
    """返回美国区域的测试会话"""
    return ApiSession.create(Credentials(token="test-token", region=Region.US))


@pytest.fixture
def make_response():
    """返回模拟响应工厂"""

    def _make(status: int = 200, body: Any = None, headers: Optional[Dict[str, str]] = None, text: str = None):
        response = Mock()
        response.status_code = status
        response.headers = headers or {}
        if text is not None:
            response.content = text.encode("utf-8")
            response.json.side_effect = ValueError("No JSON object could be decoded")
        elif body is None:
            response.content = b""
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.content = json.dumps(body).encode("utf-8")
            response.json.return_value = body
        return response

    return _make


@pytest.fixture
def display() -> RecordingDisplay:
    """返回记录型显示器"""
    return RecordingDisplay()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """返回临时配置目录（尚未创建）"""
    return tmp_path / ".intercom"


@pytest.fixture
def config_manager(config_dir: Path) -> ConfigManager:
    """返回不读取真实环境变量的配置管理器"""
    return ConfigManager(config_dir=config_dir, environ={})
