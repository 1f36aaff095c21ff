#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
终端输出模块

模块概述：
    此模块提供命令层使用的全部输出原语，并实现访问层注入所需的
    显示接口（warn / waiting）。终端下使用 rich 渲染彩色
    表格和等待动画；输出被管道重定向时退化为纯文本，不显示动画。

输出约定：
    - 表格、JSON、成功/提示信息写入 stdout
    - 警告与致命错误写入 stderr
    - --json 模式下的致命错误以 {"error": {...}} 写入 stdout

作者: Intercom CLI Team
版本: 0.1.0
"""

import json as _json
from contextlib import contextmanager
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.table import Table


class ConsoleDisplay:
    """基于 rich 的终端显示器"""

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self._status = None
        self._status_text = ""

    @property
    def is_tty(self) -> bool:
        return self.console.is_terminal

    def _emit(self, console: Console, text: str, style: Optional[str]):
        if console.is_terminal and style:
            console.print(text, style=style, markup=False, highlight=False)
        else:
            console.print(text, markup=False, highlight=False, soft_wrap=True)

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[Any]]):
        """打印表格"""
        header_style = "bold cyan" if self.is_tty else None
        table = Table(show_header=True, header_style=header_style)
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*[str(cell) for cell in row])
        self.console.print(table)

    def json(self, data: Any):
        """打印 JSON（始终为机器可读格式）"""
        self.console.print(
            _json.dumps(data, indent=2, ensure_ascii=False),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def success(self, message: str):
        self._emit(self.console, f"✓ {message}", "green")

    def info(self, message: str):
        self._emit(self.console, message, "dim")

    def warn(self, message: str):
        self._emit(self.err_console, f"⚠ {message}", "yellow")

    def error(self, message: str):
        self._emit(self.err_console, f"✗ {message}", "red")

    def line(self, text: str = ""):
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    @contextmanager
    def waiting(self, message: str):
        """
        等待提示：终端下显示动画，否则不输出

        rich 同一时间只允许一个动态显示，嵌套调用（例如命令的
        "Fetching..." 期间发生 429 等待）时复用外层动画并临时替换文本。
        """
        if not self.is_tty:
            yield
            return
        if self._status is not None:
            previous = self._status_text
            self._status.update(message)
            self._status_text = message
            try:
                yield
            finally:
                self._status.update(previous)
                self._status_text = previous
            return
        with self.console.status(message) as status:
            self._status = status
            self._status_text = message
            try:
                yield
            finally:
                self._status = None
                self._status_text = ""

    def fatal(self, message: str, code: str, status: Optional[int] = None, json_mode: bool = False):
        """
        输出致命错误（不退出进程，退出码由入口返回）

        Args:
            message: 面向用户的错误信息
            code: 错误码，如 AUTH_REQUIRED / NOT_FOUND
            status: HTTP 状态码（可选）
            json_mode: 是否以 JSON 输出
        """
        if json_mode:
            self.json({"error": {"code": code, "message": message, "status": status}})
        else:
            self.error(message)

