#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
API 错误分类模块

模块概述：
    此模块把失败的 Intercom API 调用归一化为 ClassifiedError，
    与 requests 的异常/响应形态解耦。分类结果只决定两件事：
    是否在传输层内部重试（仅限 429），以及终止性错误
    以何种提示文本和退出码交给命令层。

错误分类：
    状态码          类型                退出码
    (无响应)        UNREACHABLE         1
    401             AUTH_FAILED         2
    403             PERMISSION_DENIED   1
    404             NOT_FOUND           3
    429             RATE_LIMITED        -（内部重试）
    >= 500          SERVER_ERROR        1
    其他 4xx        REQUEST_FAILED      1

错误信息提取顺序：
    1. body["errors"][0]["message"]
    2. body["message"]
    3. 传输层错误文本（"Request failed with status code <status>"）
    4. "Unknown error"

注意事项：
    1. 本模块不打印任何内容，也不会终止进程
    2. 进程退出码的映射由命令入口（intercom.main）完成

作者: Intercom CLI Team
版本: 0.1.0
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


DEFAULT_RETRY_AFTER = 10.0
UNKNOWN_ERROR = "Unknown error"


class ErrorKind(Enum):
    """错误类型枚举"""
    UNREACHABLE = "unreachable"
    AUTH_FAILED = "auth_failed"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    REQUEST_FAILED = "request_failed"

    @property
    def exit_code(self) -> int:
        """进程退出码（认证失败和资源不存在有专用退出码）"""
        if self is ErrorKind.AUTH_FAILED:
            return 2
        if self is ErrorKind.NOT_FOUND:
            return 3
        return 1

    @property
    def code(self) -> str:
        """--json 模式下输出的错误码"""
        return self.name

    @property
    def retryable(self) -> bool:
        return self is ErrorKind.RATE_LIMITED


@dataclass(frozen=True)
class ClassifiedError:
    """归一化的失败调用描述"""
    kind: ErrorKind
    message: str
    status: Optional[int] = None
    retry_after: Optional[float] = None

    @property
    def user_message(self) -> str:
        """面向用户的提示文本"""
        kind = self.kind
        if kind is ErrorKind.UNREACHABLE:
            return "Could not connect to Intercom. Check your internet connection."
        if kind is ErrorKind.AUTH_FAILED:
            return "Authentication failed. Run 'intercom auth login' to set your token."
        if kind is ErrorKind.PERMISSION_DENIED:
            return "Permission denied. Your token may not have access to this resource."
        if kind is ErrorKind.NOT_FOUND:
            return f"Not found: {self.message}"
        if kind is ErrorKind.RATE_LIMITED:
            return f"Rate limited by Intercom (retry after {self.retry_after:g}s)."
        if kind is ErrorKind.SERVER_ERROR:
            return f"Intercom API error ({self.status}): {self.message}"
        return f"Request failed ({self.status}): {self.message}"

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code


class APIError(Exception):
    """终止性 API 错误，携带一个 ClassifiedError"""

    def __init__(self, error: ClassifiedError):
        super().__init__(error.user_message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def status(self) -> Optional[int]:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def user_message(self) -> str:
        return self.error.user_message

    @property
    def exit_code(self) -> int:
        return self.error.exit_code


def kind_for_status(status: int) -> ErrorKind:
    """HTTP 状态码 -> 错误类型（仅用于 status >= 400）"""
    if status == 401:
        return ErrorKind.AUTH_FAILED
    if status == 403:
        return ErrorKind.PERMISSION_DENIED
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.REQUEST_FAILED


def extract_error_message(
    body: Any, transport_message: Optional[str] = None
) -> str:
    """
    从错误响应体中提取错误信息

    Args:
        body: 已解析的响应体（可能为 None 或非字典）
        transport_message: 传输层错误文本，作为倒数第二级回退

    Returns:
        错误信息字符串，始终非空
    """
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
        if body.get("message"):
            return str(body["message"])
    return transport_message or UNKNOWN_ERROR


def parse_retry_after(
    headers: Optional[Mapping[str, str]], default: float = DEFAULT_RETRY_AFTER
) -> float:
    """
    解析 Retry-After 头（秒）

    缺失、无法解析、为负数或非有限值时返回默认值。
    """
    if not headers:
        return default
    raw = headers.get("Retry-After")
    if raw is None:
        raw = headers.get("retry-after")
    if raw is None:
        return default
    try:
        seconds = float(str(raw).strip())
    except ValueError:
        return default
    if seconds < 0 or not math.isfinite(seconds):  # NaN / inf
        return default
    return seconds


def _safe_json(response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None


def classify_response(
    response, default_retry_after: float = DEFAULT_RETRY_AFTER
) -> ClassifiedError:
    """
    将 status >= 400 的响应分类为 ClassifiedError

    Args:
        response: requests.Response（或具有 status_code/headers/json 的对象）
        default_retry_after: 429 缺少 Retry-After 时的等待秒数

    Returns:
        ClassifiedError 实例
    """
    status = response.status_code
    kind = kind_for_status(status)
    body = _safe_json(response)
    message = extract_error_message(
        body, f"Request failed with status code {status}"
    )

    retry_after = None
    if kind is ErrorKind.RATE_LIMITED:
        retry_after = parse_retry_after(
            getattr(response, "headers", None), default_retry_after
        )

    return ClassifiedError(
        kind=kind, message=message, status=status, retry_after=retry_after
    )


def unreachable(exc: Exception) -> ClassifiedError:
    """未收到响应（连接失败、超时等）"""
    return ClassifiedError(
        kind=ErrorKind.UNREACHABLE,
        message=extract_error_message(None, str(exc) or None),
    )

