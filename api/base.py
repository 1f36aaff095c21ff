#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
基础网络层模块
提供认证请求发送、每分钟请求预算跟踪和 429 限流重试功能
"""

import time
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional

import requests

from .auth import ApiSession
from .errors import (
    APIError,
    ClassifiedError,
    ErrorKind,
    classify_response,
    unreachable,
    DEFAULT_RETRY_AFTER,
)


class NullDisplay:
    """不输出任何内容的显示器，访问层的默认显示依赖"""

    def warn(self, message: str) -> None:
        pass

    @contextmanager
    def waiting(self, message: str):
        yield


class RateGovernor:
    """滑动一分钟请求计数器（仅提示，不阻塞请求）"""

    def __init__(
        self,
        budget: int = 1000,
        warn_threshold: int = 900,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        初始化请求预算跟踪器

        Args:
            budget: 服务端每分钟请求上限
            warn_threshold: 达到该计数后开始提示
            window_seconds: 窗口长度（秒）
            clock: 单调时钟，便于测试注入
        """
        self.budget = budget
        self.warn_threshold = warn_threshold
        self.window_seconds = window_seconds
        self.clock = clock
        self.window_start = clock()
        self.count = 0

    def record_request(self) -> int:
        """记录一次外发请求，窗口过期时先重置"""
        now = self.clock()
        if now - self.window_start > self.window_seconds:
            self.window_start = now
            self.count = 0
        self.count += 1
        return self.count

    def should_warn(self) -> bool:
        return self.count >= self.warn_threshold

    def remaining(self) -> int:
        return max(self.budget - self.count, 0)


class RetryableAPIClient:
    """可重试的API客户端（仅对 429 按服务端指定的延迟重试）"""

    def __init__(
        self,
        session: ApiSession,
        governor: Optional[RateGovernor] = None,
        display=None,
        timeout: float = 30.0,
        default_retry_after: float = DEFAULT_RETRY_AFTER,
        max_rate_limit_retries: Optional[int] = None,
    ):
        """
        初始化API客户端

        Args:
            session: 不可变会话（基础 URL + 固定请求头）
            governor: 请求预算跟踪器
            display: 注入的显示器，需提供 warn(message) 和 waiting(message)
            timeout: 单次请求超时（秒）
            default_retry_after: 429 未给出 Retry-After 时的等待秒数
            max_rate_limit_retries: 单次调用的 429 重试上限，None 表示不设上限
        """
        self.session = session
        self.governor = governor or RateGovernor()
        self.display = display or NullDisplay()
        self.timeout = timeout
        self.default_retry_after = default_retry_after
        self.max_rate_limit_retries = max_rate_limit_retries
        self.logger = logging.getLogger("intercom.transport")

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        count = self.governor.record_request()
        if self.governor.should_warn():
            message = (
                f"Approaching rate limit: {count}/{self.governor.budget} "
                "requests this minute."
            )
            self.logger.info(message)
            self.display.warn(message)

        try:
            return requests.request(
                method, url, headers=self.session.headers, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"{method} {url} 无响应: {e}")
            raise APIError(unreachable(e)) from e

    def _decode(self, response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                ClassifiedError(
                    kind=ErrorKind.SERVER_ERROR,
                    message=f"Invalid JSON response: {e}",
                    status=response.status_code,
                )
            ) from e

    def call_api(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        调用API并处理 429 重试

        Args:
            method: HTTP方法
            path: 服务端相对路径
            params: 查询参数
            json: 请求体

        Returns:
            解析后的 JSON 响应体

        Raises:
            APIError: 不可达或终止性 HTTP 错误
        """
        url = self.session.url_for(path)
        kwargs: Dict[str, Any] = {}
        if params is not None:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json

        retries = 0
        while True:
            self.logger.debug(f"{method} {path} (第 {retries + 1} 次发送)")
            response = self._send(method, url, **kwargs)

            if response.status_code < 400:
                return self._decode(response)

            error = classify_response(response, self.default_retry_after)
            if error.kind is not ErrorKind.RATE_LIMITED:
                self.logger.debug(
                    f"{method} {path} 失败: {error.kind.value} ({error.status}) {error.message}"
                )
                raise APIError(error)

            if (
                self.max_rate_limit_retries is not None
                and retries >= self.max_rate_limit_retries
            ):
                self.logger.warning(
                    f"{method} {path} 连续限流 {retries} 次，已达到重试上限"
                )
                raise APIError(error)

            wait_time = error.retry_after
            self.logger.info(f"频率限制，等待 {wait_time:g} 秒后重试 {method} {path}...")
            with self.display.waiting(f"Rate limited. Waiting {wait_time:g}s..."):
                time.sleep(wait_time)
            retries += 1
