#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Intercom API 模块包

模块概述：
    此包封装了 Intercom REST API 的访问层，提供统一的会话/认证管理、
    请求预算跟踪、错误分类与 429 重试，以及两种游标分页。

包结构：
    api/
    ├── __init__.py     - 包初始化，导出公共接口
    ├── auth.py         - 区域、凭据、不可变会话（IntercomAuth）
    ├── base.py         - 基础网络层（RateGovernor, RetryableAPIClient）
    ├── errors.py       - 错误分类（ErrorKind, ClassifiedError, APIError）
    └── intercom.py     - 业务 API 与分页（IntercomAPI）

导出的类：
    认证相关：
        - Region, Credentials, ApiSession, IntercomAuth

    网络层：
        - RateGovernor: 每分钟请求计数与提示
        - RetryableAPIClient: 发送请求，429 时按 Retry-After 重试

    错误：
        - ErrorKind, ClassifiedError, APIError

    业务 API：
        - IntercomAPI: get/post/put/delete/paginate/paginate_search

API 调用流程：
    1. 外部凭据解析器提供 Credentials(token, region)
    2. IntercomAuth 构建 ApiSession（基础 URL + 固定请求头）
    3. RetryableAPIClient 计数、发送、分类错误、处理 429 重试
    4. IntercomAPI 封装单次调用和分页

使用示例：
    >>> from api import Credentials, IntercomAPI, Region
    >>>
    >>> api = IntercomAPI.from_credentials(Credentials(token, Region.US))
    >>> tickets = api.paginate("/tickets", data_key="tickets", limit=20)

设计原则：
    - 访问层从不打印致命错误、从不退出进程，终止性错误以 APIError 抛出
    - 显示依赖（warn / waiting）由调用方注入

作者: Intercom CLI Team
版本: 0.1.0
"""

from .auth import ApiSession, Credentials, IntercomAuth, Region
from .base import NullDisplay, RateGovernor, RetryableAPIClient
from .errors import APIError, ClassifiedError, ErrorKind
from .intercom import IntercomAPI

__all__ = [
    "ApiSession",
    "Credentials",
    "IntercomAuth",
    "Region",
    "NullDisplay",
    "RateGovernor",
    "RetryableAPIClient",
    "APIError",
    "ClassifiedError",
    "ErrorKind",
    "IntercomAPI",
]
