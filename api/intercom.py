#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Intercom REST API 模块

模块概述：
    此模块在 RetryableAPIClient 之上提供命令层使用的全部调用接口：
    单次调用（get/post/put/delete）以及两种游标分页（GET 列表和
    POST 搜索）。分页结果在返回前全部拉取完毕，调用方只会拿到
    扁平的记录列表或单个对象，不会接触原始分页。

主要功能：
    1. 单次调用：get / post / put / delete
    2. GET 游标分页：paginate
    3. POST 搜索分页：paginate_search
    4. 常用查询：当前管理员（/me）、标签查找

核心类：
    IntercomAPI:
        Intercom API 客户端，封装认证、传输、预算跟踪与分页。

分页处理：
    GET 列表（paginate）：
    1. 请求携带 per_page=50，后续页追加 starting_after=<cursor>
    2. 记录位于响应的 data_key 字段
    3. 响应中 pages.next.starting_after 存在时继续，否则结束
    4. 达到正数 limit 时立即停止并截断到 limit 条

    POST 搜索（paginate_search）：
    1. 请求体携带 query / sort / pagination.per_page
    2. 后续页在 pagination 中追加 starting_after
    3. 其余规则同上

API 端点（基础路径由区域决定，如 https://api.intercom.io）：
    GET  /me                    - 当前管理员
    GET  /tags                  - 标签列表
    POST /conversations/search  - 会话搜索
    GET  /contacts              - 联系人列表
    ...（其余端点由 commands 包按需拼接）

使用示例：
    >>> api = IntercomAPI.from_credentials(Credentials("tok", Region.US))
    >>> contacts = api.paginate("/contacts", data_key="data", limit=100)
    >>> convs = api.paginate_search(
    ...     "/conversations/search",
    ...     {"query": {"operator": "AND", "value": [...]},
    ...      "pagination": {"per_page": 20}},
    ...     data_key="conversations",
    ...     limit=20,
    ... )

注意事项：
    1. 所有调用严格串行，后一页依赖前一页的游标
    2. 不做去重，信任服务端排序
    3. 中途出错时已拉取的部分结果直接丢弃，错误向上抛出

作者: Intercom CLI Team
版本: 0.1.0
"""

import logging
from typing import Any, Dict, List, Optional

from .auth import API_VERSION, Credentials, IntercomAuth
from .base import RateGovernor, RetryableAPIClient


DEFAULT_PAGE_SIZE = 50


def next_cursor(body: Any) -> Optional[str]:
    """提取 pages.next.starting_after，不存在时返回 None"""
    if not isinstance(body, dict):
        return None
    pages = body.get("pages")
    if not isinstance(pages, dict):
        return None
    next_page = pages.get("next")
    if not isinstance(next_page, dict):
        return None
    return next_page.get("starting_after") or None


def _items(body: Any, data_key: str) -> List[Any]:
    if not isinstance(body, dict):
        return []
    return list(body.get(data_key) or [])


def _limit_reached(results: List[Any], limit: Optional[int]) -> bool:
    return bool(limit) and limit > 0 and len(results) >= limit


class IntercomAPI:
    """Intercom API 客户端"""

    def __init__(self, auth: IntercomAuth, api_client: Optional[RetryableAPIClient] = None):
        """
        初始化 Intercom API 客户端

        Args:
            auth: 认证管理器
            api_client: API客户端实例，默认按认证会话创建
        """
        self.auth = auth
        self.api_client = api_client or RetryableAPIClient(auth.session)
        self.logger = logging.getLogger("intercom.api")

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        display=None,
        settings=None,
        governor: Optional[RateGovernor] = None,
    ) -> "IntercomAPI":
        """
        根据凭据和客户端设置创建完整客户端

        Args:
            credentials: 凭据（token, region）
            display: 注入的显示器
            settings: core.config.ClientSettings 或兼容对象，None 时使用默认值
            governor: 预算跟踪器，None 时按设置创建
        """
        api_version = getattr(settings, "api_version", API_VERSION)
        auth = IntercomAuth(credentials, api_version=api_version)
        if governor is None:
            governor = RateGovernor(
                budget=getattr(settings, "rate_limit_budget", 1000),
                warn_threshold=getattr(settings, "rate_limit_warn_threshold", 900),
            )
        api_client = RetryableAPIClient(
            auth.session,
            governor=governor,
            display=display,
            timeout=getattr(settings, "timeout", 30.0),
            default_retry_after=getattr(settings, "default_retry_after", 10.0),
            max_rate_limit_retries=getattr(settings, "max_rate_limit_retries", None),
        )
        return cls(auth, api_client)

    @property
    def governor(self) -> RateGovernor:
        return self.api_client.governor

    # ========== 单次调用 ==========

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.api_client.call_api("GET", path, params=params)

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        return self.api_client.call_api("POST", path, json=body if body is not None else {})

    def put(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        return self.api_client.call_api("PUT", path, json=body if body is not None else {})

    def delete(self, path: str) -> Any:
        return self.api_client.call_api("DELETE", path)

    # ========== 分页 ==========

    def paginate(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data_key: str = "data",
        limit: Optional[int] = None,
    ) -> List[Any]:
        """
        GET 游标分页，返回全部记录

        Args:
            path: 列表端点
            params: 额外查询参数
            data_key: 响应中记录数组所在的键
            limit: 最大记录数，None/0/负数表示不限制

        Returns:
            按服务端顺序排列的记录列表
        """
        results: List[Any] = []
        cursor: Optional[str] = None
        page_num = 0

        while True:
            query: Dict[str, Any] = dict(params or {})
            query["per_page"] = DEFAULT_PAGE_SIZE
            if cursor:
                query["starting_after"] = cursor

            body = self.get(path, query)
            results.extend(_items(body, data_key))
            page_num += 1
            self.logger.debug(f"GET {path} 第 {page_num} 页，累计 {len(results)} 条")

            if _limit_reached(results, limit):
                return results[:limit]

            cursor = next_cursor(body)
            if not cursor:
                break

        self.logger.info(f"GET {path} 拉取完成: {page_num} 页，{len(results)} 条")
        return results

    def paginate_search(
        self,
        path: str,
        body: Dict[str, Any],
        data_key: str = "data",
        limit: Optional[int] = None,
    ) -> List[Any]:
        """
        POST 搜索分页，返回全部记录

        游标写入请求体的 pagination.starting_after，调用方给出的
        pagination.per_page 保留。调用方传入的 body 不会被修改。
        """
        results: List[Any] = []
        cursor: Optional[str] = None
        page_num = 0
        base_pagination = dict(body.get("pagination") or {})

        while True:
            payload: Dict[str, Any] = dict(body)
            if cursor:
                payload["pagination"] = dict(base_pagination, starting_after=cursor)

            data = self.post(path, payload)
            results.extend(_items(data, data_key))
            page_num += 1
            self.logger.debug(f"POST {path} 第 {page_num} 页，累计 {len(results)} 条")

            if _limit_reached(results, limit):
                return results[:limit]

            cursor = next_cursor(data)
            if not cursor:
                break

        self.logger.info(f"POST {path} 拉取完成: {page_num} 页，{len(results)} 条")
        return results

    # ========== 常用查询 ==========

    def get_me(self) -> Dict[str, Any]:
        """当前管理员（同时校验令牌）"""
        return self.auth.verify(self.api_client)

    def list_tags(self) -> List[Dict[str, Any]]:
        response = self.get("/tags")
        return list((response or {}).get("data") or [])

    def find_tag(self, name: str) -> Optional[Dict[str, Any]]:
        """按名称（不区分大小写）查找标签"""
        wanted = name.lower()
        for tag in self.list_tags():
            if str(tag.get("name", "")).lower() == wanted:
                return tag
        return None
