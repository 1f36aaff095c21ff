#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Intercom 认证模块

模块概述：
    此模块负责把外部解析出的凭据（访问令牌 + 区域）绑定为一个
    不可变的 ApiSession：固定的基础 URL、Bearer 认证头、API 版本头
    以及 JSON 内容协商头。所有 Intercom API 调用都通过该会话发出。

主要功能：
    1. 区域到基础 URL 的映射（us / eu / au，未知区域回退到 us）
    2. 生成 API 调用所需的固定请求头
    3. 通过 GET /me 校验令牌并获取当前管理员信息

核心类：
    Region:       区域枚举
    Credentials:  凭据（token, region），由外部凭据解析器提供
    ApiSession:   不可变会话绑定
    IntercomAuth: 认证管理器

API 端点：
    校验令牌：GET {base_url}/me

使用示例：
    >>> auth = IntercomAuth(Credentials(token="dG9r...", region=Region.EU))
    >>> session = auth.session
    >>> session.base_url
    'https://api.eu.intercom.io'
    >>> headers = auth.get_auth_headers()

安全注意事项：
    1. 访问令牌是敏感信息，不要在日志中输出完整令牌
    2. 本模块不读取环境变量或文件，凭据由 core.config 解析后传入

作者: Intercom CLI Team
版本: 0.1.0
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


API_VERSION = "2.11"


class Region(Enum):
    """Intercom 部署区域"""
    US = "us"
    EU = "eu"
    AU = "au"

    @classmethod
    def parse(cls, value: Union[str, "Region", None]) -> "Region":
        """解析区域，未识别的值回退到 US"""
        if isinstance(value, Region):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.US


BASE_URLS = {
    Region.US: "https://api.intercom.io",
    Region.EU: "https://api.eu.intercom.io",
    Region.AU: "https://api.au.intercom.io",
}


@dataclass(frozen=True)
class Credentials:
    """访问层所需的全部凭据"""
    token: str
    region: Region = Region.US

    def __post_init__(self):
        if not isinstance(self.region, Region):
            object.__setattr__(self, "region", Region.parse(self.region))


@dataclass(frozen=True)
class ApiSession:
    """不可变会话：令牌、区域、基础 URL 与固定请求头"""
    token: str
    region: Region
    base_url: str
    api_version: str = API_VERSION
    _headers: Dict[str, str] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def create(
        cls, credentials: Credentials, api_version: str = API_VERSION
    ) -> "ApiSession":
        region = Region.parse(credentials.region)
        headers = {
            "Authorization": f"Bearer {credentials.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Intercom-Version": api_version,
        }
        return cls(
            token=credentials.token,
            region=region,
            base_url=BASE_URLS.get(region, BASE_URLS[Region.US]),
            api_version=api_version,
            _headers=headers,
        )

    @property
    def headers(self) -> Dict[str, str]:
        """固定请求头（返回副本，会话本身不可变）"""
        return dict(self._headers)

    def url_for(self, path: str) -> str:
        """把服务端相对路径拼接到基础 URL"""
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path


class IntercomAuth:
    """Intercom 认证管理器"""

    def __init__(self, credentials: Credentials, api_version: str = API_VERSION):
        """
        初始化认证管理器

        Args:
            credentials: 外部解析得到的凭据
            api_version: Intercom-Version 请求头的值
        """
        if not credentials.token:
            raise ValueError("access token must not be empty")
        self.credentials = credentials
        self.session = ApiSession.create(credentials, api_version)
        self.logger = logging.getLogger("intercom.auth")

    @property
    def region(self) -> Region:
        return self.session.region

    def get_auth_headers(self) -> Dict[str, str]:
        """
        获取认证头

        Returns:
            包含认证信息的HTTP头字典
        """
        return self.session.headers

    def masked_token(self) -> str:
        """用于日志/展示的脱敏令牌"""
        token = self.credentials.token
        if len(token) <= 8:
            return "***"
        return f"{token[:4]}...{token[-4:]}"

    def verify(self, api_client) -> Dict[str, Any]:
        """
        通过 GET /me 校验令牌

        Args:
            api_client: RetryableAPIClient 实例

        Returns:
            当前管理员信息

        Raises:
            APIError: 令牌无效（AUTH_FAILED）或网络不可达等
        """
        me = api_client.call_api("GET", "/me")
        self.logger.info(
            f"令牌校验成功: 管理员 {me.get('name') or me.get('email') or me.get('id')}"
            f" (区域 {self.region.value}, 令牌 {self.masked_token()})"
        )
        return me


def workspace_of(me: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """从 /me 响应中提取工作区名称和 app id"""
    app = (me or {}).get("app") or {}
    return {
        "workspace": app.get("name") or "",
        "app_id": str(app.get("id_code") or app.get("id") or ""),
    }
