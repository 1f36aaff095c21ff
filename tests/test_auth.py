#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
认证模块测试
测试 api/auth.py 中的区域映射、凭据和不可变会话
"""

import dataclasses

import pytest

from api.auth import (
    API_VERSION,
    ApiSession,
    Credentials,
    IntercomAuth,
    Region,
    workspace_of,
)


class TestRegion:
    """区域测试"""

    @pytest.mark.parametrize(
        "region,url",
        [
            ("us", "https://api.intercom.io"),
            ("eu", "https://api.eu.intercom.io"),
            ("au", "https://api.au.intercom.io"),
        ],
    )
    def test_base_url(self, region, url):
        """测试区域对应的基础 URL"""
        session = ApiSession.create(Credentials(token="tok", region=region))
        assert session.base_url == url

    def test_unknown_region_falls_back_to_us(self):
        """测试未知区域回退到 us"""
        assert Region.parse("mars") is Region.US
        assert Region.parse(None) is Region.US
        assert Credentials(token="tok", region="mars").region is Region.US

    def test_parse_case_insensitive(self):
        assert Region.parse(" EU ") is Region.EU


class TestApiSession:
    """不可变会话测试"""

    def test_fixed_headers(self):
        """测试固定请求头"""
        session = ApiSession.create(Credentials(token="secret", region=Region.AU))
        assert session.headers == {
            "Authorization": "Bearer secret",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Intercom-Version": API_VERSION,
        }

    def test_headers_returns_copy(self):
        """测试修改返回的请求头不影响会话"""
        session = ApiSession.create(Credentials(token="secret"))
        headers = session.headers
        headers["Authorization"] = "Bearer other"
        assert session.headers["Authorization"] == "Bearer secret"

    def test_session_frozen(self):
        """测试会话不可修改"""
        session = ApiSession.create(Credentials(token="secret"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            session.base_url = "https://example.com"

    def test_custom_api_version(self):
        session = ApiSession.create(Credentials(token="secret"), api_version="2.10")
        assert session.headers["Intercom-Version"] == "2.10"

    def test_url_for(self):
        """测试路径拼接"""
        session = ApiSession.create(Credentials(token="secret", region=Region.EU))
        assert session.url_for("/contacts") == "https://api.eu.intercom.io/contacts"
        assert session.url_for("tags") == "https://api.eu.intercom.io/tags"


class TestIntercomAuth:
    """认证管理器测试"""

    def test_empty_token_rejected(self):
        """测试空令牌"""
        with pytest.raises(ValueError):
            IntercomAuth(Credentials(token=""))

    def test_masked_token(self):
        """测试令牌脱敏"""
        auth = IntercomAuth(Credentials(token="dG9rOmFiY2RlZmdoaWpr"))
        assert auth.masked_token() == "dG9r...aWpr"
        assert IntercomAuth(Credentials(token="short")).masked_token() == "***"

    def test_auth_headers(self):
        auth = IntercomAuth(Credentials(token="tok", region="eu"))
        assert auth.region is Region.EU
        assert auth.get_auth_headers()["Authorization"] == "Bearer tok"


class TestWorkspaceOf:
    """工作区提取测试"""

    def test_workspace_from_app(self):
        me = {"name": "Ann", "app": {"name": "Acme", "id_code": "abc123"}}
        assert workspace_of(me) == {"workspace": "Acme", "app_id": "abc123"}

    def test_missing_app(self):
        assert workspace_of({"name": "Ann"}) == {"workspace": "", "app_id": ""}
        assert workspace_of(None) == {"workspace": "", "app_id": ""}
