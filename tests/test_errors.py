#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
错误分类测试

测试 api/errors.py：状态码分类、错误信息提取顺序、Retry-After 解析
以及面向用户的提示文本。
"""

import math

import pytest

from api.errors import (
    APIError,
    ClassifiedError,
    ErrorKind,
    classify_response,
    extract_error_message,
    kind_for_status,
    parse_retry_after,
    unreachable,
)


class TestKindForStatus:
    """状态码分类测试"""

    @pytest.mark.parametrize(
        "status,kind",
        [
            (401, ErrorKind.AUTH_FAILED),
            (403, ErrorKind.PERMISSION_DENIED),
            (404, ErrorKind.NOT_FOUND),
            (429, ErrorKind.RATE_LIMITED),
            (500, ErrorKind.SERVER_ERROR),
            (502, ErrorKind.SERVER_ERROR),
            (400, ErrorKind.REQUEST_FAILED),
            (422, ErrorKind.REQUEST_FAILED),
        ],
    )
    def test_kind_for_status(self, status, kind):
        """测试状态码映射"""
        assert kind_for_status(status) is kind

    def test_exit_codes(self):
        """测试专用退出码"""
        assert ErrorKind.AUTH_FAILED.exit_code == 2
        assert ErrorKind.NOT_FOUND.exit_code == 3
        assert ErrorKind.SERVER_ERROR.exit_code == 1
        assert ErrorKind.UNREACHABLE.exit_code == 1

    def test_only_rate_limit_retryable(self):
        """测试只有 429 可重试"""
        assert [k for k in ErrorKind if k.retryable] == [ErrorKind.RATE_LIMITED]


class TestExtractErrorMessage:
    """错误信息提取测试"""

    def test_errors_list_first(self):
        """测试优先使用 errors[0].message"""
        body = {"errors": [{"message": "first"}, {"message": "second"}], "message": "top"}
        assert extract_error_message(body, "transport") == "first"

    def test_top_level_message(self):
        """测试回退到顶层 message"""
        assert extract_error_message({"message": "top"}, "transport") == "top"

    def test_empty_errors_list(self):
        """测试空 errors 列表回退"""
        assert extract_error_message({"errors": []}, "transport") == "transport"

    def test_transport_message(self):
        """测试非字典响应体回退到传输层文本"""
        assert extract_error_message("<html>", "Request failed with status code 502") == (
            "Request failed with status code 502"
        )

    def test_unknown_error(self):
        """测试最终回退"""
        assert extract_error_message(None) == "Unknown error"


class TestParseRetryAfter:
    """Retry-After 解析测试"""

    def test_numeric_value(self):
        assert parse_retry_after({"Retry-After": "5"}) == 5.0

    def test_lowercase_header(self):
        assert parse_retry_after({"retry-after": "7"}) == 7.0

    def test_missing_header(self):
        assert parse_retry_after({}) == 10.0
        assert parse_retry_after(None, default=3) == 3

    @pytest.mark.parametrize("raw", ["abc", "-1", "nan", "", "inf", "Infinity", "1e400"])
    def test_invalid_value_uses_default(self, raw):
        """测试无法解析、负数或非有限值时使用默认值"""
        value = parse_retry_after({"Retry-After": raw})
        assert value == 10.0
        assert not math.isnan(value)


class TestClassifyResponse:
    """响应分类测试"""

    def test_not_found(self, make_response):
        """测试 404 分类"""
        error = classify_response(make_response(404, {"errors": [{"message": "ticket not found"}]}))
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.message == "ticket not found"
        assert error.status == 404
        assert error.retry_after is None
        assert error.user_message == "Not found: ticket not found"

    def test_rate_limited(self, make_response):
        """测试 429 携带等待时间"""
        error = classify_response(make_response(429, {}, headers={"Retry-After": "5"}))
        assert error.kind is ErrorKind.RATE_LIMITED
        assert error.retry_after == 5.0

    def test_non_json_body(self, make_response):
        """测试非 JSON 错误响应"""
        error = classify_response(make_response(500, text="Internal Server Error"))
        assert error.kind is ErrorKind.SERVER_ERROR
        assert error.message == "Request failed with status code 500"
        assert error.user_message == "Intercom API error (500): Request failed with status code 500"

    def test_auth_failed_message(self, make_response):
        """测试 401 提示重新登录"""
        error = classify_response(make_response(401, {"errors": [{"message": "Access Token Invalid"}]}))
        assert error.kind is ErrorKind.AUTH_FAILED
        assert "intercom auth login" in error.user_message


class TestAPIError:
    """APIError 测试"""

    def test_wraps_classified_error(self):
        """测试属性透传"""
        classified = ClassifiedError(ErrorKind.PERMISSION_DENIED, "forbidden", status=403)
        error = APIError(classified)
        assert error.kind is ErrorKind.PERMISSION_DENIED
        assert error.status == 403
        assert error.message == "forbidden"
        assert str(error) == classified.user_message
        assert error.exit_code == 1

    def test_unreachable(self):
        """测试不可达错误"""
        error = unreachable(ConnectionError("timed out"))
        assert error.kind is ErrorKind.UNREACHABLE
        assert error.status is None
        assert error.message == "timed out"
        assert "Could not connect" in error.user_message

