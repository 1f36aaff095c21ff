#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
输入验证模块

模块概述：
    此模块提供命令行输入的验证功能，用于防止安全漏洞和无效请求，包括：
    - 资源 ID 格式验证（ID 会被拼接进请求路径，防止路径遍历）
    - 区域验证
    - 日期时间解析（--until / --after / --before）
    - --limit 参数解析

主要功能：
    1. 验证资源 ID 格式
    2. 验证区域取值
    3. 解析 ISO 8601 / YYYY-MM-DD 日期时间
    4. 解析数量上限

安全考虑：
    - 资源 ID 只允许字母、数字、下划线和短横线
    - 拒绝包含路径遍历序列或其 URL 编码形式的 ID

作者: Intercom CLI Team
版本: 0.1.0
"""

import re
import datetime as dt
from typing import Any, Optional

from api.auth import Region


# 资源 ID 格式：只允许字母、数字、下划线和短横线
RESOURCE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')

DATETIME_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d",
]


class ValidationError(ValueError):
    """验证错误异常"""
    pass


def validate_resource_id(value: Any, kind: str = "id") -> str:
    """
    验证资源 ID 格式，防止路径遍历

    Args:
        value: 要验证的 ID
        kind: ID 类型名称（用于错误消息）

    Returns:
        str: 验证通过的 ID

    Raises:
        ValidationError: 当 ID 格式无效时

    Examples:
        >>> validate_resource_id("403920115", "conversation id")
        '403920115'
        >>> validate_resource_id("../admins", "contact id")  # 抛出 ValidationError
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {kind}: must be a string")

    if not value:
        raise ValidationError(f"Invalid {kind}: must not be empty")

    dangerous_patterns = ['..', '/', '\\', '%2e', '%2f', '%5c']
    lowered = value.lower()
    for pattern in dangerous_patterns:
        if pattern in lowered:
            raise ValidationError(
                f"Invalid {kind}: contains illegal sequence '{pattern}'"
            )

    if not RESOURCE_ID_PATTERN.match(value):
        raise ValidationError(
            f"Invalid {kind}: only letters, digits, '_' and '-' are allowed"
        )

    return value


def validate_region(value: Any) -> Region:
    """
    验证区域，只接受 us / eu / au

    与 Region.parse 不同，这里对未知区域报错而不是回退。
    """
    text = str(value or "").strip().lower()
    try:
        return Region(text)
    except ValueError:
        allowed = ", ".join(r.value for r in Region)
        raise ValidationError(f'Invalid region "{value}". Must be one of: {allowed}')


def parse_datetime(value: Any) -> dt.datetime:
    """
    解析日期时间

    支持 YYYY-MM-DD、YYYY-MM-DDTHH:MM[:SS] 以及带时区偏移/Z 的 ISO 8601。
    不带时区的值按本地时间解释。

    Raises:
        ValidationError: 无法解析时
    """
    text = str(value or "").strip()
    if not text:
        raise ValidationError(
            f'Invalid datetime: "{value}". Use ISO 8601 or YYYY-MM-DD format.'
        )

    for fmt in DATETIME_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt)
        except ValueError:
            continue

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return dt.datetime.fromisoformat(iso_text)
    except ValueError:
        raise ValidationError(
            f'Invalid datetime: "{value}". Use ISO 8601 or YYYY-MM-DD format.'
        )


def to_unix(value: dt.datetime) -> int:
    """datetime -> 秒级时间戳"""
    return int(value.timestamp())


def parse_limit(value: Any, default: int = 20, maximum: Optional[int] = None) -> int:
    """
    解析 --limit 参数

    非数字或非正数时使用默认值，超过 maximum 时截断。
    """
    try:
        limit = int(str(value).strip())
    except (TypeError, ValueError):
        limit = default
    if limit <= 0:
        limit = default
    if maximum is not None:
        limit = min(limit, maximum)
    return limit
