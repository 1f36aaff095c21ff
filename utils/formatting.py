#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
展示格式化工具
时间戳、相对时长、HTML 正文预览
"""

import re
import html
import time
import datetime as dt
from typing import Any, Optional


PLACEHOLDER = "—"

_BR_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)
_P_CLOSE_PATTERN = re.compile(r'</p>', re.IGNORECASE)
_TAG_PATTERN = re.compile(r'<[^>]+>')


def iso_timestamp(ts: Any) -> str:
    """秒级时间戳 -> UTC ISO 8601（毫秒精度），空值返回占位符"""
    if not ts:
        return PLACEHOLDER
    try:
        seconds = float(ts)
    except (TypeError, ValueError):
        return PLACEHOLDER
    value = dt.datetime.fromtimestamp(seconds, tz=dt.timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def human_duration(ts: Any, now: Optional[float] = None) -> str:
    """距今的相对时长，如 "2 hours"、"a day"，空值返回占位符"""
    if not ts:
        return PLACEHOLDER
    current = time.time() if now is None else now
    seconds = abs(current - float(ts))

    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"
    if minutes < 45:
        return f"{round(minutes)} minutes"
    if minutes < 90:
        return "an hour"
    if hours < 22:
        return f"{round(hours)} hours"
    if hours < 36:
        return "a day"
    if days < 26:
        return f"{round(days)} days"
    if days < 46:
        return "a month"
    if days < 320:
        return f"{round(days / 30.4)} months"
    if days < 548:
        return "a year"
    return f"{round(days / 365)} years"


def minutes_since(ts: Any, now: Optional[float] = None) -> Optional[int]:
    if not ts:
        return None
    current = time.time() if now is None else now
    return round((current - float(ts)) / 60)


def strip_html(text: Optional[str]) -> str:
    """去掉 HTML 标签，<br> 和 </p> 转为换行"""
    if not text:
        return ""
    text = _BR_PATTERN.sub("\n", text)
    text = _P_CLOSE_PATTERN.sub("\n", text)
    text = _TAG_PATTERN.sub("", text)
    return html.unescape(text).replace("\xa0", " ").strip()


def preview(text: Optional[str], max_len: int = 60) -> str:
    """单行预览，超长时以省略号截断"""
    if not text:
        return PLACEHOLDER
    clean = " ".join(strip_html(text).split())
    if not clean:
        return PLACEHOLDER
    if len(clean) <= max_len:
        return clean
    return clean[: max_len - 1] + "…"


def or_placeholder(value: Any) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    return str(value)
