#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
命令层公共组件
命令上下文、命令错误和客户端获取
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from api import Credentials, IntercomAPI
from core.config import ClientSettings, ConfigManager
from core.output import ConsoleDisplay
from utils.formatting import iso_timestamp
from utils.validators import ValidationError, validate_resource_id


AUTH_REQUIRED_MESSAGE = "Not authenticated. Run 'intercom auth login' or set INTERCOM_TOKEN."


class CommandError(Exception):
    """命令执行失败（参数错误、资源查找失败等）"""

    def __init__(self, message: str, code: str = "INVALID_ARGUMENT", exit_code: int = 1,
                 status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_code = exit_code
        self.status = status


def default_client_factory(credentials: Credentials, display, settings: ClientSettings) -> IntercomAPI:
    return IntercomAPI.from_credentials(credentials, display=display, settings=settings)


@dataclass
class CommandContext:
    """命令执行上下文"""
    display: ConsoleDisplay
    config_manager: ConfigManager
    settings: ClientSettings = field(default_factory=ClientSettings)
    client_factory: Callable[..., IntercomAPI] = default_client_factory
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("intercom.commands"))

    def get_client(self) -> IntercomAPI:
        """按已解析的凭据创建客户端，未登录时抛出 AUTH_REQUIRED"""
        credentials = self.config_manager.resolve_credentials()
        if credentials is None:
            raise CommandError(AUTH_REQUIRED_MESSAGE, code="AUTH_REQUIRED", exit_code=2, status=401)
        return self.client_factory(credentials, self.display, self.settings)

    def client_for(self, credentials: Credentials) -> IntercomAPI:
        return self.client_factory(credentials, self.display, self.settings)


def add_json_flag(parser):
    parser.add_argument('--json', action='store_true', help='Output as JSON')


def resource_id(value: str, kind: str) -> str:
    """验证资源 ID，失败时转为 CommandError"""
    try:
        return validate_resource_id(value, kind)
    except ValidationError as e:
        raise CommandError(str(e))


def resolve_admin_id(client: IntercomAPI, admin_id: Optional[str]) -> str:
    """未指定 --admin-id 时使用当前管理员"""
    if admin_id:
        return resource_id(admin_id, "admin id")
    me = client.get_me()
    return str(me.get("id"))


def require_tag(client: IntercomAPI, name: str, hint: str) -> Dict[str, Any]:
    """按名称查找标签，不存在时抛出 NOT_FOUND"""
    tag = client.find_tag(name)
    if tag is None:
        raise CommandError(f'Tag "{name}" not found. {hint}', code="NOT_FOUND", exit_code=3, status=404)
    return tag


def enrich(record: Dict[str, Any], *timestamp_fields: str) -> Dict[str, Any]:
    """字符串化 id 并追加 <field>_human 时间戳"""
    enriched = dict(record)
    enriched["id"] = str(record.get("id"))
    for name in timestamp_fields:
        enriched[f"{name}_human"] = iso_timestamp(record.get(name))
    return enriched


def list_payload(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"data": records, "total": len(records)}
