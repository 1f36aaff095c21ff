#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
配置管理模块
提供本地凭据存储、客户端设置和凭据解析功能
"""

import os
import math
import logging
from pathlib import Path
from dataclasses import dataclass, asdict, fields
from typing import Optional, Dict, Any, Mapping

import yaml

from api.auth import API_VERSION, Credentials, Region


CONFIG_DIR_ENV = "INTERCOM_CONFIG_DIR"
TOKEN_ENV = "INTERCOM_TOKEN"
REGION_ENV = "INTERCOM_REGION"
LOG_LEVEL_ENV = "INTERCOM_LOG_LEVEL"

CONFIG_FILE_NAME = "config.yaml"

logger = logging.getLogger("intercom.config")


@dataclass
class ClientSettings:
    """客户端设置"""
    timeout: float = 30.0  # 单次请求超时（秒）
    api_version: str = API_VERSION
    rate_limit_budget: int = 1000  # 服务端每分钟上限
    rate_limit_warn_threshold: int = 900  # 达到后提示
    default_retry_after: float = 10.0  # 429 缺少 Retry-After 时的等待
    max_rate_limit_retries: Optional[int] = None  # None 表示不设上限
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ClientSettings":
        """从字典创建设置，按字段类型转换取值，忽略未知键和无法转换的值"""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning(f"忽略未知的设置项: {key}")
                continue
            try:
                values[key] = _coerce_setting(key, value)
            except (TypeError, ValueError):
                logger.warning(f"设置项 {key} 的值无效，使用默认值: {value!r}")
        return cls(**values)


# 设置项取值类型；Optional 字段允许 null
SETTING_TYPES = {
    "timeout": (float, False),
    "api_version": (str, False),
    "rate_limit_budget": (int, False),
    "rate_limit_warn_threshold": (int, False),
    "default_retry_after": (float, False),
    "max_rate_limit_retries": (int, True),
    "log_level": (str, False),
}


def _coerce_setting(key: str, value: Any) -> Any:
    """把 YAML 中的取值转换为字段类型，无法转换时抛出 ValueError"""
    target, nullable = SETTING_TYPES[key]
    if value is None:
        if nullable:
            return None
        raise ValueError(f"{key} must not be null")
    if isinstance(value, bool):
        raise ValueError(f"{key} must not be a boolean")
    if target is str:
        return str(value)
    if target is int:
        return int(str(value).strip())
    number = float(str(value).strip())
    if not math.isfinite(number):
        raise ValueError(f"{key} must be finite")
    return number


@dataclass
class CliConfig:
    """本地保存的凭据配置"""
    token: str
    workspace: str = ""
    app_id: str = ""
    region: Region = Region.US

    def __post_init__(self):
        if not isinstance(self.region, Region):
            self.region = Region.parse(self.region)
        self.app_id = str(self.app_id or "")
        self.workspace = str(self.workspace or "")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["region"] = self.region.value
        return data


def default_config_dir() -> Path:
    """配置目录：INTERCOM_CONFIG_DIR 或 ~/.intercom"""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".intercom"


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_dir: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """
        初始化配置管理器

        Args:
            config_dir: 配置目录，默认 ~/.intercom
            environ: 环境变量映射，默认 os.environ
        """
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()
        self.environ = os.environ if environ is None else environ

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    @staticmethod
    def load_from_file(config_file: Path) -> Optional[Dict[str, Any]]:
        """从YAML文件加载配置"""
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            return None
        except yaml.YAMLError as e:
            logger.warning(f"YAML配置文件格式错误: {config_file}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"配置文件内容不是映射，已忽略: {config_file}")
            return None
        return data

    @staticmethod
    def save_to_file(config: Dict[str, Any], config_file: Path):
        """保存配置到YAML文件（权限 0600）"""
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(config, f, default_flow_style=False, allow_unicode=True, indent=2)
        os.chmod(config_file, 0o600)

    def read_config(self) -> Optional[CliConfig]:
        """读取已保存的凭据配置，不存在或无令牌时返回 None"""
        data = self.load_from_file(self.config_path)
        if not data or not data.get("token"):
            return None
        return CliConfig(
            token=str(data["token"]),
            workspace=data.get("workspace") or "",
            app_id=data.get("app_id") or "",
            region=data.get("region") or Region.US.value,
        )

    def write_config(self, config: CliConfig):
        """写入凭据配置，保留已有的 settings 段"""
        if not self.config_dir.exists():
            self.config_dir.mkdir(parents=True, mode=0o700)
        existing = self.load_from_file(self.config_path) or {}
        data = config.to_dict()
        if "settings" in existing:
            data["settings"] = existing["settings"]
        self.save_to_file(data, self.config_path)
        logger.info(f"凭据已保存: {self.config_path}")

    def delete_config(self) -> bool:
        """删除配置文件，文件不存在时返回 False"""
        try:
            self.config_path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"凭据已删除: {self.config_path}")
        return True

    def resolve_credentials(self) -> Optional[Credentials]:
        """
        解析访问令牌

        优先级：
            1. INTERCOM_TOKEN 环境变量（区域取 INTERCOM_REGION，默认 us）
            2. 配置文件
            3. None（由调用方提示登录）
        """
        env_token = self.environ.get(TOKEN_ENV)
        if env_token:
            return Credentials(
                token=env_token,
                region=Region.parse(self.environ.get(REGION_ENV) or Region.US.value),
            )

        config = self.read_config()
        if config and config.token:
            return Credentials(token=config.token, region=config.region)

        return None

    def load_settings(self) -> ClientSettings:
        """读取 settings 段，INTERCOM_LOG_LEVEL 覆盖日志级别"""
        data = self.load_from_file(self.config_path) or {}
        settings_data = data.get("settings")
        if settings_data is not None and not isinstance(settings_data, dict):
            logger.warning("配置文件中的 settings 不是映射，已忽略")
            settings_data = None
        settings = ClientSettings.from_dict(settings_data)
        env_level = self.environ.get(LOG_LEVEL_ENV)
        if env_level:
            settings.log_level = env_level.upper()
        return settings
