#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
配置模块测试
测试 core/config.py 中的凭据存储、凭据解析和客户端设置
"""

import os
import stat
import sys

import pytest
import yaml

from api import Region
from core.config import (
    CliConfig,
    ClientSettings,
    ConfigManager,
    default_config_dir,
)


class TestClientSettings:
    """客户端设置测试"""

    def test_default_values(self):
        """测试默认值"""
        settings = ClientSettings()
        assert settings.timeout == 30.0
        assert settings.api_version == "2.11"
        assert settings.rate_limit_budget == 1000
        assert settings.rate_limit_warn_threshold == 900
        assert settings.default_retry_after == 10.0
        assert settings.max_rate_limit_retries is None
        assert settings.log_level == "WARNING"

    def test_from_dict_ignores_unknown(self, caplog):
        """测试忽略未知键并记录警告"""
        settings = ClientSettings.from_dict({"timeout": 5, "colour": "blue"})
        assert settings.timeout == 5
        assert "colour" in caplog.text

    def test_from_none(self):
        assert ClientSettings.from_dict(None) == ClientSettings()

    def test_from_dict_converts_quoted_numbers(self):
        """测试带引号的数值按字段类型转换"""
        settings = ClientSettings.from_dict({
            "rate_limit_warn_threshold": "900",
            "max_rate_limit_retries": "3",
            "timeout": "12.5",
            "default_retry_after": 5,
        })
        assert settings.rate_limit_warn_threshold == 900
        assert settings.max_rate_limit_retries == 3
        assert settings.timeout == 12.5
        assert settings.default_retry_after == 5.0
        assert isinstance(settings.default_retry_after, float)

    @pytest.mark.parametrize(
        "key,value",
        [
            ("rate_limit_warn_threshold", "lots"),
            ("max_rate_limit_retries", "3.5"),
            ("timeout", "inf"),
            ("rate_limit_budget", None),
            ("default_retry_after", True),
        ],
    )
    def test_from_dict_invalid_value_uses_default(self, caplog, key, value):
        """测试无法转换的值使用默认值并记录警告"""
        settings = ClientSettings.from_dict({key: value})
        assert getattr(settings, key) == getattr(ClientSettings(), key)
        assert key in caplog.text

    def test_from_dict_null_retry_cap(self):
        """测试 max_rate_limit_retries 允许 null"""
        assert ClientSettings.from_dict({"max_rate_limit_retries": None}).max_rate_limit_retries is None


class TestCliConfig:
    """凭据配置测试"""

    def test_region_coerced(self):
        """测试区域字符串转换为枚举"""
        config = CliConfig(token="tok", region="eu")
        assert config.region is Region.EU

    def test_to_dict(self):
        config = CliConfig(token="tok", workspace="Acme", app_id="abc", region=Region.AU)
        assert config.to_dict() == {"token": "tok", "workspace": "Acme", "app_id": "abc", "region": "au"}


class TestConfigManagerStorage:
    """凭据存储测试"""

    def test_read_missing(self, config_manager):
        """测试配置文件不存在"""
        assert config_manager.read_config() is None

    def test_write_then_read(self, config_manager):
        """测试写入后读取"""
        config_manager.write_config(CliConfig(token="tok", workspace="Acme", app_id="abc", region="eu"))

        config = config_manager.read_config()
        assert config.token == "tok"
        assert config.workspace == "Acme"
        assert config.app_id == "abc"
        assert config.region is Region.EU

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX 权限")
    def test_file_permissions(self, config_manager, config_dir):
        """测试目录 0700、文件 0600"""
        config_manager.write_config(CliConfig(token="tok"))

        assert stat.S_IMODE(os.stat(config_dir).st_mode) == 0o700
        assert stat.S_IMODE(os.stat(config_manager.config_path).st_mode) == 0o600

    def test_write_preserves_settings(self, config_manager, config_dir):
        """测试重新登录保留 settings 段"""
        config_dir.mkdir()
        config_manager.config_path.write_text(
            yaml.dump({"token": "old", "settings": {"timeout": 5}}), encoding="utf-8"
        )

        config_manager.write_config(CliConfig(token="new"))

        data = yaml.safe_load(config_manager.config_path.read_text(encoding="utf-8"))
        assert data["token"] == "new"
        assert data["settings"] == {"timeout": 5}

    def test_invalid_yaml(self, config_manager, config_dir):
        """测试 YAML 格式错误视为未配置"""
        config_dir.mkdir()
        config_manager.config_path.write_text("token: [unclosed", encoding="utf-8")
        assert config_manager.read_config() is None

    def test_non_mapping_yaml(self, config_manager, config_dir):
        config_dir.mkdir()
        config_manager.config_path.write_text("- a\n- b\n", encoding="utf-8")
        assert config_manager.read_config() is None

    def test_delete_config(self, config_manager):
        """测试删除配置"""
        assert config_manager.delete_config() is False
        config_manager.write_config(CliConfig(token="tok"))
        assert config_manager.delete_config() is True
        assert not config_manager.config_path.exists()


class TestResolveCredentials:
    """凭据解析优先级测试"""

    def test_env_token_wins(self, config_dir):
        """测试环境变量优先于配置文件"""
        manager = ConfigManager(config_dir=config_dir, environ={"INTERCOM_TOKEN": "env-tok"})
        manager.write_config(CliConfig(token="file-tok", region="au"))

        credentials = manager.resolve_credentials()
        assert credentials.token == "env-tok"
        assert credentials.region is Region.US

    def test_env_region(self, config_dir):
        manager = ConfigManager(
            config_dir=config_dir, environ={"INTERCOM_TOKEN": "env-tok", "INTERCOM_REGION": "eu"}
        )
        assert manager.resolve_credentials().region is Region.EU

    def test_file_token(self, config_manager):
        """测试回退到配置文件"""
        config_manager.write_config(CliConfig(token="file-tok", region="au"))

        credentials = config_manager.resolve_credentials()
        assert credentials.token == "file-tok"
        assert credentials.region is Region.AU

    def test_none_when_unconfigured(self, config_manager):
        assert config_manager.resolve_credentials() is None


class TestLoadSettings:
    """设置加载测试"""

    def test_settings_section(self, config_manager, config_dir):
        config_dir.mkdir()
        config_manager.config_path.write_text(
            yaml.dump({"token": "tok", "settings": {"max_rate_limit_retries": 5, "timeout": 10}}),
            encoding="utf-8",
        )

        settings = config_manager.load_settings()
        assert settings.max_rate_limit_retries == 5
        assert settings.timeout == 10

    def test_quoted_values_converted(self, config_manager, config_dir):
        """测试配置文件中带引号的数值被转换"""
        config_dir.mkdir()
        config_manager.config_path.write_text(
            "token: tok\nsettings:\n  rate_limit_warn_threshold: \"900\"\n  max_rate_limit_retries: \"3\"\n",
            encoding="utf-8",
        )

        settings = config_manager.load_settings()
        assert settings.rate_limit_warn_threshold == 900
        assert settings.max_rate_limit_retries == 3

    def test_env_log_level(self, config_dir):
        """测试 INTERCOM_LOG_LEVEL 覆盖日志级别"""
        manager = ConfigManager(config_dir=config_dir, environ={"INTERCOM_LOG_LEVEL": "debug"})
        assert manager.load_settings().log_level == "DEBUG"

    def test_default_config_dir_override(self, monkeypatch, tmp_path):
        """测试 INTERCOM_CONFIG_DIR 覆盖配置目录"""
        monkeypatch.setenv("INTERCOM_CONFIG_DIR", str(tmp_path / "custom"))
        assert default_config_dir() == tmp_path / "custom"
        assert ConfigManager().config_path == tmp_path / "custom" / "config.yaml"
