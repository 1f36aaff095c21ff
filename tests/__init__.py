#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Intercom CLI 测试套件包

模块概述：
    此包包含 Intercom CLI 的所有单元测试。使用 pytest 框架
    进行测试组织和执行，HTTP 调用全部通过 unittest.mock 模拟。

包结构：
    tests/
    ├── __init__.py          - 测试包初始化
    ├── conftest.py          - pytest 配置和共享 fixtures
    ├── test_auth.py         - 区域、凭据与会话测试
    ├── test_errors.py       - 错误分类测试
    ├── test_api_base.py     - 请求预算跟踪与传输层测试
    ├── test_pagination.py   - 游标分页测试
    ├── test_config.py       - 凭据存储与设置测试
    ├── test_validators.py   - 输入验证测试
    ├── test_formatting.py   - 展示格式化测试
    ├── test_output.py       - 终端输出测试
    └── test_commands.py     - 命令层与入口测试

运行测试：
    # 运行所有测试
    $ pytest tests/

    # 运行特定测试文件
    $ pytest tests/test_pagination.py

    # 运行带覆盖率报告
    $ pytest tests/ --cov=api --cov=core --cov=commands

作者: Intercom CLI Team
版本: 0.1.0
"""
# Intercom CLI Test Suite
