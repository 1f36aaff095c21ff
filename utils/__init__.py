#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
工具模块包

模块概述：
    此包包含跨命令使用的通用工具函数，不依赖网络或终端状态。

包结构：
    utils/
    ├── __init__.py         - 包初始化
    ├── formatting.py       - 时间戳、相对时长、HTML 预览
    └── validators.py       - 输入验证（资源 ID、区域、日期、数量上限）

设计原则：
    - 工具函数应是无状态的纯函数
    - 尽量减少对其他模块的依赖

作者: Intercom CLI Team
版本: 0.1.0
"""
