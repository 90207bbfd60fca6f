"""
日志初始化（Logging Bootstrap）

说明：
- 统一初始化根日志记录器（root logger），设置格式与日志等级；
- 等级从显式传入 `level` 或环境变量 `LOG_LEVEL` 读取，默认 INFO，并同步设置到
  `hrplan` 记录器，便于单独打开估算模块的调试输出；
- 在 hrplan/main.py 启动时调用一次。
"""

import logging
import os
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def setup_logging(level: Optional[str] = None) -> int:
    """
    初始化全局日志配置，返回实际生效的数值等级。

    参数：
        level: 可选的日志等级名称。若未提供，则读取 LOG_LEVEL（默认 INFO）。
    """
    name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger('hrplan').setLevel(numeric)
    return numeric
