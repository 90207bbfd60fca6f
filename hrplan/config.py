"""
配置中心（Configuration Center）

说明：
- 统一管理规划器的运行配置，全部从环境变量读取并提供安全的默认值；
- 读取顺序：环境变量（优先） > 内置默认值。

常用环境变量（全部可选）：
1) 日志
   - `LOG_LEVEL`：根日志等级，默认 INFO（可选 DEBUG/INFO/WARNING/ERROR）。

2) 规划器
   - `PLANNER_LOOKBACK_DAYS`：参与估算的活动回溯天数，默认 42。
   - `PLANNER_EXPANDED_LOOKBACK_DAYS`：默认窗口内活动不足 3 个时，HRmax
     估算使用的扩展窗口，默认 90。
   - `PLANNER_RESAMPLE_INTERVAL`：重采样网格间隔（秒），默认 5。
   - `PLANNER_DEFAULT_SPORT`：请求未指定运动类型时使用的默认值，默认 run。

估算阈值（漂移上限、CV 容差、斜率上限等）不在此处配置，它们与使用它们的
估算模块放在一起。
"""

import os


def _int_from_env(name: str, default: int) -> int:
    """读取正整数环境变量；缺失或非法时回退到默认值。"""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# 日志
# LOG_LEVEL 控制根日志记录器，见 hrplan/logging_config.py
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# 规划器
LOOKBACK_DAYS = _int_from_env('PLANNER_LOOKBACK_DAYS', 42)
EXPANDED_LOOKBACK_DAYS = _int_from_env('PLANNER_EXPANDED_LOOKBACK_DAYS', 90)
RESAMPLE_INTERVAL = _int_from_env('PLANNER_RESAMPLE_INTERVAL', 5)
DEFAULT_SPORT = os.environ.get('PLANNER_DEFAULT_SPORT', 'run').strip().lower() or 'run'
