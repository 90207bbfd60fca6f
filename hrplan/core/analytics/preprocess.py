"""数据流预处理：重采样、平滑与去尖峰。

原始活动数据流的采样率并不规则（1 Hz 的 FIT 记录、Strava 低分辨率序列、
自动暂停造成的空档）。所有估算模块都基于这里产出的等间隔表示：

    1. 在 [first_time, last_time] 上按 `interval` 秒做最近邻重采样（不插值，
       每个网格点取时间最近的读数）；
    2. 对心率做 `smooth_window` 个样本的居中滑动中位数，忽略缺失/非正读数；
    3. 尖峰限幅：与前一个样本相差超过 `max_hr_step` bpm 时限幅到
       ±max_hr_step，序列长度不变；前一个样本没有心率时不限幅。

时间跨度超过 MAX_GRID_POINTS 个网格点的活动视为格式错误。
"""

import logging
import math
from typing import Any, List, Optional, Sequence

import numpy as np

from ...config import RESAMPLE_INTERVAL
from ...streams.normalize import StreamBundle, normalize_streams
from .estimates import Sample
from .stats import rolling_median

logger = logging.getLogger(__name__)

SMOOTH_WINDOW = 3        # 样本数，5 秒间隔下约 15 秒
MAX_HR_STEP = 15.0       # 相邻样本间允许的最大心率变化（bpm）
MAX_GRID_POINTS = 100_000  # 5 秒间隔下约 139 小时


def _nearest_indices(time: np.ndarray, grid: np.ndarray) -> np.ndarray:
    """每个网格点对应的最近原始时间戳下标。

    距离相同时取较早的读数。要求 `time` 单调不减，乱序输入退回逐点搜索。
    """
    if time.size == 1:
        return np.zeros(grid.size, dtype=int)
    if np.all(np.diff(time) >= 0):
        right = np.searchsorted(time, grid, side='left')
        right = np.clip(right, 1, time.size - 1)
        left = right - 1
        # 相同时间戳取第一个，与线性扫描一致
        left_first = np.searchsorted(time, time[left], side='left')
        right_first = np.searchsorted(time, time[right], side='left')
        choose_left = np.abs(grid - time[left]) <= np.abs(time[right] - grid)
        return np.where(choose_left, left_first, right_first)
    return np.array([int(np.argmin(np.abs(time - t))) for t in grid], dtype=int)


def _pick(channel: Sequence[Optional[float]], idx: int) -> Optional[float]:
    return channel[idx] if idx < len(channel) else None


def grid_size(bundle: StreamBundle, interval: int = RESAMPLE_INTERVAL) -> int:
    """重采样网格的点数：ceil((last - first) / interval) + 1。"""
    start, end = bundle.time[0], bundle.time[-1]
    steps = int(math.ceil((end - start) / interval)) if end > start else 0
    return steps + 1


def resample(bundle: StreamBundle, interval: int = RESAMPLE_INTERVAL) -> List[Sample]:
    time = np.asarray(bundle.time, dtype=float)
    grid = float(time[0]) + interval * np.arange(grid_size(bundle, interval), dtype=float)
    indices = _nearest_indices(time, grid)

    samples = []
    for t, idx in zip(grid, indices):
        idx = int(idx)
        samples.append(Sample(
            time=float(t),
            hr=_pick(bundle.hr, idx),
            power=_pick(bundle.power, idx),
            velocity=_pick(bundle.velocity, idx),
            distance=_pick(bundle.distance, idx),
        ))
    return samples


def clamp_spikes(hr: Sequence[Optional[float]], max_step: float = MAX_HR_STEP) -> List[Optional[float]]:
    """将相邻样本的心率变化限制在 ±max_step 内。缺口保持为缺口，缺口之后的首个读数不限幅。"""
    out: List[Optional[float]] = []
    prev: Optional[float] = None
    for value in hr:
        if value is not None and prev is not None and abs(value - prev) > max_step:
            value = prev + math.copysign(max_step, value - prev)
        out.append(value)
        prev = value
    return out


def preprocess_streams(
    streams: Any,
    interval: int = RESAMPLE_INTERVAL,
    smooth_window: int = SMOOTH_WINDOW,
    max_hr_step: float = MAX_HR_STEP,
) -> Optional[List[Sample]]:
    """
    将原始数据流规范化为等间隔样本。

    参数：
        streams: 原始数据流字典（任意同义键约定）或 StreamBundle。
        interval: 网格间隔（秒）。
        smooth_window: 滑动中位数窗口（样本数）。
        max_hr_step: 每个样本的尖峰限幅（bpm）。

    返回：
        按时间排序的样本；没有可用时间轴或时间跨度过大时返回 None。
        格式错误的输入不会抛出异常。
    """
    bundle = streams if isinstance(streams, StreamBundle) else normalize_streams(streams)
    if bundle is None or not bundle.time:
        return None
    if interval <= 0:
        raise ValueError("interval must be positive")
    if not all(math.isfinite(t) for t in (bundle.time[0], bundle.time[-1])):
        return None
    points = grid_size(bundle, interval)
    if points > MAX_GRID_POINTS:
        logger.debug("[preprocess][skip] reason=span-too-long grid_points=%s", points)
        return None

    samples = resample(bundle, interval)
    smoothed = clamp_spikes(rolling_median([s.hr for s in samples], smooth_window), max_hr_step)
    return [
        Sample(time=s.time, hr=hr, power=s.power, velocity=s.velocity, distance=s.distance)
        for s, hr in zip(samples, smoothed)
    ]
