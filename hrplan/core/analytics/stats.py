"""估算模块共用的数值工具函数。

这里不包含任何策略：窗口大小、容差和排序方向都由各估算模块自己决定。
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def round_half_up(x: float) -> int:
    """正数的 .5 向上取整（心率值总为正）。"""
    return int(math.floor(x + 0.5))


def valid_values(values: Iterable[Optional[float]]) -> List[float]:
    """去掉缺失和非正读数。"""
    return [float(v) for v in values if v is not None and v > 0]


def percentile(values: Sequence[float], p: float) -> float:
    """线性插值百分位数（numpy 默认方法）。"""
    return float(np.percentile(np.asarray(values, dtype=float), p))


def mean_std(values: Sequence[float]) -> Tuple[float, float]:
    """均值与总体标准差。"""
    arr = np.asarray(values, dtype=float)
    return float(arr.mean()), float(arr.std())


def coefficient_of_variation(values: Sequence[float]) -> float:
    """变异系数（百分比）；均值不为正时返回 100。"""
    mean, std = mean_std(values)
    return (std / mean) * 100.0 if mean > 0 else 100.0


def rolling_mean(values: Sequence[Optional[float]], window: int) -> np.ndarray:
    """
    尾随滑动平均，缺失读数按 0 计。

    输出长度为 len(values) - window + 1（只保留完整窗口）。
    """
    if window <= 0 or len(values) < window:
        return np.empty(0, dtype=float)
    series = pd.Series([v or 0.0 for v in values], dtype=float)
    return series.rolling(window=window, min_periods=window).mean().to_numpy()[window - 1:]


def _upper_median(window: np.ndarray) -> float:
    vals = np.sort(window[window > 0])
    if vals.size == 0:
        return np.nan
    return float(vals[vals.size // 2])


def rolling_median(values: Sequence[Optional[float]], window: int = 3) -> List[Optional[float]]:
    """
    居中滑动中位数，忽略缺失和非正读数。

    有效读数为偶数个时取上中位数；整个窗口都无读数的位置保持原值（None）。
    """
    if not values:
        return []
    raw = pd.Series([v if v is not None else np.nan for v in values], dtype=float)
    smoothed = raw.rolling(window=window, center=True, min_periods=1).apply(_upper_median, raw=True)
    out: List[Optional[float]] = []
    for v in smoothed.to_numpy():
        out.append(None if np.isnan(v) else float(v))
    return out


def linear_fit(x: Sequence[float], y: Sequence[float]) -> Optional[Tuple[float, float]]:
    """
    普通最小二乘直线 y = slope * x + intercept。

    少于 2 个点或 x 无离散度时返回 None。
    """
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    if xs.size < 2 or xs.size != ys.size or np.ptp(xs) == 0:
        return None
    A = np.vstack([xs, np.ones_like(xs)]).T
    try:
        coeffs, *_ = np.linalg.lstsq(A, ys, rcond=None)
    except np.linalg.LinAlgError:
        return None
    slope, intercept = float(coeffs[0]), float(coeffs[1])
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        return None
    return slope, intercept
