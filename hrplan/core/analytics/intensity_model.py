"""用于标注测试阶段的 心率 -> 强度 映射。

从该运动的活动中收集 5 分钟稳态窗口（心率标准差 <= 5 bpm），得到
（平均心率，平均强度）对；骑行的强度为功率，跑步为速度（m/s）。预测时在与
目标心率最接近的窗口邻域内做最小二乘直线拟合，以分段方式近似整体弯曲的
心率/强度关系。
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ...activities.records import BIKE, RUN, filter_by_sport, normalize_sport, to_records
from ...config import RESAMPLE_INTERVAL
from .preprocess import preprocess_streams
from .stats import linear_fit, mean_std, valid_values

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 5 * 60
OFFSET_SECONDS = 5 * 60
STEP_SECONDS = 150
MIN_ACTIVITY_SECONDS = 10 * 60
MIN_VALID_HR_FRACTION = 2 / 3
MAX_HR_STD = 5.0
MIN_WINDOWS = 5
NEIGHBOURS_EACH_SIDE = 2

_INTENSITY_CHANNEL = {BIKE: 'power', RUN: 'velocity'}


@dataclass(frozen=True)
class IntensityModel:
    """在按心率排序的窗口上做局部线性 心率 -> 强度 预测。"""

    sport: str
    points: Tuple[Tuple[float, float], ...]

    def predict(self, target_hr: float) -> Optional[float]:
        if not self.points:
            return None
        closest = min(range(len(self.points)), key=lambda i: abs(self.points[i][0] - target_hr))
        lo = max(0, closest - NEIGHBOURS_EACH_SIDE)
        hood = self.points[lo:closest + NEIGHBOURS_EACH_SIDE + 1]
        if len(hood) < 2:
            return hood[0][1]
        fit = linear_fit([p[0] for p in hood], [p[1] for p in hood])
        if fit is None:
            return None
        slope, intercept = fit
        return slope * target_hr + intercept


def collect_hr_intensity_pairs(samples: Sequence, channel: str, interval: int) -> List[Tuple[float, float]]:
    window_len = WINDOW_SECONDS // interval
    min_hr_points = int(window_len * MIN_VALID_HR_FRACTION)
    pairs = []
    for start in range(OFFSET_SECONDS // interval, len(samples) - window_len, STEP_SECONDS // interval):
        window = samples[start:start + window_len]
        hr = valid_values(s.hr for s in window)
        if len(hr) < min_hr_points:
            continue
        mean_hr, hr_std = mean_std(hr)
        if hr_std > MAX_HR_STD:
            continue
        values = valid_values(getattr(s, channel) for s in window)
        if not values:
            continue
        intensity = sum(values) / len(values)
        if intensity > 0:
            pairs.append((mean_hr, intensity))
    return pairs


def fit_intensity_model(
    activities: Iterable,
    sport: str,
    interval: int = RESAMPLE_INTERVAL,
) -> Optional[IntensityModel]:
    """
    拟合 `sport` 的 心率 -> 强度 模型。

    运动没有强度通道（如游泳）或可用窗口少于 5 个时返回 None，
    此时测试阶段不附带配速/功率提示。
    """
    family = normalize_sport(sport)
    channel = _INTENSITY_CHANNEL.get(family)
    if channel is None:
        logger.debug("[intensity-model][unsupported-sport] sport=%s", sport)
        return None

    pairs: List[Tuple[float, float]] = []
    for record in filter_by_sport(to_records(activities), family):
        if not record.has_hr:
            continue
        samples = preprocess_streams(record.streams, interval=interval)
        if not samples or len(samples) < MIN_ACTIVITY_SECONDS // interval:
            continue
        pairs.extend(collect_hr_intensity_pairs(samples, channel, interval))

    if len(pairs) < MIN_WINDOWS:
        logger.info("[intensity-model][insufficient-data] sport=%s windows=%s", family, len(pairs))
        return None
    logger.debug("[intensity-model][fit] sport=%s windows=%s", family, len(pairs))
    return IntensityModel(sport=family, points=tuple(sorted(pairs, key=lambda p: p[0])))
