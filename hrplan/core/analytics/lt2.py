"""基于持续努力的 LT2（乳酸阈心率）估算。

乳酸阈心率近似为运动员在长窗口内保持、且心率不再爬升的最高心率：

    - 跳过每个活动的前 10 分钟（热身）；
    - 窗口长度跑步 20 分钟、其他运动 30 分钟，步长 5 分钟；
    - 心率覆盖率 >= 80 % 且最小二乘心率趋势不超过 0.25 bpm/min 的窗口合格；
    - 候选 LTHR 为最后 15 分钟的平均心率。

可信度：
    high: 候选 >= 3 且分布在 >= 2 个不同日期
    med:  候选 >= 1
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ...activities.records import RUN, ActivityRecord, filter_by_sport, normalize_sport, to_records, within_lookback
from ...config import LOOKBACK_DAYS, RESAMPLE_INTERVAL
from .estimates import (
    MAX_EVIDENCE,
    Confidence,
    Sample,
    SustainedCandidate,
    ThresholdEstimate,
    ThresholdResult,
)
from .preprocess import preprocess_streams
from .stats import linear_fit, round_half_up, valid_values

logger = logging.getLogger(__name__)

WINDOW_SECONDS = {RUN: 20 * 60}
DEFAULT_WINDOW_SECONDS = 30 * 60
WARMUP_SECONDS = 10 * 60
STEP_SECONDS = 5 * 60
TAIL_SECONDS = 15 * 60
MIN_HR_COVERAGE = 0.8
MIN_HR_POINTS = 10
MAX_SLOPE_BPM_PER_MIN = 0.25
TIGHT_SPREAD_BPM = 5
TIGHT_PADDING = 3
WIDE_PADDING = 6
HR_CEILING = 220


def window_seconds(sport: str) -> int:
    return WINDOW_SECONDS.get(normalize_sport(sport), DEFAULT_WINDOW_SECONDS)


def hr_slope_bpm_per_min(window: Sequence[Sample], interval: int) -> Optional[float]:
    """心率对时间的最小二乘斜率（bpm/min）。"""
    times, hrs = [], []
    for i, s in enumerate(window):
        if s.hr is not None and s.hr > 0:
            times.append(i * interval)
            hrs.append(s.hr)
    if len(hrs) < MIN_HR_POINTS:
        return None
    fit = linear_fit(times, hrs)
    if fit is None:
        return None
    return fit[0] * 60.0


def window_intensity(window: Sequence[Sample]) -> Optional[float]:
    """窗口有功率时取平均功率，否则取平均速度。"""
    if any(s.power for s in window):
        values = valid_values(s.power for s in window)
    elif any(s.velocity for s in window):
        values = valid_values(s.velocity for s in window)
    else:
        return None
    return sum(values) / len(values) if values else None


def find_sustained_candidates(
    record: ActivityRecord,
    sport: str,
    interval: int = RESAMPLE_INTERVAL,
) -> List[SustainedCandidate]:
    samples = preprocess_streams(record.streams, interval=interval)
    window_len = window_seconds(sport) // interval
    if not samples or len(samples) < window_len:
        return []

    tail = TAIL_SECONDS // interval
    candidates = []
    for start in range(WARMUP_SECONDS // interval, len(samples) - window_len + 1, STEP_SECONDS // interval):
        window = samples[start:start + window_len]
        coverage = len(valid_values(s.hr for s in window)) / len(window)
        if coverage < MIN_HR_COVERAGE:
            continue
        slope = hr_slope_bpm_per_min(window, interval)
        if slope is None or slope > MAX_SLOPE_BPM_PER_MIN:
            continue
        tail_hr = valid_values(s.hr for s in window[-tail:])
        if not tail_hr:
            continue
        intensity = window_intensity(window)
        candidates.append(SustainedCandidate(
            lthr=round_half_up(sum(tail_hr) / len(tail_hr)),
            slope_bpm_per_min=round(slope, 2),
            duration_minutes=len(window) * interval / 60,
            intensity=round(intensity, 2) if intensity is not None else None,
            activity_id=record.id,
            date=record.date,
        ))
    return candidates


def _confidence(candidates: Sequence[SustainedCandidate]) -> Confidence:
    days = {c.date.date() if c.date else None for c in candidates}
    if len(candidates) >= 3 and len(days) >= 2:
        return Confidence.HIGH
    if candidates:
        return Confidence.MED
    return Confidence.LOW


def estimate_lt2(
    activities: Iterable,
    sport: str = RUN,
    days: int = LOOKBACK_DAYS,
    now: Optional[datetime] = None,
    hr_max: Optional[ThresholdEstimate] = None,
    interval: int = RESAMPLE_INTERVAL,
) -> ThresholdResult:
    """
    估算乳酸阈心率（LTHR）。

    参数：
        activities: ActivityRecord 对象或原始活动字典。
        sport: 请求的运动类型，决定活动筛选和窗口长度。
        days: 回溯天数（不会自动扩展）。
        now: 回溯窗口的参考时间。
        hr_max: 可选的 HRmax 估计，用于限制范围上界。
        interval: 重采样网格间隔（秒）。
    """
    records = filter_by_sport(within_lookback(to_records(activities), days, now), sport)
    if not records:
        logger.info("[lt2][insufficient-data] activities=0 sport=%s", sport)
        return ThresholdResult()

    candidates: List[SustainedCandidate] = []
    for record in records:
        if not record.has_hr:
            continue
        candidates.extend(find_sustained_candidates(record, sport, interval))

    if not candidates:
        logger.info("[lt2][no-candidates] activities=%s sport=%s", len(records), sport)
        return ThresholdResult()

    ranked = sorted(candidates, key=lambda c: -c.lthr)
    best = ranked[0]
    spread = abs(ranked[0].lthr - ranked[2].lthr) if len(ranked) >= 3 else None
    padding = TIGHT_PADDING if spread is not None and spread < TIGHT_SPREAD_BPM else WIDE_PADDING
    ceiling = hr_max.value if hr_max is not None and hr_max.value else HR_CEILING

    confidence = _confidence(ranked)
    logger.info(
        "[lt2][estimate] value=%s padding=%s candidates=%s confidence=%s",
        best.lthr, padding, len(ranked), confidence.value,
    )
    return ThresholdResult(hr=ThresholdEstimate(
        value=best.lthr,
        min=max(best.lthr - padding, 0),
        # 上界不超过 HRmax，但范围仍需包含估计值
        max=max(min(best.lthr + padding, ceiling), best.lthr),
        confidence=confidence,
        evidence=tuple(ranked[:MAX_EVIDENCE]),
    ))
