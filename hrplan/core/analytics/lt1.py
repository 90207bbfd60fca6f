"""基于心率漂移（cardiac drift）的 LT1（有氧阈）估算。

LT1 取稳态运动中能够维持、且没有明显上漂的最高心率。较长的活动在跳过前
10 分钟后，以 20 分钟窗口、5 分钟步长扫描。窗口的强度指标在容差内即为“稳态”：

    有功率     -> 功率 CV <= 5 %
    有速度     -> 速度 CV <= 5 %
    都没有     -> 心率标准差 <= 6 bpm

稳态窗口先去掉前 2 分钟（进入期），其余部分对半切分，
drift = (mean2 - mean1) / mean1 * 100。漂移低于运动上限（跑步 4 %，其他 3 %）
的窗口成为候选，平均心率最高的候选即为估计值。
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ...activities.records import RUN, ActivityRecord, filter_by_sport, normalize_sport, to_records, within_lookback
from ...config import LOOKBACK_DAYS, RESAMPLE_INTERVAL
from .estimates import MAX_EVIDENCE, Confidence, DriftCandidate, Sample, ThresholdEstimate, ThresholdResult
from .preprocess import preprocess_streams
from .stats import coefficient_of_variation, mean_std, round_half_up, valid_values

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 20 * 60
SKIP_SECONDS = 10 * 60
STEP_SECONDS = 5 * 60
WARM_IN_SECONDS = 2 * 60
MAX_EFFORT_CV_PCT = 5.0
MAX_HR_STD = 6.0
DRIFT_LIMIT_PCT = {RUN: 4.0}
DEFAULT_DRIFT_LIMIT_PCT = 3.0
MIN_ACTIVITIES = 2
RANGE_PADDING = 3


def drift_limit(sport: str) -> float:
    return DRIFT_LIMIT_PCT.get(normalize_sport(sport), DEFAULT_DRIFT_LIMIT_PCT)


def is_steady(window: Sequence[Sample]) -> bool:
    """窗口内强度波动是否在容差内。"""
    if any(s.power is not None for s in window):
        values = valid_values(s.power for s in window)
        return bool(values) and coefficient_of_variation(values) <= MAX_EFFORT_CV_PCT
    if any(s.velocity is not None for s in window):
        values = valid_values(s.velocity for s in window)
        return bool(values) and coefficient_of_variation(values) <= MAX_EFFORT_CV_PCT
    values = valid_values(s.hr for s in window)
    return bool(values) and mean_std(values)[1] <= MAX_HR_STD


def cardiac_drift(window: Sequence[Sample], warm_in: int) -> Optional[Tuple[float, float, float]]:
    """返回 (前半段均值, 后半段均值, 漂移百分比)；无心率时返回 None。"""
    half = len(window) // 2
    first = valid_values(s.hr for s in window[warm_in:half])
    second = valid_values(s.hr for s in window[half:])
    if not first or not second:
        return None
    mean1 = sum(first) / len(first)
    mean2 = sum(second) / len(second)
    return mean1, mean2, (mean2 - mean1) / mean1 * 100.0


def find_drift_candidates(
    record: ActivityRecord,
    sport: str,
    interval: int = RESAMPLE_INTERVAL,
) -> List[DriftCandidate]:
    samples = preprocess_streams(record.streams, interval=interval)
    window_len = WINDOW_SECONDS // interval
    if not samples or len(samples) < window_len:
        return []

    limit = drift_limit(sport)
    step = STEP_SECONDS // interval
    warm_in = WARM_IN_SECONDS // interval
    candidates = []
    for start in range(SKIP_SECONDS // interval, len(samples) - window_len, step):
        window = samples[start:start + window_len]
        if not is_steady(window):
            continue
        drift = cardiac_drift(window, warm_in)
        if drift is None:
            continue
        mean1, mean2, drift_pct = drift
        if drift_pct > limit:
            continue
        candidates.append(DriftCandidate(
            mean_hr=round_half_up((mean1 + mean2) / 2),
            drift_pct=round(drift_pct, 1),
            duration_minutes=len(window) * interval / 60,
            activity_id=record.id,
            date=record.date,
        ))
    return candidates


def _confidence(candidates: Sequence[DriftCandidate]) -> Confidence:
    days = {c.date.date() if c.date else None for c in candidates}
    if len(candidates) >= 4 and len(days) >= 3:
        return Confidence.HIGH
    if len(candidates) >= 2:
        return Confidence.MED
    return Confidence.LOW


def estimate_lt1(
    activities: Iterable,
    sport: str = RUN,
    days: int = LOOKBACK_DAYS,
    now: Optional[datetime] = None,
    interval: int = RESAMPLE_INTERVAL,
) -> ThresholdResult:
    """
    估算有氧阈心率。

    回溯窗口内至少需要两个 `sport` 类型的活动；窗口不会自动扩展。
    """
    records = filter_by_sport(within_lookback(to_records(activities), days, now), sport)
    if len(records) < MIN_ACTIVITIES:
        logger.info("[lt1][insufficient-data] activities=%s sport=%s", len(records), sport)
        return ThresholdResult()

    candidates: List[DriftCandidate] = []
    for record in records:
        if not record.has_hr:
            continue
        candidates.extend(find_drift_candidates(record, sport, interval))

    if not candidates:
        logger.info("[lt1][no-candidates] activities=%s sport=%s", len(records), sport)
        return ThresholdResult()

    ranked = sorted(candidates, key=lambda c: -c.mean_hr)
    top3 = [c.mean_hr for c in ranked[:3]]
    confidence = _confidence(ranked)
    best = ranked[0]
    logger.info(
        "[lt1][estimate] value=%s candidates=%s confidence=%s",
        best.mean_hr, len(ranked), confidence.value,
    )
    return ThresholdResult(hr=ThresholdEstimate(
        value=best.mean_hr,
        min=min(top3) - RANGE_PADDING,
        max=max(top3) + RANGE_PADDING,
        confidence=confidence,
        evidence=tuple(ranked[:MAX_EVIDENCE]),
    ))
