"""基于近期活动高强度部分的最大心率（HRmax）估算。

每个活动中不低于该活动自身心率 80 百分位的样本视为“高强度”。其 30 秒滑动
平均心率在所有活动间汇总成一个池；估计值取池内最大值与 99 百分位中的较大者，
范围由 98 百分位和最大值构成。

可信度：
    high: 贡献活动 >= 4 且汇总样本 >= 50
    med:  贡献活动 >= 2 且汇总样本 >= 20
    low:  其他情况
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from ...activities.records import ActivityRecord, resolve_now, to_records, within_lookback
from ...config import EXPANDED_LOOKBACK_DAYS, LOOKBACK_DAYS, RESAMPLE_INTERVAL
from .estimates import MAX_EVIDENCE, Confidence, HRmaxEvidence, ThresholdEstimate
from .preprocess import preprocess_streams
from .stats import percentile, rolling_mean, round_half_up, valid_values

logger = logging.getLogger(__name__)

HARD_PERCENTILE = 80
ROLLING_SECONDS = 30
MIN_RECENT_ACTIVITIES = 3
HR_CEILING = 220


def _confidence(activity_count: int, sample_count: int) -> Confidence:
    if activity_count >= 4 and sample_count >= 50:
        return Confidence.HIGH
    if activity_count >= 2 and sample_count >= 20:
        return Confidence.MED
    return Confidence.LOW


def select_hrmax_activities(
    records: List[ActivityRecord],
    days: int = LOOKBACK_DAYS,
    expanded_days: int = EXPANDED_LOOKBACK_DAYS,
    now: Optional[datetime] = None,
) -> List[ActivityRecord]:
    """回溯窗口内带心率的活动；数量不足时扩展一次窗口。"""
    with_hr = [r for r in records if r.has_hr]
    recent = within_lookback(with_hr, days, now)
    if len(recent) < MIN_RECENT_ACTIVITIES and expanded_days > days:
        logger.debug("[hrmax][expand-window] found=%s days=%s -> %s", len(recent), days, expanded_days)
        recent = within_lookback(with_hr, expanded_days, now)
    return recent


def estimate_hrmax(
    activities: Iterable,
    days: int = LOOKBACK_DAYS,
    now: Optional[datetime] = None,
    expanded_days: int = EXPANDED_LOOKBACK_DAYS,
    interval: int = RESAMPLE_INTERVAL,
) -> ThresholdEstimate:
    """
    根据近期活动估算最大心率。

    参数：
        activities: ActivityRecord 对象或原始活动字典。
        days: 回溯天数。
        now: 回溯窗口的参考时间（默认当前 UTC 时间）。
        expanded_days: `days` 内活动少于 3 个时使用的扩展窗口。
        interval: 重采样网格间隔（秒）。

    返回：
        ThresholdEstimate；未找到高强度样本时返回空的低可信度估计。
    """
    now = resolve_now(now)
    selected = select_hrmax_activities(to_records(activities), days, expanded_days, now)
    window = max(1, ROLLING_SECONDS // interval)

    pool: List[float] = []
    evidence: List[HRmaxEvidence] = []
    for record in selected:
        samples = preprocess_streams(record.streams, interval=interval)
        if not samples or len(samples) < window:
            logger.debug("[hrmax][skip] activity_id=%s reason=short-or-malformed", record.id)
            continue
        hr = [s.hr for s in samples]
        hr_values = valid_values(hr)
        if not hr_values:
            continue

        hard_threshold = percentile(hr_values, HARD_PERCENTILE)
        rolling = rolling_mean(hr, window)
        hard = [float(v) for v in rolling if v >= hard_threshold]
        if not hard:
            continue
        pool.extend(hard)
        evidence.append(HRmaxEvidence(
            activity_id=record.id,
            date=record.date,
            max_rolling_30s=max(hard),
            sample_count=len(hard),
        ))

    if not pool:
        logger.info("[hrmax][insufficient-data] activities=%s", len(selected))
        return ThresholdEstimate.empty()

    p99 = percentile(pool, 99)
    p98 = percentile(pool, 98)
    max_rolling = max(pool)

    value = round_half_up(max(max_rolling, p99))
    low = round_half_up(max(p98 - 2, min(pool)))
    high = round_half_up(min(max_rolling + 2, HR_CEILING))
    # 超过上限的伪迹也必须满足 min <= value <= max
    low, high = min(low, value), max(high, value)

    confidence = _confidence(len(evidence), len(pool))
    logger.info(
        "[hrmax][estimate] value=%s range=%s-%s confidence=%s activities=%s samples=%s",
        value, low, high, confidence.value, len(evidence), len(pool),
    )
    return ThresholdEstimate(
        value=value,
        min=low,
        max=high,
        confidence=confidence,
        evidence=tuple(evidence[:MAX_EVIDENCE]),
    )
