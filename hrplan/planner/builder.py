"""测试方案编排。

`build_test_plan` 是引擎的公开入口：根据给定活动估算 HRmax、LT1 和 LT2，并据此
生成心率引导的分级测试方案。它是输入（活动、运动类型、now）的纯函数，遇到
错误或不足的数据不会抛出异常，缺失部分以 null/低可信度字段返回。
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..activities.records import resolve_now, to_records
from ..config import DEFAULT_SPORT, EXPANDED_LOOKBACK_DAYS, LOOKBACK_DAYS, RESAMPLE_INTERVAL
from ..core.analytics.estimates import ThresholdEstimate, ThresholdResult
from ..core.analytics.hrmax import estimate_hrmax
from ..core.analytics.intensity_model import fit_intensity_model
from ..core.analytics.lt1 import estimate_lt1
from ..core.analytics.lt2 import estimate_lt2
from ..core.analytics.protocol import Protocol, generate_protocol
from ..core.analytics.zones import estimated_hr_zones

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestPlan:
    hr_max: ThresholdEstimate = field(default_factory=ThresholdEstimate.empty)
    lt1: ThresholdResult = field(default_factory=ThresholdResult)
    lt2: ThresholdResult = field(default_factory=ThresholdResult)
    protocol: Optional[Protocol] = None
    zones: Optional[List[Dict[str, Any]]] = None

    # 名字以 Test 开头，但不是 pytest 测试类
    __test__ = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hr_max': self.hr_max.to_dict(),
            'lt1': self.lt1.to_dict(),
            'lt2': self.lt2.to_dict(),
            'protocol': self.protocol.to_dict() if self.protocol else None,
            'zones': [dict(z) for z in self.zones] if self.zones else None,
        }


def build_test_plan(
    activities: Optional[Iterable[Any]],
    sport: str = DEFAULT_SPORT,
    now: Optional[datetime] = None,
    lookback_days: Optional[int] = None,
    interval: int = RESAMPLE_INTERVAL,
) -> TestPlan:
    """
    估算阈值并构建心率引导的测试方案。

    参数：
        activities: 原始活动字典或 ActivityRecord 对象。
        sport: 请求的运动类型（"run"、"bike"/"ride"，其他按通用处理）。
        now: 回溯窗口的参考时间，默认当前 UTC 时间。
        lookback_days: 本次调用覆盖 PLANNER_LOOKBACK_DAYS。
        interval: 重采样网格间隔（秒）。

    返回：
        TestPlan；没有任何活动带心率时返回全 null 的方案。
    """
    now = resolve_now(now)
    days = lookback_days or LOOKBACK_DAYS
    sport = (sport or DEFAULT_SPORT).strip().lower()

    records = [r for r in to_records(activities) if r.has_hr]
    if not records:
        logger.info("[planner][no-hr-data] sport=%s", sport)
        return TestPlan()

    hr_max = estimate_hrmax(records, days=days, now=now,
                            expanded_days=max(days, EXPANDED_LOOKBACK_DAYS), interval=interval)
    lt1 = estimate_lt1(records, sport=sport, days=days, now=now, interval=interval)
    lt2 = estimate_lt2(records, sport=sport, days=days, now=now, hr_max=hr_max, interval=interval)

    protocol = None
    if hr_max.value and lt1.value and lt2.value:
        model = fit_intensity_model(records, sport, interval=interval)
        protocol = generate_protocol(hr_max, lt1, lt2, sport=sport, model=model)

    logger.info(
        "[planner][plan] sport=%s activities=%s hr_max=%s lt1=%s lt2=%s stages=%s",
        sport, len(records), hr_max.value, lt1.value, lt2.value,
        len(protocol.stages) if protocol else 0,
    )
    return TestPlan(
        hr_max=hr_max,
        lt1=lt1,
        lt2=lt2,
        protocol=protocol,
        zones=estimated_hr_zones(lt1, lt2),
    )
