"""心率引导的递增负荷测试方案。

根据 HRmax/LT1/LT2 估计构建分级测试。各阶段以固定心率步长从略低于 LT1
爬升到略高于 LT2：

    起始心率 = max(LT1 - offset, round(0.55 * HRmax))   offset 跑步 15 / 其他 12
    结束心率 = min(LT2 + 10, round(0.95 * HRmax))
    步长     = 每 4 分钟一级，每级 6 bpm，最多 10 级

阶段分为四个区段（LT1 以下、LT1 附近、LT2 附近、LT2 以上），有强度模型时
附带配速或功率提示。
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ...activities.records import BIKE, RUN, normalize_sport
from .estimates import ThresholdEstimate, ThresholdResult
from .intensity_model import IntensityModel
from .stats import round_half_up
from .time_utils import pace_from_velocity

logger = logging.getLogger(__name__)

STAGE_DURATION_MINUTES = 4
HR_STEP = 6
MAX_STAGES = 10
START_OFFSET = {RUN: 15}
DEFAULT_START_OFFSET = 12
START_FLOOR_FRACTION = 0.55
END_CAP_FRACTION = 0.95
END_ABOVE_LT2 = 10
PHASE_MARGIN = 5
NEAR_STAGES = 2


@dataclass(frozen=True)
class Stage:
    stage: int
    target_hr: int
    notes: str
    suggested_pace: Optional[str] = None
    suggested_power: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stage': self.stage,
            'target_hr': self.target_hr,
            'suggested_pace': self.suggested_pace,
            'suggested_power': self.suggested_power,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class Protocol:
    sport: str
    stage_duration_minutes: int
    end_hr: int
    stages: Tuple[Stage, ...] = field(default_factory=tuple)
    stop_rules: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sport': self.sport,
            'stage_duration_minutes': self.stage_duration_minutes,
            'end_hr': self.end_hr,
            'stages': [s.to_dict() for s in self.stages],
            'stop_rules': list(self.stop_rules),
        }


def _value(estimate) -> Optional[int]:
    if isinstance(estimate, (ThresholdEstimate, ThresholdResult)):
        return estimate.value
    return None


def stage_targets(hr_max: int, lt1: int, lt2: int, sport: str) -> Tuple[List[Tuple[int, str]], int]:
    """各阶段目标心率及区段说明，以及结束心率。"""
    offset = START_OFFSET.get(normalize_sport(sport), DEFAULT_START_OFFSET)
    start_hr = max(lt1 - offset, round_half_up(hr_max * START_FLOOR_FRACTION))
    end_hr = min(lt2 + END_ABOVE_LT2, round_half_up(hr_max * END_CAP_FRACTION))

    targets: List[Tuple[int, str]] = []
    current = start_hr

    def room() -> bool:
        return len(targets) < MAX_STAGES and current <= end_hr

    while room() and current < lt1 - PHASE_MARGIN:
        targets.append((current, f"Below LT1 ({lt1} bpm)"))
        current += HR_STEP
    for _ in range(NEAR_STAGES):
        if not (room() and current < lt2 - PHASE_MARGIN):
            break
        targets.append((current, f"Near LT1 ({lt1} bpm)"))
        current += HR_STEP
    for _ in range(NEAR_STAGES):
        if not room():
            break
        targets.append((current, f"Near LT2 ({lt2} bpm)"))
        current += HR_STEP
    while room():
        targets.append((current, f"Above LT2 ({lt2} bpm)"))
        current += HR_STEP
    return targets, end_hr


def _annotate(target_hr: int, sport: str, model: Optional[IntensityModel]) -> Dict[str, Any]:
    if model is None:
        return {}
    intensity = model.predict(target_hr)
    if intensity is None or intensity <= 0:
        return {}
    family = normalize_sport(sport)
    if family == RUN:
        return {'suggested_pace': pace_from_velocity(intensity)}
    if family == BIKE:
        return {'suggested_power': round_half_up(intensity)}
    return {}


def generate_protocol(
    hr_max,
    lt1,
    lt2,
    sport: str = RUN,
    model: Optional[IntensityModel] = None,
) -> Optional[Protocol]:
    """
    构建心率引导的分级测试方案。

    参数：
        hr_max: HRmax 估计。
        lt1, lt2: LT1/LT2 结果（ThresholdResult 或 ThresholdEstimate）。
        sport: 请求的运动类型，决定起始偏移和提示类型。
        model: 可选的已拟合强度模型，用于配速/功率提示。

    返回：
        Protocol；三个估计中任一缺少数值时返回 None。
    """
    hr_max_v, lt1_v, lt2_v = _value(hr_max), _value(lt1), _value(lt2)
    if not hr_max_v or not lt1_v or not lt2_v:
        return None

    targets, end_hr = stage_targets(hr_max_v, lt1_v, lt2_v, sport)
    stages = tuple(
        Stage(stage=i, target_hr=hr, notes=notes, **_annotate(hr, sport, model))
        for i, (hr, notes) in enumerate(targets, start=1)
    )
    logger.info("[protocol][generate] sport=%s stages=%s end_hr=%s", sport, len(stages), end_hr)
    return Protocol(
        sport=sport,
        stage_duration_minutes=STAGE_DURATION_MINUTES,
        end_hr=end_hr,
        stages=stages,
        stop_rules=(
            f"Stop when HR >= {end_hr} bpm",
            "Stop when RPE >= 8/10",
            "Stop if performance deteriorates significantly",
        ),
    )
