"""阈值估算模块共用的结果类型。

所有结果都是冻结的 dataclass；`to_dict()` 生成规划 API 返回的可 JSON 序列化结构。
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

MAX_EVIDENCE = 5


class Confidence(str, Enum):
    LOW = "low"
    MED = "med"
    HIGH = "high"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class Sample:
    """固定重采样网格上的一个时刻。"""

    time: float
    hr: Optional[float] = None
    power: Optional[float] = None
    velocity: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class HRmaxEvidence:
    activity_id: Optional[Union[str, int]]
    date: Optional[datetime]
    max_rolling_30s: float
    sample_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'activity_id': self.activity_id,
            'date': _iso(self.date),
            'max_rolling_30s': round(self.max_rolling_30s, 1),
            'sample_count': self.sample_count,
        }


@dataclass(frozen=True)
class DriftCandidate:
    """心率漂移未超限的稳态窗口（LT1）。"""

    mean_hr: int
    drift_pct: float
    duration_minutes: float
    activity_id: Optional[Union[str, int]]
    date: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['date'] = _iso(self.date)
        return data


@dataclass(frozen=True)
class SustainedCandidate:
    """长时间准稳态窗口，其后段心率近似乳酸阈心率（LT2）。"""

    lthr: int
    slope_bpm_per_min: float
    duration_minutes: float
    intensity: Optional[float]
    activity_id: Optional[Union[str, int]]
    date: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['date'] = _iso(self.date)
        return data


Evidence = Union[HRmaxEvidence, DriftCandidate, SustainedCandidate]


@dataclass(frozen=True)
class ThresholdEstimate:
    """带范围的心率估计；数据不足时各字段均为 None。"""

    value: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None
    confidence: Confidence = Confidence.LOW
    evidence: Tuple[Evidence, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.value is not None and not (self.min <= self.value <= self.max):
            raise ValueError(f"estimate range [{self.min}, {self.max}] does not contain {self.value}")
        if len(self.evidence) > MAX_EVIDENCE:
            object.__setattr__(self, 'evidence', tuple(self.evidence[:MAX_EVIDENCE]))

    @classmethod
    def empty(cls) -> 'ThresholdEstimate':
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.value is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'min': self.min,
            'max': self.max,
            'confidence': self.confidence.value,
            'evidence': [e.to_dict() for e in self.evidence],
        }


@dataclass(frozen=True)
class ThresholdResult:
    """LT1/LT2 包装：心率估计及其可信度与证据。"""

    hr: ThresholdEstimate = field(default_factory=ThresholdEstimate.empty)

    @property
    def value(self) -> Optional[int]:
        return self.hr.value

    @property
    def confidence(self) -> Confidence:
        return self.hr.confidence

    @property
    def evidence(self) -> Tuple[Evidence, ...]:
        return self.hr.evidence

    def to_dict(self) -> Dict[str, Any]:
        hr = self.hr.to_dict()
        return {
            'hr': hr,
            'confidence': hr['confidence'],
            'evidence': hr['evidence'],
        }
