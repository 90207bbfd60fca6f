"""
交给阈值估算模块的活动记录。

ActivityRecord 是单次历史训练的不可变视图。无论数据来自 Strava 活动字典、
trainings 表的行还是前端上传，都通过 `ActivityRecord.from_payload` 构建，
id/日期/运动类型的同义键在此统一解析。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..streams.normalize import has_hr_stream

logger = logging.getLogger(__name__)

RUN = 'run'
BIKE = 'bike'

_RUN_ALIASES = {'run', 'running', 'trail_run', 'trailrun', 'virtual_run', 'virtualrun'}
_BIKE_ALIASES = {'bike', 'ride', 'cycling', 'virtual_ride', 'virtualride', 'ebikeride', 'gravelride'}


def normalize_sport(sport: Optional[str]) -> str:
    """
    将请求的运动类型映射到估算策略族。

    'run' 与 'bike' 使用各自的专项策略；其他类型（游泳、划船、自由文本）
    转为小写后按通用策略处理。
    """
    s = (sport or '').strip().lower()
    if s in _RUN_ALIASES:
        return RUN
    if s in _BIKE_ALIASES:
        return BIKE
    return s


def matches_sport(activity_sport: Optional[str], sport: str) -> bool:
    """活动的自由文本运动标签是否属于请求的运动族。"""
    label = (activity_sport or '').lower()
    family = normalize_sport(sport)
    if family == RUN:
        return 'run' in label
    if family == BIKE:
        return 'ride' in label or 'bike' in label or 'cycl' in label
    return True


def parse_activity_date(value: Any) -> Optional[datetime]:
    """将活动开始时间解析为带时区的 UTC datetime；无法解析时返回 None。"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # 前端传来的毫秒时间戳
        try:
            dt = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        s = value.strip()
        if s.endswith('Z'):
            s = s[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ''):
            return value
    return None


@dataclass(frozen=True)
class ActivityRecord:
    id: Optional[Union[str, int]]
    date: Optional[datetime]
    sport: str = ''
    streams: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Union['ActivityRecord', Mapping[str, Any]]) -> 'ActivityRecord':
        if isinstance(payload, ActivityRecord):
            return payload
        return cls(
            id=_first_present(payload, 'id', 'stravaId', '_id'),
            date=parse_activity_date(_first_present(payload, 'startDate', 'date', 'start_date')),
            sport=str(_first_present(payload, 'sport', 'type', 'sport_type') or ''),
            streams=payload.get('streams') or {},
        )

    @property
    def has_hr(self) -> bool:
        return has_hr_stream(self.streams)


def to_records(activities: Optional[Iterable[Any]]) -> List[ActivityRecord]:
    """由原始载荷构建记录，丢弃非字典条目。"""
    records: List[ActivityRecord] = []
    for item in activities or []:
        if isinstance(item, (ActivityRecord, Mapping)):
            records.append(ActivityRecord.from_payload(item))
        else:
            logger.debug("[activities][skip] unsupported payload type=%s", type(item).__name__)
    return records


def resolve_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def within_lookback(
    records: Iterable[ActivityRecord],
    days: int,
    now: Optional[datetime] = None,
) -> List[ActivityRecord]:
    """返回 `now` 之前 `days` 天内的记录，无日期的记录被丢弃。"""
    cutoff = resolve_now(now) - timedelta(days=days)
    return [r for r in records if r.date is not None and r.date >= cutoff]


def filter_by_sport(records: Iterable[ActivityRecord], sport: str) -> List[ActivityRecord]:
    return [r for r in records if matches_sport(r.sport, sport)]
