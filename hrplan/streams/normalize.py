"""
数据流规范化适配器。

不同来源的活动数据流（Strava `key_by_type=true` 返回、FIT 解析结果、前端
上传）在键名以及通道是裸列表还是 `{'data': [...]}` 结构上并不统一。本模块
一次性完成解析，估算模块只接触 `StreamBundle`。

支持的同义键（按顺序取第一个非空）：
    time      -> time
    hr        -> heartrate, hr, heart_rate, heartRate
    power     -> watts, power
    velocity  -> velocity_smooth, velocity
    distance  -> distance
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

STREAM_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    'time': ('time',),
    'hr': ('heartrate', 'hr', 'heart_rate', 'heartRate'),
    'power': ('watts', 'power'),
    'velocity': ('velocity_smooth', 'velocity'),
    'distance': ('distance',),
}


@dataclass(frozen=True)
class StreamBundle:
    """单个活动的规范化并行通道，缺失的通道为空元组。"""

    time: Tuple[float, ...]
    hr: Tuple[Optional[float], ...] = ()
    power: Tuple[Optional[float], ...] = ()
    velocity: Tuple[Optional[float], ...] = ()
    distance: Tuple[Optional[float], ...] = ()


def _unwrap(item: Any) -> Optional[Sequence[Any]]:
    if item is None:
        return None
    if isinstance(item, Mapping):
        item = item.get('data')
        if item is None:
            return None
    if isinstance(item, (str, bytes)):
        return None
    if isinstance(item, Sequence):
        return item
    # numpy 数组、pandas Series 等可迭代对象
    try:
        return list(item)
    except TypeError:
        return None


def _coerce(value: Any) -> Optional[float]:
    """0、缺失值和非数值读数都视为“无读数”。"""
    if value is None or isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(v) or v == 0:
        return None
    return v


def lookup_channel(streams: Mapping[str, Any], channel: str) -> List[Any]:
    """按同义键顺序返回 `channel` 的第一个非空原始列表。"""
    for key in STREAM_SYNONYMS[channel]:
        data = _unwrap(streams.get(key))
        if data:
            return list(data)
    return []


def has_hr_stream(streams: Any) -> bool:
    """任一心率同义键带有数据时返回 True。"""
    if not isinstance(streams, Mapping):
        return False
    return bool(lookup_channel(streams, 'hr'))


def normalize_streams(streams: Any) -> Optional[StreamBundle]:
    """
    由原始数据流字典构建 StreamBundle。

    没有可用时间轴（缺失、为空、含非数值或非有限值如 NaN/Infinity）时返回
    None，调用方将该活动视为格式错误并跳过。
    """
    if not isinstance(streams, Mapping):
        return None
    raw_time = lookup_channel(streams, 'time')
    if not raw_time:
        return None
    try:
        time = tuple(float(t) for t in raw_time)
    except (TypeError, ValueError):
        return None
    if not all(math.isfinite(t) for t in time):
        return None

    def channel(name: str) -> Tuple[Optional[float], ...]:
        return tuple(_coerce(v) for v in lookup_channel(streams, name))

    return StreamBundle(
        time=time,
        hr=channel('hr'),
        power=channel('power'),
        velocity=channel('velocity'),
        distance=channel('distance'),
    )
