"""由估算的 LT1/LT2 心率推导心率训练区间。

比例与乳酸测试的区间计算一致，使现场估算与实验室测试得到的区间可以对齐：

    Z1: 70-90 % LT1     Z2: 90-100 % LT1     Z3: 100 % LT1 - 95 % LT2
    Z4: 96-104 % LT2    Z5: 105-120 % LT2
"""

from typing import Any, Dict, List, Optional

from .estimates import ThresholdEstimate, ThresholdResult
from .stats import round_half_up

_LT1_ZONES = [
    ('zone1', 0.70, 0.90),
    ('zone2', 0.90, 1.00),
]
_LT2_ZONES = [
    ('zone4', 0.96, 1.04),
    ('zone5', 1.05, 1.20),
]


def _hr(value) -> Optional[int]:
    if isinstance(value, (ThresholdEstimate, ThresholdResult)):
        return value.value
    return value


def estimated_hr_zones(lt1, lt2) -> Optional[List[Dict[str, Any]]]:
    """由 LT1/LT2 得到五个心率区间；任一缺失或 LT2 <= LT1 时返回 None。"""
    hr1, hr2 = _hr(lt1), _hr(lt2)
    if not hr1 or not hr2 or hr2 <= hr1:
        return None

    zones = [
        {'zone': name, 'min': round_half_up(hr1 * lo), 'max': round_half_up(hr1 * hi)}
        for name, lo, hi in _LT1_ZONES
    ]
    zones.append({'zone': 'zone3', 'min': hr1, 'max': max(hr1, round_half_up(hr2 * 0.95))})
    zones.extend(
        {'zone': name, 'min': round_half_up(hr2 * lo), 'max': round_half_up(hr2 * hi)}
        for name, lo, hi in _LT2_ZONES
    )
    # LT1/LT2 接近时保证区间下界单调不减
    floor = 0
    for zone in zones:
        zone['min'] = max(zone['min'], floor)
        zone['max'] = max(zone['max'], zone['min'])
        floor = zone['min']
    return zones
