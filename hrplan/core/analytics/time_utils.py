from typing import Optional

from .stats import round_half_up


def format_pace(seconds_per_km: float) -> Optional[str]:
    """将每公里秒数格式化为 "M:SS"（不带单位）。

    缺失或非数值输入返回 None。
    """
    try:
        total = round_half_up(float(seconds_per_km))
    except (ValueError, TypeError, OverflowError):
        return None
    total = max(0, total)
    return f"{total // 60}:{total % 60:02d}"


def pace_from_velocity(velocity_ms: Optional[float]) -> Optional[str]:
    """由速度（m/s）得到跑步配速标签（"M:SS /km"）。"""
    if not velocity_ms or velocity_ms <= 0:
        return None
    pace = format_pace(1000.0 / velocity_ms)
    return f"{pace} /km" if pace else None
