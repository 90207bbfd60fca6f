"""
测试规划API的请求和响应模式

活动数据沿用采集端产生的宽松结构：数据流通道可以使用任意支持的同义键，
既可以是裸列表也可以是 `{"data": [...]}`，因此 `streams` 保持为自由字典。

对外的 JSON 字段使用 camelCase（hrMax、targetHR、stageDurationMinutes），
请求同时接受 snake_case 字段名。
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer


def to_camel(name: str) -> str:
    """snake_case 转 camelCase。"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _camel_keys(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{to_camel(k): v for k, v in item.items()} for item in items]


class CamelModel(BaseModel):
    """按 camelCase 别名输出、同时接受字段名输入的基类"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class ActivityPayload(BaseModel):
    """单次历史训练及其原始数据流"""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = Field(None, description="活动ID")
    date: Optional[Union[datetime, str]] = Field(None, description="开始时间（ISO 8601）")
    sport: Optional[str] = Field(None, description="运动类型，如run、ride、swim")
    streams: Dict[str, Any] = Field(default_factory=dict, description="原始数据流通道")

class PlanRequest(CamelModel):
    """测试规划请求"""
    sport: str = Field("run", description="运动类型：run、bike/ride或其他自由文本")
    activities: List[ActivityPayload] = Field(default_factory=list, description="近期活动列表")
    now: Optional[datetime] = Field(None, description="回溯窗口的参考时间")
    lookback_days: Optional[int] = Field(None, ge=1, le=365, description="回溯天数")

class EstimateResponse(CamelModel):
    """心率估计"""
    value: Optional[int] = Field(None, description="估计心率（bpm）")
    min: Optional[int] = Field(None, description="下界（bpm）")
    max: Optional[int] = Field(None, description="上界（bpm）")
    confidence: str = Field(..., description="可信度：low | med | high")
    evidence: List[Dict[str, Any]] = Field(default_factory=list, description="最多5条支撑证据")

    @field_serializer("evidence")
    def serialize_evidence(self, evidence: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return _camel_keys(evidence)

class ThresholdResponse(CamelModel):
    """LT1/LT2 结果"""
    hr: EstimateResponse = Field(..., description="心率估计")
    confidence: str = Field(..., description="可信度：low | med | high")
    evidence: List[Dict[str, Any]] = Field(default_factory=list, description="最多5条支撑证据")

    @field_serializer("evidence")
    def serialize_evidence(self, evidence: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return _camel_keys(evidence)

class StageResponse(CamelModel):
    """测试阶段"""
    stage: int = Field(..., description="阶段序号（从1开始）")
    target_hr: int = Field(..., alias="targetHR", description="目标心率（bpm）")
    suggested_pace: Optional[str] = Field(None, description="配速提示，如5:10 /km")
    suggested_power: Optional[int] = Field(None, description="功率提示（W）")
    notes: str = Field(..., description="阶段说明")

class ProtocolResponse(CamelModel):
    """分级测试方案"""
    sport: str = Field(..., description="运动类型")
    stage_duration_minutes: int = Field(..., description="每级时长（分钟）")
    end_hr: int = Field(..., alias="endHR", description="结束心率（bpm）")
    stages: List[StageResponse] = Field(..., description="阶段列表")
    stop_rules: List[str] = Field(..., description="停止条件")

class ZoneResponse(CamelModel):
    """心率区间"""
    zone: str = Field(..., description="区间名称，如zone1")
    min: int = Field(..., description="区间下界（bpm）")
    max: int = Field(..., description="区间上界（bpm）")

class PlanResponse(CamelModel):
    """测试规划响应"""
    hr_max: EstimateResponse = Field(..., description="最大心率估计")
    lt1: ThresholdResponse = Field(..., description="有氧阈（LT1）")
    lt2: ThresholdResponse = Field(..., description="乳酸阈（LT2）")
    protocol: Optional[ProtocolResponse] = Field(None, description="测试方案，数据不足时为null")
    zones: Optional[List[ZoneResponse]] = Field(None, description="心率区间，数据不足时为null")
