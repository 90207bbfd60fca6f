"""
测试规划 API 路由。

接口：
- POST /planner/hr-test：根据提交的活动估算 HRmax/LT1/LT2，返回心率引导的分级测试方案；
- GET /planner/health：存活探针。

说明：
- 路由只负责校验请求并调用 build_test_plan，不拉取也不存储活动；
- 数据不足不是错误：响应中的估计为 null，可信度为 low；
- 响应字段使用 camelCase（hrMax、targetHR、stageDurationMinutes 等）。
"""

import logging

from fastapi import APIRouter, HTTPException

from ..planner import build_test_plan
from ..planner.schemas import PlanRequest, PlanResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planner", tags=["测试规划"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/hr-test", response_model=PlanResponse)
def create_hr_test_plan(request: PlanRequest):
    try:
        activities = [a.model_dump() for a in request.activities]
        plan = build_test_plan(
            activities,
            sport=request.sport,
            now=request.now,
            lookback_days=request.lookback_days,
        )
        return plan.to_dict()
    except Exception as e:
        logger.exception("[planner-api][error] sport=%s activities=%s", request.sport, len(request.activities))
        raise HTTPException(
            status_code=500,
            detail=f"生成测试方案失败: {str(e)}",
        )
