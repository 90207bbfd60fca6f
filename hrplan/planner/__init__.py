"""心率优先的测试规划。

在内存中的活动数据流上完成阈值估算与测试方案生成；hrplan.api.planner 中的
HTTP 路由只是 `build_test_plan` 的一层薄封装。
"""

from .builder import TestPlan, build_test_plan

__all__ = ["TestPlan", "build_test_plan"]
