"""
心率优先阈值规划 API 主应用文件。

本文件是FastAPI应用的入口点，负责：
1. 创建FastAPI应用实例
2. 初始化日志
3. 注册路由
"""

from fastapi import FastAPI

from .api.planner import router as planner_router
from .config import LOG_LEVEL
from .logging_config import setup_logging

setup_logging(LOG_LEVEL)
app = FastAPI(title="心率优先阈值规划 API")

# 路由注册
app.include_router(planner_router, tags=["测试规划"])
