"""
数据模型模块

定义请求响应的数据结构
"""

from .chat_client import (
    AdvisorInfo,
    ChatModelConfig,
    ChatClientVO,
    ClientRunActionParam,
    ActionResult,
    TelemetryResult,
    ChatClientRunResult,
    ToolInfo,
)

__all__ = [
    # ChatClient 相关
    "AdvisorInfo",
    "ChatModelConfig",
    "ChatClientVO",
    "ClientRunActionParam",
    "ActionResult",
    "TelemetryResult",
    "ChatClientRunResult",
    # 工具相关
    "ToolInfo",
]
