"""
核心模块

提供配置管理、日志、异常、链路追踪、服务容器等核心功能
"""

from .config import settings, Settings
from .container import IService, ServiceContainer
from .exceptions import StudioError, ServiceInternalError, ServiceNotFoundError, ToolCallError

__all__ = [
    "settings",
    "Settings",
    "IService",
    "ServiceContainer",
    "StudioError",
    "ServiceInternalError",
    "ServiceNotFoundError",
    "ToolCallError",
]
