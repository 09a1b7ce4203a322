"""Dockerhub 镜像搜索工具"""

from .autoconfig import DockerhubAutoConfiguration
from .constants import TOOL_NAME
from .properties import DockerhubProperties
from .service import DockerhubService, ImageInfo, Request, Response, TagInfo

__all__ = [
    "DockerhubAutoConfiguration",
    "DockerhubProperties",
    "DockerhubService",
    "ImageInfo",
    "Request",
    "Response",
    "TagInfo",
    "TOOL_NAME",
]
