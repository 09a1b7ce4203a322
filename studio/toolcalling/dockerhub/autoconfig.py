"""Dockerhub 工具自动配置

满足以下条件时注册 DockerhubService（服务名 dockerHubFindImages）：
- STUDIO_TOOLCALLING_DOCKERHUB_ENABLED 未配置或为 true
- 本模块可导入
- 容器中尚未注册同名服务
"""

import logging
from typing import List, Optional

from studio.core.conditions import AutoConfiguration, Condition, on_missing_service, on_module, on_property
from studio.core.container import ServiceContainer
from studio.toolcalling.common import JsonParseTool, RestClientTool
from .constants import DESCRIPTION, TOOL_NAME
from .properties import DockerhubProperties
from .service import DockerhubService

logger = logging.getLogger(__name__)


class DockerhubAutoConfiguration(AutoConfiguration):
    """Dockerhub 工具自动配置"""

    name = "dockerhub"
    marker_module = __name__

    def __init__(self, properties: Optional[DockerhubProperties] = None):
        self.properties = properties or DockerhubProperties()

    def conditions(self, container: ServiceContainer) -> List[Condition]:
        return [
            (on_module(self.marker_module), f"模块 {self.marker_module} 不可用"),
            (on_property(self.properties.enabled), "配置 enabled 不为 true"),
            (on_missing_service(container, TOOL_NAME), f"服务 '{TOOL_NAME}' 已存在"),
        ]

    def configure(self, container: ServiceContainer) -> None:
        container.register(
            TOOL_NAME,
            lambda: self.search_service(self.json_parse_tool(container), self.properties),
            description=DESCRIPTION,
        )

    @staticmethod
    def json_parse_tool(container: ServiceContainer) -> JsonParseTool:
        """优先使用容器中注册的 JsonParseTool"""
        return container.get("json_parse_tool", JsonParseTool())

    @staticmethod
    def search_service(json_parse_tool: JsonParseTool, properties: DockerhubProperties) -> DockerhubService:
        rest_client_tool = RestClientTool.builder(json_parse_tool, properties).build()
        logger.debug(f"创建 DockerhubService (base_url={properties.base_url})")
        return DockerhubService(rest_client_tool)
