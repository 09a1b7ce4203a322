"""工具解析

把容器中注册的工具服务解析为 LangChain 工具。
工具服务需要提供 as_tool() 方法，或本身就是 BaseTool。
"""

import logging
from typing import Dict, List

from langchain_core.tools import BaseTool

from studio.core.container import ServiceContainer
from studio.core.exceptions import ServiceNotFoundError

logger = logging.getLogger(__name__)


def _to_tool(service) -> BaseTool:
    if isinstance(service, BaseTool):
        return service
    return service.as_tool()


def _is_tool_service(service) -> bool:
    return isinstance(service, BaseTool) or callable(getattr(service, "as_tool", None))


class ToolResolver:
    """工具解析器"""

    def __init__(self, container: ServiceContainer):
        self.container = container

    def resolve(self, name: str) -> BaseTool:
        """按服务名解析工具

        Raises:
            ServiceNotFoundError: 服务不存在或不是工具
        """
        service = self.container.get_required(name)
        if not _is_tool_service(service):
            raise ServiceNotFoundError(f"服务 '{name}' 不是工具")
        return _to_tool(service)

    def resolve_all(self, names: List[str]) -> List[BaseTool]:
        return [self.resolve(name) for name in names]

    def list_tools(self) -> Dict[str, str]:
        """列出所有已注册的工具

        Returns:
            工具名称到描述的映射
        """
        tools = {}
        for name in self.container.list_services():
            service = self.container.get(name)
            if service is not None and _is_tool_service(service):
                tools[name] = self.container.describe(name) or _to_tool(service).description
        return tools
