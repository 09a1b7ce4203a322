"""工具调用模块

每个工具提供一个自动配置类，按条件把工具服务注册到容器中。
"""

import logging
from typing import List

from studio.core.container import ServiceContainer
from .dockerhub import DockerhubAutoConfiguration
from .resolver import ToolResolver

logger = logging.getLogger(__name__)

AUTO_CONFIGURATIONS = [
    DockerhubAutoConfiguration,
]


def load_tool_calling(container: ServiceContainer) -> List[str]:
    """应用所有工具自动配置

    Returns:
        生效的自动配置名称
    """
    applied = []
    for configuration_cls in AUTO_CONFIGURATIONS:
        try:
            configuration = configuration_cls()
            if configuration.apply(container):
                applied.append(configuration.name)
        except Exception as e:
            logger.error(f"工具自动配置 {configuration_cls.__name__} 失败: {e}", exc_info=True)
    logger.info(f"工具加载完成，共 {len(applied)} 个: {applied}")
    return applied


__all__ = [
    "AUTO_CONFIGURATIONS",
    "ToolResolver",
    "load_tool_calling",
]
