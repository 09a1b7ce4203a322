"""服务注册条件

自动配置类在注册服务前按条件判断：
- 配置开关缺省或等于期望值
- 标记模块可导入
- 容器中尚未注册同名服务
"""

import importlib.util
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from studio.core.container import ServiceContainer

logger = logging.getLogger(__name__)

# (条件是否满足, 说明)
Condition = Tuple[bool, str]


def on_property(value: Any, having_value: str = "true", match_if_missing: bool = True) -> bool:
    """判断配置开关是否满足

    Args:
        value: 配置值，None 表示未配置
        having_value: 期望值（不区分大小写）
        match_if_missing: 未配置时是否视为满足

    Returns:
        是否满足
    """
    if value is None:
        return match_if_missing
    return str(value).strip().lower() == having_value.lower()


def on_module(module_name: str) -> bool:
    """判断标记模块是否可导入"""
    try:
        return importlib.util.find_spec(module_name) is not None
    except (ImportError, ValueError):
        return False


def on_missing_service(container: ServiceContainer, name: str) -> bool:
    """判断容器中是否尚未注册指定服务"""
    return not container.has(name)


class AutoConfiguration(ABC):
    """自动配置基类

    子类声明注册条件和注册逻辑，apply() 仅在全部条件满足时注册服务。
    """

    name: str = ""

    @abstractmethod
    def conditions(self, container: ServiceContainer) -> List[Condition]:
        """返回注册条件列表"""
        pass

    @abstractmethod
    def configure(self, container: ServiceContainer) -> None:
        """向容器注册服务"""
        pass

    def apply(self, container: ServiceContainer) -> bool:
        """按条件注册服务

        Returns:
            是否已注册
        """
        for matched, reason in self.conditions(container):
            if not matched:
                logger.info(f"自动配置 [{self.name}] 跳过: {reason}")
                return False

        self.configure(container)
        logger.info(f"✓ 自动配置 [{self.name}] 已生效")
        return True
