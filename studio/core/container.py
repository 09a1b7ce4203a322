"""依赖注入容器

管理所有服务的生命周期、注册和获取。
ChatClient、工具等都作为命名服务注册在容器中。
"""

import asyncio
import logging
from typing import Dict, Any, Callable, List, Optional, Type, TypeVar
from abc import ABC, abstractmethod

from studio.core.exceptions import ServiceNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class IService(ABC):
    """服务接口，需要生命周期管理的服务应实现此接口"""

    @abstractmethod
    async def initialize(self) -> None:
        """初始化服务"""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """关闭服务"""
        pass


class ServiceContainer:
    """服务容器

    管理所有服务的生命周期，提供依赖注入功能。
    支持懒加载、单例模式、按类型查找和自动生命周期管理。
    """

    def __init__(self):
        """初始化服务容器"""
        self._services: Dict[str, Any] = {}  # 已实例化的服务
        self._factories: Dict[str, Dict[str, Any]] = {}  # 服务工厂函数
        self._initialized_services: List[str] = []  # 已初始化的服务名称（按初始化顺序）
        self._lock = asyncio.Lock()  # 异步锁，防止并发初始化
        self._initialization_status = False  # 初始化状态标志

    def register(
            self,
            name: str,
            factory: Callable[[], Any],
            singleton: bool = True,
            description: Optional[str] = None
    ) -> None:
        """注册服务工厂

        Args:
            name: 服务名称
            factory: 服务工厂函数（返回服务实例）
            singleton: 是否单例模式（默认 True）
            description: 服务描述（工具服务会作为工具说明暴露）
        """
        if name in self._factories:
            logger.warning(f"服务 '{name}' 已存在，将被覆盖")
            self._services.pop(name, None)

        self._factories[name] = {
            'factory': factory,
            'singleton': singleton,
            'description': description,
        }
        logger.debug(f"服务 '{name}' 已注册 (singleton={singleton})")

    def register_instance(self, name: str, instance: Any, description: Optional[str] = None) -> None:
        """直接注册一个已创建的服务实例"""
        self.register(name, lambda: instance, singleton=True, description=description)
        self._services[name] = instance

    def _create(self, name: str) -> Any:
        """创建（或返回缓存的）服务实例，异常直接抛出"""
        if name in self._services:
            return self._services[name]

        factory_info = self._factories[name]
        service = factory_info['factory']()
        logger.debug(f"服务 '{name}' 已创建")

        if factory_info['singleton']:
            self._services[name] = service
        return service

    def get(self, name: str, default: Any = None) -> Optional[Any]:
        """获取服务实例（懒加载）

        Args:
            name: 服务名称
            default: 服务不存在或创建失败时的默认值

        Returns:
            服务实例，如果不存在则返回 default
        """
        if name not in self._factories:
            if default is None:
                logger.warning(f"服务 '{name}' 未注册")
            return default

        try:
            return self._create(name)
        except Exception as e:
            logger.error(f"创建服务 '{name}' 失败: {e}", exc_info=True)
            return default

    def get_required(self, name: str, expected_type: Optional[Type[T]] = None) -> T:
        """获取必须存在的服务实例

        Args:
            name: 服务名称
            expected_type: 期望的服务类型

        Returns:
            服务实例

        Raises:
            ServiceNotFoundError: 服务未注册或类型不匹配
        """
        if name not in self._factories:
            available = ", ".join(self._factories.keys())
            raise ServiceNotFoundError(f"服务 '{name}' 不存在。已注册的服务: {available}")

        service = self._create(name)
        if expected_type is not None and not isinstance(service, expected_type):
            raise ServiceNotFoundError(
                f"服务 '{name}' 的类型为 {type(service).__name__}，期望 {expected_type.__name__}"
            )
        return service

    def get_by_type(self, service_type: Type[T]) -> Dict[str, T]:
        """获取所有指定类型的服务

        Args:
            service_type: 服务类型（类或接口）

        Returns:
            服务名称到实例的映射，按注册顺序排列

        Raises:
            服务创建失败时抛出工厂函数的原始异常
        """
        result: Dict[str, T] = {}
        for name in list(self._factories.keys()):
            service = self._create(name)
            if isinstance(service, service_type):
                result[name] = service
        return result

    def has(self, name: str) -> bool:
        """检查服务是否已注册

        Args:
            name: 服务名称

        Returns:
            是否已注册
        """
        return name in self._factories

    def describe(self, name: str) -> Optional[str]:
        """获取服务描述"""
        factory_info = self._factories.get(name)
        return factory_info['description'] if factory_info else None

    async def initialize_all(self) -> None:
        """初始化所有已注册的服务

        遍历所有工厂，创建服务实例并调用其 initialize 方法。
        """
        async with self._lock:
            if self._initialization_status:
                logger.warning("容器已经初始化，跳过重复初始化")
                return

            self._initialization_status = True
            logger.info("开始初始化所有服务...")

            for name in list(self._factories.keys()):
                try:
                    service = self.get(name)

                    if service is None:
                        logger.warning(f"服务 '{name}' 创建失败，跳过初始化")
                        continue

                    if isinstance(service, IService):
                        await service.initialize()
                        self._initialized_services.append(name)
                        logger.info(f"✓ 服务 '{name}' 初始化成功")
                    else:
                        logger.debug(f"服务 '{name}' 无需初始化")

                except Exception as e:
                    logger.error(f"初始化服务 '{name}' 失败: {e}", exc_info=True)

            logger.info(f"服务初始化完成，共 {len(self._initialized_services)} 个服务")

    async def shutdown_all(self) -> None:
        """关闭所有已初始化的服务

        按照初始化的反序关闭服务。
        """
        logger.info("开始关闭所有服务...")

        for name in reversed(self._initialized_services):
            try:
                service = self._services.get(name)

                if service is None:
                    continue

                await service.shutdown()
                logger.info(f"✓ 服务 '{name}' 已关闭")

            except Exception as e:
                logger.error(f"关闭服务 '{name}' 失败: {e}", exc_info=True)

        self._services.clear()
        self._initialized_services.clear()
        self._initialization_status = False

        logger.info("所有服务已关闭")

    def list_services(self) -> Dict[str, bool]:
        """列出所有已注册的服务及其状态

        Returns:
            服务名称到是否已初始化的映射
        """
        return {
            name: name in self._initialized_services
            for name in self._factories.keys()
        }
