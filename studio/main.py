from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from studio.api.v1.chat_client import router as chat_client_router
from studio.api.v1.health import router as health_router
from studio.chat.loader import CHAT_MEMORY_SERVICE, ChatClientLoader
from studio.chat.memory import create_chat_memory
from studio.core.config import settings
from studio.core.logger import init_logging, get_logger
from studio.core.container import ServiceContainer
from studio.core.tracing import init_tracing
from studio.services import CHAT_CLIENT_DELEGATE_SERVICE, ChatClientDelegateService
from studio.toolcalling import load_tool_calling
from studio.toolcalling.common import JsonParseTool


# 初始化日志系统
init_logging()
logger = get_logger(__name__)

# 全局服务容器
_container: ServiceContainer = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    global _container

    # 启动
    logger.info("=" * 50)
    logger.info("Agent Studio 启动中...")
    logger.info(f"LLM模型: {settings.llm_model}")
    logger.info(f"服务地址: http://{settings.host}:{settings.port}")
    logger.info("=" * 50)

    if settings.tracing_enabled:
        init_tracing()

    # 创建服务容器
    container = ServiceContainer()
    logger.info("服务容器已创建")

    # 注册核心服务
    container.register_instance(CHAT_MEMORY_SERVICE, await create_chat_memory(), description="会话记忆")
    container.register_instance('json_parse_tool', JsonParseTool())

    # 按条件注册工具（先于 ChatClient，ChatClient 按名称引用工具）
    logger.info("正在加载工具...")
    load_tool_calling(container)

    logger.info("正在加载 ChatClient...")
    ChatClientLoader.load_all_clients(container)

    container.register(CHAT_CLIENT_DELEGATE_SERVICE, lambda: ChatClientDelegateService(container))

    # 初始化所有服务
    try:
        await container.initialize_all()
        logger.info("服务初始化完成:")
        for service_name, initialized in container.list_services().items():
            status = "✓" if initialized else "-"
            logger.info(f"  {status} {service_name}")
    except Exception as e:
        logger.error(f"服务初始化失败: {e}", exc_info=True)

    _container = container
    logger.info("=" * 50)

    yield

    # 关闭
    logger.info("正在关闭 Agent Studio...")

    _container = None
    await container.shutdown_all()

    logger.info("Agent Studio 已关闭")


def create_app() -> FastAPI:
    """创建FastAPI应用"""

    app = FastAPI(
        title="Agent Studio",
        description="ChatClient 查看与调试平台",
        version="1.0.0",
        lifespan=lifespan
    )

    # 配置CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册路由
    app.include_router(chat_client_router)
    app.include_router(health_router)

    return app


def get_container() -> ServiceContainer:
    """获取全局服务容器

    Returns:
        服务容器实例，应用未启动时为 None
    """
    return _container


app = create_app()
