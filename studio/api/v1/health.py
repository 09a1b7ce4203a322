import asyncio
import time

from fastapi import APIRouter, Depends

from studio.chat import ChatClient
from studio.chat.loader import CHAT_MEMORY_SERVICE
from studio.core.config import settings
from studio.core.container import ServiceContainer
from .chat_client import get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: ServiceContainer = Depends(get_service_container)):
    """健康检查

    Returns:
        健康状态响应，包含：
        - status: "healthy" (所有服务正常), "degraded" (部分服务故障), "unhealthy" (关键服务故障)
        - services: 各个服务的状态详情
        - timestamp: 检查时间戳
    """
    services_status = {}
    overall_status = "healthy"

    # 1. 检查会话记忆
    chat_memory = container.get(CHAT_MEMORY_SERVICE) if container.has(CHAT_MEMORY_SERVICE) else None
    if chat_memory is not None:
        try:
            memory_healthy = await asyncio.wait_for(chat_memory.ping(), timeout=2.0)
            services_status["chat_memory"] = {
                "status": "healthy" if memory_healthy else "unhealthy",
                "type": type(chat_memory).__name__,
            }
            if not memory_healthy:
                overall_status = "degraded"
        except asyncio.TimeoutError:
            services_status["chat_memory"] = {"status": "unhealthy", "error": "timeout"}
            overall_status = "degraded"
        except Exception as e:
            services_status["chat_memory"] = {"status": "unhealthy", "error": str(e)}
            overall_status = "degraded"
    else:
        services_status["chat_memory"] = {"status": "unhealthy", "error": "service not found"}
        overall_status = "degraded"

    # 2. 检查 ChatClient
    try:
        chat_clients = list(container.get_by_type(ChatClient).keys())
        services_status["chat_clients"] = {
            "status": "healthy" if chat_clients else "unhealthy",
            "clients": chat_clients,
        }
        if not chat_clients:
            overall_status = "unhealthy"
    except Exception as e:
        services_status["chat_clients"] = {"status": "unhealthy", "error": str(e)}
        overall_status = "unhealthy"

    return {
        "status": overall_status,
        "services": services_status,
        "tracing": settings.tracing_enabled,
        "timestamp": int(time.time()),
    }
