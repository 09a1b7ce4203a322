"""
ChatClient API

提供 ChatClient 的查看和调用，以及已注册工具的查看
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from studio.core.container import ServiceContainer
from studio.core.exceptions import StudioError
from studio.schemas.chat_client import ChatClientRunResult, ChatClientVO, ClientRunActionParam, ToolInfo
from studio.services import CHAT_CLIENT_DELEGATE_SERVICE, IChatClientDelegate
from studio.toolcalling import ToolResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/studio/api", tags=["chat-client"])


def get_service_container() -> ServiceContainer:
    """获取全局服务容器，应用未启动完成时返回 503"""
    from studio.main import get_container

    container = get_container()
    if container is None:
        raise HTTPException(status_code=503, detail="服务容器尚未初始化")
    return container


def get_chat_client_delegate(
        container: ServiceContainer = Depends(get_service_container),
) -> IChatClientDelegate:
    try:
        return container.get_required(CHAT_CLIENT_DELEGATE_SERVICE, IChatClientDelegate)
    except StudioError as e:
        raise HTTPException(status_code=503, detail=e.message)


def _to_http_exception(e: Exception) -> HTTPException:
    if isinstance(e, StudioError):
        return HTTPException(status_code=e.http_status, detail=e.message)
    return HTTPException(status_code=500, detail=f"ChatClient 调用失败: {str(e)}")


@router.get("/chat-clients", response_model=List[ChatClientVO])
async def list_chat_clients(delegate: IChatClientDelegate = Depends(get_chat_client_delegate)):
    """
    列出所有已注册的 ChatClient

    Returns:
        ChatClient 概要列表
    """
    try:
        return delegate.list()
    except Exception as e:
        raise _to_http_exception(e)


@router.get("/chat-clients/{client_name}", response_model=ChatClientVO)
async def get_chat_client(client_name: str, delegate: IChatClientDelegate = Depends(get_chat_client_delegate)):
    """
    获取指定 ChatClient 的配置概要

    Args:
        client_name: ChatClient 服务名
    """
    try:
        return delegate.get(client_name)
    except Exception as e:
        raise _to_http_exception(e)


@router.post("/chat-clients/run", response_model=ChatClientRunResult)
async def run_chat_client(
        request: ClientRunActionParam,
        delegate: IChatClientDelegate = Depends(get_chat_client_delegate),
):
    """
    调用 ChatClient

    Args:
        request: 包含 ChatClient 名称、用户输入、可选的系统提示词、模型参数和会话ID

    Returns:
        模型回复、会话ID 和 trace id
    """
    try:
        return await delegate.run(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"ChatClient [{request.key}] 调用失败: {e}", exc_info=not isinstance(e, StudioError))
        raise _to_http_exception(e)


@router.get("/tools", response_model=List[ToolInfo])
async def list_tools(container: ServiceContainer = Depends(get_service_container)):
    """
    列出所有已注册的工具

    Returns:
        工具名称和描述
    """
    tools = ToolResolver(container).list_tools()
    return [ToolInfo(name=name, description=description) for name, description in tools.items()]
