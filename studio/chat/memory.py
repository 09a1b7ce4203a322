"""会话记忆

按会话 ID 保存对话消息，供记忆类 Advisor 在调用模型前回放历史。
支持 Redis 存储，Redis 不可用时降级为内存存储。
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from redis.asyncio import Redis

from studio.core.config import settings
from studio.core.container import IService

logger = logging.getLogger(__name__)

_MESSAGE_TYPES = {
    "HumanMessage": HumanMessage,
    "AIMessage": AIMessage,
    "SystemMessage": SystemMessage,
}


def _dump_message(message: BaseMessage) -> str:
    return json.dumps(
        {"type": message.__class__.__name__, "content": message.content},
        ensure_ascii=False,
    )


def _load_message(raw: str) -> Optional[BaseMessage]:
    data = json.loads(raw)
    message_cls = _MESSAGE_TYPES.get(data.get("type"))
    if message_cls is None:
        return None
    return message_cls(content=data.get("content", ""))


class ChatMemory(IService, ABC):
    """会话记忆接口"""

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    @abstractmethod
    async def add(self, conversation_id: str, messages: List[BaseMessage]) -> None:
        """追加消息

        Args:
            conversation_id: 会话ID
            messages: 消息列表
        """
        pass

    @abstractmethod
    async def get(self, conversation_id: str, last_n: Optional[int] = None) -> List[BaseMessage]:
        """获取会话历史

        Args:
            conversation_id: 会话ID
            last_n: 只返回最后 N 条，None 表示全部

        Returns:
            消息列表
        """
        pass

    @abstractmethod
    async def clear(self, conversation_id: str) -> None:
        """清空会话历史"""
        pass

    async def ping(self) -> bool:
        return True


class InMemoryChatMemory(ChatMemory):
    """内存版会话记忆（进程内有效）"""

    def __init__(self):
        self._storage: Dict[str, List[BaseMessage]] = {}

    async def add(self, conversation_id: str, messages: List[BaseMessage]) -> None:
        self._storage.setdefault(conversation_id, []).extend(messages)

    async def get(self, conversation_id: str, last_n: Optional[int] = None) -> List[BaseMessage]:
        messages = list(self._storage.get(conversation_id, []))
        if last_n and len(messages) > last_n:
            messages = messages[-last_n:]
        return messages

    async def clear(self, conversation_id: str) -> None:
        self._storage.pop(conversation_id, None)


class RedisChatMemory(ChatMemory):
    """Redis 版会话记忆，每个会话一个列表，带过期时间"""

    def __init__(self, redis_client: Optional[Redis] = None, ttl_seconds: Optional[int] = None):
        self.redis_client = redis_client or Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password if settings.redis_password else None,
            decode_responses=True,
            max_connections=50,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            socket_keepalive=True,
            health_check_interval=30,
        )
        self.ttl_seconds = ttl_seconds or settings.chat_memory_ttl_seconds

    def _get_key(self, conversation_id: str) -> str:
        return f"chat_memory:{conversation_id}"

    async def add(self, conversation_id: str, messages: List[BaseMessage]) -> None:
        if not messages:
            return
        key = self._get_key(conversation_id)
        try:
            await self.redis_client.rpush(key, *[_dump_message(m) for m in messages])
            await self.redis_client.expire(key, self.ttl_seconds)
        except Exception as e:
            logger.error(f"写入 Redis 会话记忆失败: {e}")
            raise

    async def get(self, conversation_id: str, last_n: Optional[int] = None) -> List[BaseMessage]:
        key = self._get_key(conversation_id)
        try:
            if last_n:
                raw_messages = await self.redis_client.lrange(key, -last_n, -1)
            else:
                raw_messages = await self.redis_client.lrange(key, 0, -1)
        except Exception as e:
            logger.error(f"读取 Redis 会话记忆失败: {e}")
            raise

        messages = []
        for raw in raw_messages:
            message = _load_message(raw)
            if message is not None:
                messages.append(message)
        return messages

    async def clear(self, conversation_id: str) -> None:
        await self.redis_client.delete(self._get_key(conversation_id))

    async def ping(self) -> bool:
        try:
            return bool(await self.redis_client.ping())
        except Exception as e:
            logger.warning(f"Redis 连接检查失败: {e}")
            return False

    async def shutdown(self) -> None:
        await self.redis_client.aclose()
        logger.info("Redis 会话记忆连接已关闭")


async def create_chat_memory(backend: Optional[str] = None) -> ChatMemory:
    """创建会话记忆

    backend 为 redis 且连接可用时使用 Redis，否则降级使用内存存储。
    """
    backend = (backend or settings.chat_memory_backend).lower()
    if backend != "redis":
        logger.info("会话记忆已初始化（使用内存存储）")
        return InMemoryChatMemory()

    try:
        memory = RedisChatMemory()
        if await memory.ping():
            logger.info("会话记忆已初始化（使用 Redis）")
            return memory
        logger.warning("Redis 连接失败，降级使用内存存储")
    except Exception as e:
        logger.warning(f"Redis 初始化失败，降级使用内存存储: {e}")
    return InMemoryChatMemory()
