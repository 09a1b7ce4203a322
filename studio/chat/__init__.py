"""
ChatClient 模块

提供 ChatClient、Advisor 和会话记忆（加载器见 studio.chat.loader）
"""

from .advisor import (
    CONVERSATION_ID,
    TOP_K,
    Advisor,
    BaseChatMemoryAdvisor,
    MessageChatMemoryAdvisor,
    PromptChatMemoryAdvisor,
    SimpleLoggerAdvisor,
)
from .client import ChatClient, ChatClientRequestSpec, ChatClientResponse, DefaultChatClient
from .memory import ChatMemory, InMemoryChatMemory, RedisChatMemory, create_chat_memory
from .model import ModelType, create_chat_model

__all__ = [
    "CONVERSATION_ID",
    "TOP_K",
    "Advisor",
    "BaseChatMemoryAdvisor",
    "MessageChatMemoryAdvisor",
    "PromptChatMemoryAdvisor",
    "SimpleLoggerAdvisor",
    "ChatClient",
    "ChatClientRequestSpec",
    "ChatClientResponse",
    "DefaultChatClient",
    "ChatMemory",
    "InMemoryChatMemory",
    "RedisChatMemory",
    "create_chat_memory",
    "ModelType",
    "create_chat_model",
]
