"""Advisor：挂载在 ChatClient 请求/响应链路上的可插拔行为

调用模型前按 order 升序执行 before，调用后按降序执行 after。
记忆类 Advisor 都继承自 BaseChatMemoryAdvisor，ChatClient 是否开启记忆即据此判断。
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from .memory import ChatMemory

logger = logging.getLogger(__name__)

# advisor 参数键
CONVERSATION_ID = "chat_memory_conversation_id"
TOP_K = "top_k"

DEFAULT_CONVERSATION_ID = "default"
DEFAULT_CHAT_MEMORY_RESPONSE_SIZE = 100

DEFAULT_SYSTEM_TEXT_ADVISE = (
    "Use the conversation memory from the MEMORY section to provide accurate answers.\n\n"
    "---------------------\n"
    "MEMORY:\n"
    "{memory}\n"
    "---------------------\n"
)


@dataclass
class AdvisedRequest:
    """传给 Advisor 的请求"""

    user_text: str
    system_text: Optional[str] = None
    messages: List[BaseMessage] = field(default_factory=list)  # 位于 system 与 user 之间的历史消息
    options: Dict[str, Any] = field(default_factory=dict)
    advise_context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AdvisedResponse:
    """传给 Advisor 的响应"""

    message: AIMessage
    advise_context: Dict[str, Any] = field(default_factory=dict)


class Advisor:
    """Advisor 基类，默认不做任何处理"""

    order: int = 0

    @property
    def name(self) -> str:
        return self.__class__.__name__

    async def before(self, request: AdvisedRequest) -> AdvisedRequest:
        return request

    async def after(self, request: AdvisedRequest, response: AdvisedResponse) -> AdvisedResponse:
        return response

    def __repr__(self) -> str:
        return f"{self.name}(order={self.order})"


class BaseChatMemoryAdvisor(Advisor):
    """记忆类 Advisor 基类"""

    def __init__(
            self,
            chat_memory: ChatMemory,
            default_conversation_id: str = DEFAULT_CONVERSATION_ID,
            default_retrieve_size: int = DEFAULT_CHAT_MEMORY_RESPONSE_SIZE,
            order: int = -1000,
    ):
        self.chat_memory = chat_memory
        self.default_conversation_id = default_conversation_id
        self.default_retrieve_size = default_retrieve_size
        self.order = order

    def get_conversation_id(self, context: Dict[str, Any]) -> str:
        return context.get(CONVERSATION_ID) or self.default_conversation_id

    def get_retrieve_size(self, context: Dict[str, Any]) -> int:
        size = context.get(TOP_K)
        if size is None:
            return self.default_retrieve_size
        return int(size)

    async def remember(self, request: AdvisedRequest, response: AdvisedResponse) -> None:
        """保存本轮的用户消息和模型回复"""
        conversation_id = self.get_conversation_id(request.advise_context)
        await self.chat_memory.add(
            conversation_id,
            [HumanMessage(content=request.user_text), AIMessage(content=response.message.content)],
        )

    async def after(self, request: AdvisedRequest, response: AdvisedResponse) -> AdvisedResponse:
        await self.remember(request, response)
        return response


class MessageChatMemoryAdvisor(BaseChatMemoryAdvisor):
    """以消息形式回放会话历史"""

    async def before(self, request: AdvisedRequest) -> AdvisedRequest:
        conversation_id = self.get_conversation_id(request.advise_context)
        history = await self.chat_memory.get(conversation_id, self.get_retrieve_size(request.advise_context))
        request.messages = history + request.messages
        logger.debug(f"回放会话历史 {len(history)} 条 (conversation_id={conversation_id})")
        return request


class PromptChatMemoryAdvisor(BaseChatMemoryAdvisor):
    """把会话历史拼接进系统提示词"""

    def __init__(self, chat_memory: ChatMemory, system_text_advise: str = DEFAULT_SYSTEM_TEXT_ADVISE, **kwargs):
        super().__init__(chat_memory, **kwargs)
        self.system_text_advise = system_text_advise

    async def before(self, request: AdvisedRequest) -> AdvisedRequest:
        conversation_id = self.get_conversation_id(request.advise_context)
        history = await self.chat_memory.get(conversation_id, self.get_retrieve_size(request.advise_context))
        memory = "\n".join(f"{m.type}:{m.content}" for m in history)
        advise = self.system_text_advise.format(memory=memory)
        request.system_text = f"{request.system_text}\n\n{advise}" if request.system_text else advise
        return request


class SimpleLoggerAdvisor(Advisor):
    """记录请求与响应"""

    def __init__(self, order: int = 0):
        self.order = order

    async def before(self, request: AdvisedRequest) -> AdvisedRequest:
        logger.debug(f"request: user={request.user_text!r}, system={request.system_text!r}, "
                     f"history={len(request.messages)}, context={request.advise_context}")
        return request

    async def after(self, request: AdvisedRequest, response: AdvisedResponse) -> AdvisedResponse:
        logger.debug(f"response: {response.message.content!r}")
        return response
