from typing import Any, Dict, List

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from opentelemetry.sdk.trace import TracerProvider
from pydantic import Field

from studio.chat.loader import CHAT_MEMORY_SERVICE
from studio.chat.memory import InMemoryChatMemory
from studio.core.container import ServiceContainer


class StubChatModel(BaseChatModel):
    """按顺序返回预设回复，并记录每次收到的消息和参数"""

    model: str = "stub-model"
    responses: List[Any] = Field(default_factory=list)
    calls: List[List[BaseMessage]] = Field(default_factory=list)
    call_kwargs: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "stub"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        self.calls.append(list(messages))
        self.call_kwargs.append(kwargs)
        reply = self.responses.pop(0) if self.responses else "ok"
        message = reply if isinstance(reply, AIMessage) else AIMessage(content=reply)
        return ChatResult(generations=[ChatGeneration(message=message)])

    def bind_tools(self, tools, **kwargs):
        return self.bind(tools=[tool.name for tool in tools], **kwargs)


@pytest.fixture
def stub_model():
    return StubChatModel()


@pytest.fixture
def chat_memory():
    return InMemoryChatMemory()


@pytest.fixture
def container(chat_memory):
    container = ServiceContainer()
    container.register_instance(CHAT_MEMORY_SERVICE, chat_memory)
    return container


@pytest.fixture
def tracer():
    return TracerProvider().get_tracer("tests")
