import asyncio
import uuid

import pytest
from langchain_core.tools import StructuredTool
from langchain_openai import ChatOpenAI

from studio.chat import (
    CONVERSATION_ID,
    TOP_K,
    Advisor,
    ChatClient,
    ChatClientRequestSpec,
    DefaultChatClient,
    MessageChatMemoryAdvisor,
    PromptChatMemoryAdvisor,
    SimpleLoggerAdvisor,
    create_chat_model,
)
from studio.chat.model import ModelType
from studio.core.exceptions import ServiceInternalError, ServiceNotFoundError
from studio.schemas.chat_client import ClientRunActionParam
from studio.services import ChatClientDelegateService


class CapturingAdvisor(Advisor):
    def __init__(self):
        self.contexts = []

    async def before(self, request):
        self.contexts.append(dict(request.advise_context))
        return request


class CustomChatClient(ChatClient):
    def prompt(self, user_text=None):
        raise NotImplementedError


class SubclassedChatClient(DefaultChatClient):
    pass


class ExtendedChatOpenAI(ChatOpenAI):
    pass


class BrokenModelRequest(ChatClientRequestSpec):
    def get_chat_model(self):
        raise RuntimeError("model unavailable")


def _search(query: str) -> str:
    """搜索"""
    return query


SEARCH_TOOL = StructuredTool.from_function(func=_search, name="search", description="搜索")


@pytest.fixture
def delegate(container, tracer):
    return ChatClientDelegateService(container, tracer=tracer)


def test_list_returns_clients_in_registration_order(container, delegate, stub_model):
    container.register_instance("b", ChatClient.create(stub_model))
    container.register_instance("a", ChatClient.create(stub_model))
    container.register_instance("not_a_client", object())
    assert [vo.name for vo in delegate.list()] == ["b", "a"]


def test_get_default_chat_client(container, delegate, chat_memory):
    chat_model = create_chat_model(model="gpt-4o-mini", temperature=0.3, api_key="sk-test")
    client = ChatClient.builder(chat_model) \
        .default_system("你是{role}", role="助手") \
        .default_options({"max_tokens": 100}) \
        .default_advisors(MessageChatMemoryAdvisor(chat_memory), SimpleLoggerAdvisor(order=5)) \
        .default_tools(SEARCH_TOOL) \
        .build()
    container.register_instance("assistant", client)

    vo = delegate.get("assistant")

    assert vo.name == "assistant"
    assert vo.default_system_text == "你是{role}"
    assert vo.default_system_params == {"role": "助手"}
    assert vo.chat_options == {"max_tokens": 100}
    assert vo.tools == ["search"]
    assert vo.is_memory_enabled is True
    assert [(a.name, a.order) for a in vo.advisors] == [
        ("MessageChatMemoryAdvisor", -1000),
        ("SimpleLoggerAdvisor", 5),
    ]
    assert vo.advisors[0].type == "studio.chat.advisor.MessageChatMemoryAdvisor"
    assert vo.chat_model.name == "chatModel"
    assert vo.chat_model.model == "gpt-4o-mini"
    assert vo.chat_model.model_type == ModelType.CHAT
    assert vo.chat_model.chat_options["model"] == "gpt-4o-mini"
    assert vo.chat_model.chat_options["temperature"] == 0.3


def test_memory_flag(container, delegate, stub_model, chat_memory):
    container.register_instance("plain", ChatClient.builder(stub_model).default_advisors(SimpleLoggerAdvisor()).build())
    container.register_instance("prompt_memory", ChatClient.builder(stub_model).default_advisors(
        PromptChatMemoryAdvisor(chat_memory)).build())
    assert delegate.get("plain").is_memory_enabled is False
    assert delegate.get("prompt_memory").is_memory_enabled is True


def test_unsupported_model_has_no_options(container, delegate, stub_model):
    container.register_instance("stub", ChatClient.create(stub_model))
    container.register_instance("extended", ChatClient.create(ExtendedChatOpenAI(model="gpt-4o", api_key="sk-test")))

    stub_vo = delegate.get("stub")
    assert stub_vo.chat_model.model == "stub-model"
    assert stub_vo.chat_model.chat_options is None
    assert delegate.get("extended").chat_model.chat_options is None


def test_unsupported_client_types_only_have_name(container, delegate, stub_model):
    container.register_instance("custom", CustomChatClient())
    container.register_instance("sub", SubclassedChatClient(ChatClientRequestSpec(stub_model, system_text="x")))
    for name in ("custom", "sub"):
        vo = delegate.get(name)
        assert vo.name == name
        assert vo.default_system_text is None
        assert vo.advisors is None
        assert vo.chat_model is None


def test_unreadable_default_request_is_internal_error(container, delegate):
    container.register_instance("broken", DefaultChatClient(object()))
    with pytest.raises(ServiceInternalError) as e:
        delegate.get("broken")
    assert e.value.http_status == 500
    with pytest.raises(ServiceInternalError):
        delegate.list()


def test_model_read_failure_keeps_other_fields(container, delegate, stub_model):
    container.register_instance("client", DefaultChatClient(BrokenModelRequest(stub_model, system_text="sys")))
    vo = delegate.get("client")
    assert vo.default_system_text == "sys"
    assert vo.chat_model is None


def test_get_missing_client(delegate):
    with pytest.raises(ServiceNotFoundError):
        delegate.get("missing")


def test_run_generates_chat_id(container, delegate, stub_model):
    advisor = CapturingAdvisor()
    stub_model.responses.append("hello")
    container.register_instance("client", ChatClient.builder(stub_model).default_advisors(advisor).build())

    result = asyncio.run(delegate.run(ClientRunActionParam(key="client", input="hi")))

    assert result.result.response == "hello"
    assert str(uuid.UUID(result.chat_id)) == result.chat_id
    assert advisor.contexts[0] == {CONVERSATION_ID: result.chat_id, TOP_K: 100}
    assert result.input.input == "hi"
    assert len(result.telemetry.trace_id) == 32
    int(result.telemetry.trace_id, 16)


def test_run_blank_chat_id_generates_new(container, delegate, stub_model):
    container.register_instance("client", ChatClient.create(stub_model))
    result = asyncio.run(delegate.run(ClientRunActionParam(key="client", input="hi", chat_id="  ")))
    assert result.chat_id.strip()
    assert result.chat_id != "  "


def test_run_reuses_chat_id_and_memory(container, delegate, stub_model, chat_memory):
    stub_model.responses.extend(["a1", "a2"])
    container.register_instance("client", ChatClient.builder(stub_model).default_advisors(
        MessageChatMemoryAdvisor(chat_memory)).build())

    first = asyncio.run(delegate.run(ClientRunActionParam(key="client", input="q1", chat_id="chat-1")))
    second = asyncio.run(delegate.run(ClientRunActionParam(key="client", input="q2", chat_id="chat-1")))

    assert first.chat_id == second.chat_id == "chat-1"
    assert [m.content for m in stub_model.calls[1]] == ["q1", "a1", "q2"]
    assert first.telemetry.trace_id != second.telemetry.trace_id


def test_run_overrides_prompt_and_options(container, delegate, stub_model):
    container.register_instance("client", ChatClient.builder(stub_model).default_system("default").default_options(
        {"max_tokens": 10}).build())

    asyncio.run(delegate.run(ClientRunActionParam(
        key="client", input="hi", prompt="override", chat_options={"temperature": 0.5})))
    asyncio.run(delegate.run(ClientRunActionParam(key="client", input="hi", prompt="   ")))

    assert stub_model.calls[0][0].content == "override"
    assert stub_model.call_kwargs[0]["max_tokens"] == 10
    assert stub_model.call_kwargs[0]["temperature"] == 0.5
    assert stub_model.calls[1][0].content == "default"
    assert "temperature" not in stub_model.call_kwargs[1]


def test_run_missing_client(delegate):
    with pytest.raises(ServiceNotFoundError):
        asyncio.run(delegate.run(ClientRunActionParam(key="missing", input="hi")))


def test_run_keeps_caller_prompt_with_braces(container, delegate, stub_model):
    container.register_instance("client", ChatClient.builder(stub_model).default_system(
        "你是{role}", role="助手").build())

    asyncio.run(delegate.run(ClientRunActionParam(key="client", input="hi", prompt="返回 {data.items} 字段")))
    asyncio.run(delegate.run(ClientRunActionParam(key="client", input="hi", prompt="取 {items[0]} 和 {n:>4}")))

    assert stub_model.calls[0][0].content == "返回 {data.items} 字段"
    assert stub_model.calls[1][0].content == "取 {items[0]} 和 {n:>4}"


def test_list_propagates_client_creation_errors(container, delegate, stub_model):
    def broken():
        raise RuntimeError("cannot build client")

    container.register_instance("ok", ChatClient.create(stub_model))
    container.register("broken", broken)
    with pytest.raises(RuntimeError):
        delegate.list()
