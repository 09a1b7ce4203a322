"""ChatClient

对 LangChain ChatModel 的一层封装：默认系统提示词、默认模型参数、Advisor 链和工具调用。

用法：
    client = ChatClient.builder(chat_model).default_system("你是助手").build()
    text = (await client.prompt().user("你好").call()).content()
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_core.tools import BaseTool
from pydantic import BaseModel

from studio.core.config import settings
from studio.core.exceptions import ToolCallError
from .advisor import Advisor, AdvisedRequest, AdvisedResponse

logger = logging.getLogger(__name__)


PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")


def _render(text: Optional[str], params: Dict[str, Any]) -> Optional[str]:
    """用参数替换 {name} 形式的占位符

    只替换 params 中存在的名称，其余花括号内容（JSON、{a.b}、{x[0]}、{n:>4} 等）原样保留。
    """
    if not text or not params:
        return text

    def replace(match):
        key = match.group(1)
        return str(params[key]) if key in params else match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, text)


def _as_options(options: Any) -> Dict[str, Any]:
    if options is None:
        return {}
    if isinstance(options, BaseModel):
        return options.model_dump(exclude_none=True)
    return {k: v for k, v in dict(options).items() if v is not None}


class ChatClientResponse:
    """一次调用的结果"""

    def __init__(self, message: AIMessage, advise_context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.advise_context = advise_context or {}

    def content(self) -> str:
        content = self.message.content
        return content if isinstance(content, str) else str(content)


class ChatClientRequestSpec:
    """一次对话请求的描述（链式设置）

    DefaultChatClient 以它保存默认配置，每次 prompt() 返回一份副本。
    """

    def __init__(
            self,
            chat_model: BaseChatModel,
            system_text: Optional[str] = None,
            system_params: Optional[Dict[str, Any]] = None,
            user_text: Optional[str] = None,
            user_params: Optional[Dict[str, Any]] = None,
            chat_options: Optional[Dict[str, Any]] = None,
            advisors: Optional[Sequence[Advisor]] = None,
            advisor_params: Optional[Dict[str, Any]] = None,
            tools: Optional[Sequence[BaseTool]] = None,
            max_tool_rounds: Optional[int] = None,
    ):
        self._chat_model = chat_model
        self._system_text = system_text
        self._system_params = dict(system_params or {})
        self._user_text = user_text
        self._user_params = dict(user_params or {})
        self._chat_options = dict(chat_options or {})
        self._advisors: List[Advisor] = list(advisors or [])
        self._advisor_params = dict(advisor_params or {})
        self._tools: List[BaseTool] = list(tools or [])
        self._max_tool_rounds = max_tool_rounds if max_tool_rounds is not None else settings.max_tool_rounds

    # ---- 只读访问（设置方法同名，读取统一使用 get_*） ----

    def get_chat_model(self) -> BaseChatModel:
        return self._chat_model

    def get_system_text(self) -> Optional[str]:
        return self._system_text

    def get_system_params(self) -> Dict[str, Any]:
        return dict(self._system_params)

    def get_user_text(self) -> Optional[str]:
        return self._user_text

    def get_chat_options(self) -> Dict[str, Any]:
        return dict(self._chat_options)

    def get_advisors(self) -> List[Advisor]:
        return list(self._advisors)

    def get_advisor_params(self) -> Dict[str, Any]:
        return dict(self._advisor_params)

    def get_tools(self) -> List[BaseTool]:
        return list(self._tools)

    def mutate(self) -> "ChatClientRequestSpec":
        """复制一份请求，修改副本不影响原请求"""
        return ChatClientRequestSpec(
            chat_model=self._chat_model,
            system_text=self._system_text,
            system_params=self._system_params,
            user_text=self._user_text,
            user_params=self._user_params,
            chat_options=self._chat_options,
            advisors=self._advisors,
            advisor_params=self._advisor_params,
            tools=self._tools,
            max_tool_rounds=self._max_tool_rounds,
        )

    # ---- 链式设置 ----

    def system(self, text: str, **params: Any) -> "ChatClientRequestSpec":
        self._system_text = text
        self._system_params.update(params)
        return self

    def user(self, text: str, **params: Any) -> "ChatClientRequestSpec":
        self._user_text = text
        self._user_params.update(params)
        return self

    def options(self, options: Any) -> "ChatClientRequestSpec":
        """设置模型参数（dict 或 pydantic 模型），与默认参数合并"""
        self._chat_options.update(_as_options(options))
        return self

    def advisors(self, *advisors: Advisor) -> "ChatClientRequestSpec":
        self._advisors.extend(advisors)
        return self

    def advisor_params(self, **params: Any) -> "ChatClientRequestSpec":
        """设置传给 Advisor 的参数（如会话 ID）"""
        self._advisor_params.update(params)
        return self

    def tools(self, *tools: BaseTool) -> "ChatClientRequestSpec":
        self._tools.extend(tools)
        return self

    # ---- 调用 ----

    async def call(self) -> ChatClientResponse:
        """执行一次对话

        Returns:
            ChatClientResponse

        Raises:
            ValueError: 未设置用户输入
        """
        if not self._user_text:
            raise ValueError("用户输入不能为空")

        request = AdvisedRequest(
            user_text=_render(self._user_text, self._user_params),
            system_text=_render(self._system_text, self._system_params),
            options=dict(self._chat_options),
            advise_context=dict(self._advisor_params),
        )

        advisors = sorted(self._advisors, key=lambda a: a.order)
        for advisor in advisors:
            request = await advisor.before(request)

        message = await self._invoke_model(request)
        response = AdvisedResponse(message=message, advise_context=request.advise_context)

        for advisor in reversed(advisors):
            response = await advisor.after(request, response)

        return ChatClientResponse(response.message, response.advise_context)

    async def _invoke_model(self, request: AdvisedRequest) -> AIMessage:
        messages: List[BaseMessage] = []
        if request.system_text:
            messages.append(SystemMessage(content=request.system_text))
        messages.extend(request.messages)
        messages.append(HumanMessage(content=request.user_text))

        runnable = self._chat_model.bind_tools(self._tools) if self._tools else self._chat_model
        if request.options:
            runnable = runnable.bind(**request.options)

        tools_by_name = {tool.name: tool for tool in self._tools}
        tool_round = 0
        while True:
            message = await runnable.ainvoke(messages)
            tool_calls = getattr(message, "tool_calls", None)
            if not tool_calls or not tools_by_name:
                return message

            if tool_round >= self._max_tool_rounds:
                logger.warning(f"工具调用已达到最大轮数 {self._max_tool_rounds}，停止调用")
                return message
            tool_round += 1

            messages.append(message)
            for tool_call in tool_calls:
                messages.append(await self._run_tool(tools_by_name, tool_call))

    async def _run_tool(self, tools_by_name: Dict[str, BaseTool], tool_call: Dict[str, Any]) -> ToolMessage:
        name = tool_call["name"]
        tool = tools_by_name.get(name)
        if tool is None:
            content = f"Error: unknown tool '{name}'"
        else:
            logger.info(f"调用工具: {name} args={tool_call.get('args')}")
            try:
                result = await tool.ainvoke(tool_call.get("args", {}))
                content = result if isinstance(result, str) else str(result)
            except ToolCallError as e:
                logger.warning(f"工具 {name} 调用失败: {e.message}")
                content = f"Error: {e.message}"
        return ToolMessage(content=content, tool_call_id=tool_call["id"], name=name)


class ChatClient(ABC):
    """ChatClient 接口"""

    @abstractmethod
    def prompt(self, user_text: Optional[str] = None) -> ChatClientRequestSpec:
        """开始一次对话请求"""
        pass

    @staticmethod
    def builder(chat_model: BaseChatModel) -> "ChatClientBuilder":
        return ChatClientBuilder(chat_model)

    @staticmethod
    def create(chat_model: BaseChatModel) -> "ChatClient":
        return ChatClientBuilder(chat_model).build()


class DefaultChatClient(ChatClient):
    """默认 ChatClient 实现

    默认请求只通过 default_request 暴露（只读副本语义由 prompt() 保证）。
    """

    def __init__(self, default_request: ChatClientRequestSpec):
        self._default_request = default_request

    @property
    def default_request(self) -> ChatClientRequestSpec:
        return self._default_request

    def prompt(self, user_text: Optional[str] = None) -> ChatClientRequestSpec:
        request = self._default_request.mutate()
        if user_text:
            request.user(user_text)
        return request


class ChatClientBuilder:
    """DefaultChatClient 构建器"""

    def __init__(self, chat_model: BaseChatModel):
        self._default_request = ChatClientRequestSpec(chat_model)

    def default_system(self, text: str, **params: Any) -> "ChatClientBuilder":
        self._default_request.system(text, **params)
        return self

    def default_options(self, options: Any) -> "ChatClientBuilder":
        self._default_request.options(options)
        return self

    def default_advisors(self, *advisors: Advisor) -> "ChatClientBuilder":
        self._default_request.advisors(*advisors)
        return self

    def default_advisor_params(self, **params: Any) -> "ChatClientBuilder":
        self._default_request.advisor_params(**params)
        return self

    def default_tools(self, *tools: BaseTool) -> "ChatClientBuilder":
        self._default_request.tools(*tools)
        return self

    def build(self) -> DefaultChatClient:
        return DefaultChatClient(self._default_request)
