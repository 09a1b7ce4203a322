"""ChatClient 服务

列出、查看 ChatClient 的配置，并执行一轮对话。
"""

import logging
import uuid
from typing import List, Optional

from opentelemetry import trace

from studio.chat.advisor import CONVERSATION_ID, TOP_K, BaseChatMemoryAdvisor
from studio.chat.client import ChatClient, ChatClientRequestSpec, DefaultChatClient
from studio.chat.model import ModelType, chat_model_options, model_name
from studio.core.container import ServiceContainer
from studio.core.exceptions import ServiceInternalError
from studio.core.tracing import current_trace_id, get_tracer
from studio.schemas.chat_client import (
    ActionResult,
    AdvisorInfo,
    ChatClientRunResult,
    ChatClientVO,
    ChatModelConfig,
    ClientRunActionParam,
    TelemetryResult,
)
from .interfaces import IChatClientDelegate

logger = logging.getLogger(__name__)

CHAT_CLIENT_DELEGATE_SERVICE = "chat_client_delegate"

DEFAULT_TOP_K = 100

CHAT_MODEL_NAME = "chatModel"


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


class ChatClientDelegateService(IChatClientDelegate):
    """ChatClient 服务实现"""

    def __init__(self, container: ServiceContainer, tracer: Optional[trace.Tracer] = None):
        """初始化 ChatClient 服务

        Args:
            container: 服务容器，ChatClient 均注册在其中
            tracer: OpenTelemetry Tracer，默认使用全局配置
        """
        self.container = container
        self.tracer = tracer or get_tracer(__name__)

    def list(self) -> List[ChatClientVO]:
        res = []
        for name, chat_client in self.container.get_by_type(ChatClient).items():
            logger.info(f"服务名: {name}, 类型: {type(chat_client).__name__}")
            res.append(self._get_chat_client_vo(chat_client, name))
        return res

    def get(self, client_name: str) -> ChatClientVO:
        chat_client = self._get_chat_client(client_name)
        return self._get_chat_client_vo(chat_client, client_name)

    async def run(self, run_action_param: ClientRunActionParam) -> ChatClientRunResult:
        chat_client = self._get_chat_client(run_action_param.key)

        request = chat_client.prompt()
        if _has_text(run_action_param.prompt):
            request.system(run_action_param.prompt)
        if run_action_param.chat_options is not None:
            request.options(run_action_param.chat_options)

        chat_id = run_action_param.chat_id
        if not _has_text(chat_id):
            # 新会话
            chat_id = str(uuid.uuid4())
        request.advisor_params(**{CONVERSATION_ID: chat_id, TOP_K: DEFAULT_TOP_K})

        with self.tracer.start_as_current_span("chat_client.run") as span:
            span.set_attribute("chat_client.name", run_action_param.key)
            span.set_attribute("chat_client.conversation_id", chat_id)
            response = await request.user(run_action_param.input).call()
            trace_id = current_trace_id()

        return ChatClientRunResult(
            input=run_action_param,
            result=ActionResult(response=response.content()),
            chat_id=chat_id,
            telemetry=TelemetryResult(trace_id=trace_id),
        )

    def _get_chat_client(self, client_name: str) -> ChatClient:
        return self.container.get_required(client_name, ChatClient)

    def _get_chat_client_vo(self, chat_client: ChatClient, client_name: str) -> ChatClientVO:
        # 目前仅支持 DefaultChatClient 本身，其他实现只返回名称
        if type(chat_client) is not DefaultChatClient:
            return ChatClientVO(name=client_name)

        try:
            request = chat_client.default_request
            if request is None:
                return ChatClientVO(name=client_name)

            advisors = request.get_advisors()
            fields = dict(
                default_system_text=request.get_system_text(),
                default_system_params=request.get_system_params(),
                chat_options=request.get_chat_options(),
                advisors=[
                    AdvisorInfo(
                        name=advisor.name,
                        type=f"{type(advisor).__module__}.{type(advisor).__qualname__}",
                        order=advisor.order,
                    )
                    for advisor in advisors
                ],
                tools=[tool.name for tool in request.get_tools()],
                # 是否开启 memory
                is_memory_enabled=any(isinstance(advisor, BaseChatMemoryAdvisor) for advisor in advisors),
            )
        except Exception as e:
            logger.error(f"处理 DefaultChatClient 失败 [{client_name}]", exc_info=True)
            raise ServiceInternalError(str(e))

        fields['chat_model'] = self._get_chat_model_config(request)
        return ChatClientVO(name=client_name, **fields)

    def _get_chat_model_config(self, request: ChatClientRequestSpec) -> Optional[ChatModelConfig]:
        # 目前仅支持 ModelType.CHAT 类型
        try:
            chat_model = request.get_chat_model()
            if chat_model is None:
                return None
            return ChatModelConfig(
                name=CHAT_MODEL_NAME,
                model=model_name(chat_model),
                model_type=ModelType.CHAT,
                chat_options=chat_model_options(chat_model),
            )
        except Exception:
            logger.error("处理 ChatModel 失败", exc_info=True)
            return None
