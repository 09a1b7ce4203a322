"""
ChatClient 加载器

读取 ChatClient 定义文件（YAML），为每个启用的定义注册一个 DefaultChatClient 服务。

定义文件格式：
    clients:
      - name: dockerAssistant
        enabled: true
        system: "你是{role}"
        system_params:
          role: Docker 助手
        model:
          model: gpt-4o-mini
          temperature: 0.2
          api_key: ${OPENAI_API_KEY}
        options:
          max_tokens: 1024
        advisors:
          - type: message_memory
          - type: logger
        tools:
          - dockerHubFindImages
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from studio.core.config import settings
from studio.core.container import ServiceContainer
from studio.toolcalling.resolver import ToolResolver
from .advisor import Advisor, MessageChatMemoryAdvisor, PromptChatMemoryAdvisor, SimpleLoggerAdvisor
from .client import ChatClient, DefaultChatClient
from .memory import ChatMemory, InMemoryChatMemory
from .model import create_chat_model

logger = logging.getLogger(__name__)

CHAT_MEMORY_SERVICE = "chat_memory"

MEMORY_ADVISOR_TYPES = {
    "message_memory": MessageChatMemoryAdvisor,
    "prompt_memory": PromptChatMemoryAdvisor,
}


class ChatClientLoader:
    """ChatClient 加载器

    负责读取定义、构建并注册 ChatClient
    """

    def __init__(self, container: ServiceContainer):
        """初始化加载器

        Args:
            container: 服务容器实例
        """
        self.container = container
        self.tool_resolver = ToolResolver(container)

    @classmethod
    def load_all_clients(cls, container: ServiceContainer, config_file: Optional[str] = None) -> List[str]:
        """加载所有 ChatClient

        Args:
            container: 服务容器实例
            config_file: 定义文件路径，默认取 settings.chat_clients_file

        Returns:
            已注册的 ChatClient 名称
        """
        loader = cls(container)
        return loader._load_all(config_file or settings.chat_clients_file)

    def _load_all(self, config_file: str) -> List[str]:
        """内部方法：加载所有 ChatClient"""
        registered = []

        if settings.default_chat_client_enabled:
            name = settings.default_chat_client_name
            self.container.register(name, self._build_default_client, description="默认 ChatClient")
            registered.append(name)

        for definition in self._read_definitions(Path(config_file)):
            try:
                name = self._register_client(definition)
            except Exception as e:
                logger.error(f"加载 ChatClient 失败 [{definition.get('name', '?')}]: {e}", exc_info=True)
                continue
            if name:
                registered.append(name)

        logger.info(f"ChatClient 加载完成，共 {len(registered)} 个: {registered}")
        return registered

    def _read_definitions(self, config_file: Path) -> List[Dict[str, Any]]:
        """读取定义文件，文件不存在时返回空列表"""
        if not config_file.exists():
            logger.info(f"ChatClient 定义文件不存在，跳过: {config_file}")
            return []

        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}

        definitions = config.get('clients') or []
        if not isinstance(definitions, list):
            raise ValueError(f"{config_file} 中的 clients 必须为列表")
        return definitions

    def _register_client(self, definition: Dict[str, Any]) -> Optional[str]:
        """注册单个 ChatClient

        Returns:
            注册的名称，禁用时返回 None
        """
        name = definition.get('name')
        if not isinstance(name, str) or not name.strip():
            raise ValueError("ChatClient 定义缺少 name")

        if not definition.get('enabled', True):
            logger.info(f"ChatClient [{name}] 已禁用，跳过加载")
            return None

        self._check_definition(definition)

        self.container.register(
            name,
            lambda: self.build_client(definition),
            description=definition.get('description'),
        )
        logger.info(f"✓ ChatClient 已注册: {name}")
        return name

    def _check_definition(self, definition: Dict[str, Any]) -> None:
        """注册前检查 advisor 类型和工具名称

        Raises:
            ValueError: 未知的 advisor 类型
            ServiceNotFoundError: 工具不存在或不是工具服务
        """
        for spec in definition.get('advisors') or []:
            _advisor_type(spec)
        self.tool_resolver.resolve_all(definition.get('tools') or [])

    def build_client(self, definition: Dict[str, Any]) -> DefaultChatClient:
        """根据定义构建 DefaultChatClient"""
        model_config = resolve_config(definition.get('model') or {})
        builder = ChatClient.builder(create_chat_model(**model_config))

        if definition.get('system'):
            builder.default_system(definition['system'], **(definition.get('system_params') or {}))
        if definition.get('options'):
            builder.default_options(definition['options'])

        advisors = [self._build_advisor(spec) for spec in definition.get('advisors') or []]
        if advisors:
            builder.default_advisors(*advisors)

        tool_names = definition.get('tools') or []
        if tool_names:
            builder.default_tools(*self.tool_resolver.resolve_all(tool_names))

        return builder.build()

    def _build_default_client(self) -> DefaultChatClient:
        builder = ChatClient.builder(create_chat_model())
        if settings.default_system_prompt:
            builder.default_system(settings.default_system_prompt)
        return builder.default_advisors(
            MessageChatMemoryAdvisor(self._chat_memory()),
            SimpleLoggerAdvisor(),
        ).build()

    def _build_advisor(self, spec: Any) -> Advisor:
        """根据定义构建 Advisor，支持字符串或 {type, order, ...}"""
        advisor_type = _advisor_type(spec)
        kwargs = {} if isinstance(spec, str) else {k: v for k, v in spec.items() if k != 'type'}

        if advisor_type in MEMORY_ADVISOR_TYPES:
            return MEMORY_ADVISOR_TYPES[advisor_type](self._chat_memory(), **kwargs)
        return SimpleLoggerAdvisor(**kwargs)

    def _chat_memory(self) -> ChatMemory:
        memory = self.container.get(CHAT_MEMORY_SERVICE)
        if memory is None:
            logger.warning("会话记忆服务未注册，使用独立的内存存储")
            memory = InMemoryChatMemory()
        return memory


def _advisor_type(spec: Any) -> str:
    """读取 advisor 定义的类型，支持字符串或 {type, order, ...}"""
    advisor_type = spec if isinstance(spec, str) else (spec or {}).get('type')
    if advisor_type not in MEMORY_ADVISOR_TYPES and advisor_type != 'logger':
        raise ValueError(f"未知的 advisor 类型: {advisor_type}")
    return advisor_type


def resolve_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """解析配置，支持环境变量替换

    Args:
        config: 原始配置字典

    Returns:
        解析后的配置字典
    """
    resolved_config = {}

    for key, value in config.items():
        if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
            # 环境变量格式: ${ENV_VAR_NAME}
            env_var_name = value[2:-1]
            env_value = os.getenv(env_var_name)

            if env_value is None:
                logger.warning(f"环境变量 {env_var_name} 未设置，使用空字符串")
                resolved_config[key] = ""
            else:
                resolved_config[key] = env_value
        else:
            resolved_config[key] = value

    return resolved_config
