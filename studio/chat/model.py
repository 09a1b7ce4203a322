"""ChatModel 相关工具

创建 OpenAI 兼容的 ChatModel，并读取模型名称与模型参数。
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from studio.core.config import settings

logger = logging.getLogger(__name__)

# ChatOpenAI 上对外展示的模型参数
CHAT_OPTION_FIELDS = (
    "model_name",
    "temperature",
    "max_tokens",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
    "n",
    "seed",
    "stop",
    "streaming",
)


class ModelType(str, Enum):
    """模型类型"""

    CHAT = "CHAT"
    EMBEDDING = "EMBEDDING"
    IMAGE = "IMAGE"
    AUDIO = "AUDIO"


def create_chat_model(
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        **kwargs: Any
) -> ChatOpenAI:
    """创建 ChatModel 实例

    Args:
        model: 模型名称，默认使用配置中的模型
        temperature: 温度参数，默认使用配置中的温度
        api_key: API key，默认使用配置中的值
        base_url: 接口地址，默认使用配置中的值
        **kwargs: 其他 ChatOpenAI 参数（max_tokens、top_p 等）

    Returns:
        ChatOpenAI 实例
    """
    model = model or settings.llm_model
    temperature = temperature if temperature is not None else settings.llm_temperature

    llm = ChatOpenAI(
        model=model,
        api_key=api_key or settings.llm_api_key or "EMPTY",
        base_url=base_url or settings.llm_base_url,
        temperature=temperature,
        **kwargs
    )
    logger.debug(f"创建 ChatModel 实例: {model}_{temperature}")
    return llm


def model_name(chat_model: BaseChatModel) -> Optional[str]:
    """读取模型默认使用的模型名称"""
    for attr in ("model_name", "model"):
        value = getattr(chat_model, attr, None)
        if isinstance(value, str) and value:
            return value
    return None


def chat_model_options(chat_model: BaseChatModel) -> Optional[Dict[str, Any]]:
    """读取模型参数

    目前仅支持 ChatOpenAI 本身，其他类型（包括子类）返回 None。
    """
    if type(chat_model) is not ChatOpenAI:
        return None

    options = {}
    for attr in CHAT_OPTION_FIELDS:
        value = getattr(chat_model, attr, None)
        if value is not None:
            options["model" if attr == "model_name" else attr] = value
    if chat_model.model_kwargs:
        options.update(chat_model.model_kwargs)
    return options
