from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any, List

from studio.chat.model import ModelType


class AdvisorInfo(BaseModel):
    """Advisor 概要"""
    name: str
    type: str  # Advisor 类的完整路径
    order: int = 0


class ChatModelConfig(BaseModel):
    """ChatModel 概要"""
    model_config = ConfigDict(protected_namespaces=())

    name: Optional[str] = None
    model: Optional[str] = None  # 默认使用的模型名称
    model_type: Optional[ModelType] = None
    chat_options: Optional[Dict[str, Any]] = None  # 模型参数（仅支持的模型类型）


class ChatClientVO(BaseModel):
    """ChatClient 概要"""
    name: str
    default_system_text: Optional[str] = None
    default_system_params: Optional[Dict[str, Any]] = None
    chat_options: Optional[Dict[str, Any]] = None
    advisors: Optional[List[AdvisorInfo]] = None
    tools: Optional[List[str]] = None
    is_memory_enabled: Optional[bool] = None
    chat_model: Optional[ChatModelConfig] = None


class ClientRunActionParam(BaseModel):
    """ChatClient 调用参数"""
    key: str  # ChatClient 服务名
    input: str
    prompt: Optional[str] = None  # 系统提示词，覆盖默认值
    chat_options: Optional[Dict[str, Any]] = None  # 模型参数，与默认参数合并
    chat_id: Optional[str] = None  # 会话ID，为空时新建会话


class ActionResult(BaseModel):
    response: str


class TelemetryResult(BaseModel):
    trace_id: Optional[str] = None


class ChatClientRunResult(BaseModel):
    """ChatClient 调用结果"""
    input: ClientRunActionParam
    result: ActionResult
    chat_id: str
    telemetry: TelemetryResult


class ToolInfo(BaseModel):
    """已注册的工具"""
    name: str
    description: Optional[str] = None
