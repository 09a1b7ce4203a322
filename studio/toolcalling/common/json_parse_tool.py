"""JSON 解析工具

工具服务统一通过它做 JSON 与对象之间的转换。
"""

import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)


class JsonParseTool:
    """JSON 解析工具"""

    def to_json(self, obj: Any) -> str:
        """对象序列化为 JSON 字符串"""
        if isinstance(obj, BaseModel):
            return obj.model_dump_json(exclude_none=True)
        return json.dumps(obj, ensure_ascii=False)

    def json_to_dict(self, text: str) -> Dict[str, Any]:
        """JSON 字符串解析为字典

        Raises:
            ValueError: 不是合法的 JSON 对象
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"期望 JSON 对象，实际为 {type(data).__name__}")
        return data

    def json_to_object(self, text: str, model: Type[M]) -> M:
        """JSON 字符串解析为 pydantic 模型"""
        return model.model_validate_json(text)

    def get_field_value(self, text: str, path: str) -> Optional[Any]:
        """按点分路径读取字段，例如 'data.items.0.name'

        路径不存在时返回 None。
        """
        value: Any = json.loads(text)
        for key in path.split('.'):
            if isinstance(value, dict):
                value = value.get(key)
            elif isinstance(value, list) and key.isdigit() and int(key) < len(value):
                value = value[int(key)]
            else:
                return None
            if value is None:
                return None
        return value
