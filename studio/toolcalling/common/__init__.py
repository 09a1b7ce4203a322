"""工具调用公共组件"""

from .json_parse_tool import JsonParseTool
from .properties import CommonToolCallProperties
from .rest_client_tool import RestClientTool, RestClientToolBuilder

__all__ = [
    "JsonParseTool",
    "CommonToolCallProperties",
    "RestClientTool",
    "RestClientToolBuilder",
]
