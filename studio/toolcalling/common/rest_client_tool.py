"""REST 请求工具

基于 httpx 的同步客户端，统一处理 base_url、默认请求头、超时和错误。
"""

import logging
from typing import Any, Dict, Optional

import httpx

from studio.core.exceptions import ToolCallError
from .json_parse_tool import JsonParseTool
from .properties import CommonToolCallProperties

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "agent-studio-toolcalling",
}


class RestClientTool:
    """REST 请求工具"""

    def __init__(self, json_parse_tool: JsonParseTool, http_client: httpx.Client):
        self.json_parse_tool = json_parse_tool
        self._http_client = http_client

    @classmethod
    def builder(cls, json_parse_tool: JsonParseTool, properties: CommonToolCallProperties) -> "RestClientToolBuilder":
        return RestClientToolBuilder(json_parse_tool, properties)

    def _request(self, method: str, uri: str, **kwargs: Any) -> str:
        try:
            response = self._http_client.request(method, uri, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{method} {uri} 返回异常状态码: {e.response.status_code}")
            raise ToolCallError(f"{method} {uri} 失败，状态码 {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"{method} {uri} 请求失败: {e}")
            raise ToolCallError(f"{method} {uri} 请求失败: {e}")
        return response.text

    def get(self, uri: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET 请求，返回响应文本"""
        return self._request("GET", uri, params=params)

    def post(self, uri: str, body: Any = None) -> str:
        """POST JSON 请求，返回响应文本"""
        return self._request(
            "POST",
            uri,
            content=self.json_parse_tool.to_json(body) if body is not None else None,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._http_client.close()


class RestClientToolBuilder:
    """RestClientTool 构建器"""

    def __init__(self, json_parse_tool: JsonParseTool, properties: CommonToolCallProperties):
        self._json_parse_tool = json_parse_tool
        self._properties = properties
        self._http_client: Optional[httpx.Client] = None

    def http_client(self, http_client: httpx.Client) -> "RestClientToolBuilder":
        """使用已创建的 httpx.Client（此时忽略配置中的连接参数）"""
        self._http_client = http_client
        return self

    def build(self) -> RestClientTool:
        http_client = self._http_client
        if http_client is None:
            headers = {**DEFAULT_HEADERS, **self._properties.headers}
            if self._properties.api_key:
                headers["Authorization"] = f"Bearer {self._properties.api_key}"
            http_client = httpx.Client(
                base_url=self._properties.base_url,
                headers=headers,
                timeout=self._properties.network_timeout,
            )
        return RestClientTool(self._json_parse_tool, http_client)
