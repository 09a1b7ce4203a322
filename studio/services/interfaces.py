"""服务接口定义

定义对外服务的抽象接口，遵循依赖倒置原则。
"""

from abc import ABC, abstractmethod
from typing import List

from studio.schemas.chat_client import ChatClientRunResult, ChatClientVO, ClientRunActionParam


class IChatClientDelegate(ABC):
    """ChatClient 服务接口"""

    @abstractmethod
    def list(self) -> List[ChatClientVO]:
        """列出所有已注册的 ChatClient

        Returns:
            ChatClient 概要列表
        """
        pass

    @abstractmethod
    def get(self, client_name: str) -> ChatClientVO:
        """按名称获取 ChatClient 概要

        Args:
            client_name: ChatClient 服务名

        Returns:
            ChatClient 概要

        Raises:
            ServiceNotFoundError: ChatClient 不存在
        """
        pass

    @abstractmethod
    async def run(self, run_action_param: ClientRunActionParam) -> ChatClientRunResult:
        """调用 ChatClient 完成一轮对话

        Args:
            run_action_param: 调用参数

        Returns:
            调用结果（包含回复、会话ID 和 trace id）
        """
        pass
