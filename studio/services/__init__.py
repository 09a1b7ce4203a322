"""服务模块

提供对外服务的接口和实现。
"""

from .interfaces import IChatClientDelegate
from .chat_client_delegate import CHAT_CLIENT_DELEGATE_SERVICE, ChatClientDelegateService

__all__ = [
    # 接口
    'IChatClientDelegate',
    # 实现
    'ChatClientDelegateService',
    'CHAT_CLIENT_DELEGATE_SERVICE',
]
