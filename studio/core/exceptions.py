"""统一业务异常

所有跨模块抛出的业务级错误都继承自 StudioError，
API 层据此统一映射为 HTTP 状态码。
"""


class StudioError(Exception):
    """业务异常基类

    Attributes:
        code: 机器可读错误码
        message: 用户可读错误信息
        http_status: 映射到 HTTP 时使用的状态码
    """

    code = "STUDIO_ERROR"
    http_status = 400

    def __init__(self, message: str, code: str = None, http_status: int = None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        super().__init__(message)


class ServiceInternalError(StudioError):
    """服务内部错误（例如读取 ChatClient 内部配置失败）"""

    code = "SERVICE_INTERNAL_ERROR"
    http_status = 500


class ServiceNotFoundError(StudioError, LookupError):
    """容器中不存在指定服务"""

    code = "SERVICE_NOT_FOUND"
    http_status = 404


class ToolCallError(StudioError):
    """工具调用失败（远程接口异常等）"""

    code = "TOOL_CALL_ERROR"
    http_status = 502
