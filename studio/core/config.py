from pydantic_settings import BaseSettings
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """应用配置"""

    # LLM 配置（默认 chatClient 使用）
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.7

    # ChatClient 配置
    chat_clients_file: str = "chat_clients.yaml"  # ChatClient 定义文件
    default_chat_client_enabled: bool = True  # 是否注册默认的 chatClient
    default_chat_client_name: str = "chatClient"
    default_system_prompt: str = ""

    # 会话记忆配置
    chat_memory_backend: str = "memory"  # memory, redis
    chat_memory_ttl_seconds: int = 7 * 24 * 60 * 60

    # Redis 配置（chat_memory_backend=redis 时使用）
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str = ""

    # 工具调用配置
    max_tool_rounds: int = 5  # 单次对话内工具调用最大轮数

    # 链路追踪配置
    tracing_enabled: bool = True
    tracing_service_name: str = "agent-studio"
    tracing_console_export: bool = False  # 是否把 span 输出到控制台

    # 服务器配置
    host: str = "0.0.0.0"
    port: int = 8000

    # 日志配置
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_dir: str = "logs"  # 日志文件目录
    log_file: str = "studio.log"  # 日志文件名
    log_to_file: bool = True  # 是否输出到文件
    log_to_console: bool = True  # 是否输出到控制台

    # 启动配置
    uvicorn_reload: bool = False
    uvicorn_workers: int = 1

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # 忽略 .env 文件中的额外配置项


settings = Settings()

if __name__ == "__main__":
    # 配置简单的控制台日志
    logging.basicConfig(level=logging.INFO)
    logger.info(settings.model_dump())
