from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonToolCallProperties(BaseSettings):
    """工具调用公共配置

    每个工具继承此类并指定自己的环境变量前缀，例如
    STUDIO_TOOLCALLING_DOCKERHUB_ENABLED=false 关闭 Dockerhub 工具。
    """

    enabled: Optional[bool] = None  # 未配置视为开启
    base_url: str = ""
    api_key: Optional[str] = None
    network_timeout: float = 10.0  # 秒
    headers: Dict[str, str] = {}

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
