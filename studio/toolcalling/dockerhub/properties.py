from pydantic_settings import SettingsConfigDict

from studio.toolcalling.common import CommonToolCallProperties
from .constants import DOCKERHUB_BASE_URL, ENV_PREFIX


class DockerhubProperties(CommonToolCallProperties):
    """Dockerhub 工具配置（环境变量前缀 STUDIO_TOOLCALLING_DOCKERHUB_）"""

    base_url: str = DOCKERHUB_BASE_URL

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)
