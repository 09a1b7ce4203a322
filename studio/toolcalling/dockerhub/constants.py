ENV_PREFIX = "STUDIO_TOOLCALLING_DOCKERHUB_"

TOOL_NAME = "dockerHubFindImages"

DESCRIPTION = "Search images and tags from dockerhub"

DOCKERHUB_BASE_URL = "https://hub.docker.com"

# 官方镜像所在的命名空间
OFFICIAL_NAMESPACE = "library"
