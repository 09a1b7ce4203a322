"""Dockerhub 镜像搜索服务

根据关键词搜索 Docker Hub 镜像，可选地附带每个镜像最近的标签。
"""

import logging
from typing import List, Optional

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from studio.core.container import IService
from studio.toolcalling.common import RestClientTool
from .constants import DESCRIPTION, OFFICIAL_NAMESPACE, TOOL_NAME

logger = logging.getLogger(__name__)

SEARCH_URI = "/v2/search/repositories/"
TAGS_URI = "/v2/repositories/{namespace}/{repository}/tags"


class Request(BaseModel):
    """搜索请求"""

    query: str = Field(description="Image name or keyword to search on Docker Hub, e.g. 'nginx'")
    page_size: int = Field(default=10, ge=1, le=100, description="Maximum number of images to return")
    include_tags: bool = Field(default=False, description="Whether to list the latest tags of each image")
    tag_count: int = Field(default=5, ge=1, le=100, description="Maximum number of tags per image")


class TagInfo(BaseModel):
    name: str
    last_updated: Optional[str] = None
    full_size: Optional[int] = None


class ImageInfo(BaseModel):
    name: str
    description: Optional[str] = None
    star_count: int = 0
    pull_count: int = 0
    is_official: bool = False
    is_automated: bool = False
    tags: Optional[List[TagInfo]] = None


class Response(BaseModel):
    """搜索结果"""

    images: List[ImageInfo] = []


def split_repository(repo_name: str) -> tuple:
    """拆分镜像名为 (命名空间, 仓库名)，官方镜像的命名空间为 library"""
    if "/" in repo_name:
        namespace, repository = repo_name.split("/", 1)
        return namespace, repository
    return OFFICIAL_NAMESPACE, repo_name


class DockerhubService(IService):
    """Dockerhub 镜像搜索服务"""

    def __init__(self, rest_client_tool: RestClientTool):
        self.rest_client_tool = rest_client_tool
        self.json_parse_tool = rest_client_tool.json_parse_tool

    async def initialize(self) -> None:
        logger.info("Dockerhub 搜索服务初始化完成")

    async def shutdown(self) -> None:
        self.rest_client_tool.close()
        logger.info("Dockerhub 搜索服务已关闭")

    def __call__(self, request: Request) -> Response:
        logger.info(f"搜索 Dockerhub 镜像: query={request.query!r}, include_tags={request.include_tags}")
        images = self.search_images(request.query, request.page_size)
        if request.include_tags:
            for image in images:
                image.tags = self.list_tags(image.name, request.tag_count)
        return Response(images=images)

    def search_images(self, query: str, page_size: int = 10) -> List[ImageInfo]:
        """搜索镜像

        Args:
            query: 关键词
            page_size: 返回数量上限

        Returns:
            镜像列表
        """
        text = self.rest_client_tool.get(SEARCH_URI, params={"query": query, "page_size": page_size})
        results = self.json_parse_tool.json_to_dict(text).get("results") or []

        images = []
        for item in results[:page_size]:
            name = item.get("repo_name")
            if not name:
                continue
            images.append(ImageInfo(
                name=name,
                description=item.get("short_description") or None,
                star_count=item.get("star_count") or 0,
                pull_count=item.get("pull_count") or 0,
                is_official=bool(item.get("is_official")),
                is_automated=bool(item.get("is_automated")),
            ))
        logger.debug(f"Dockerhub 返回 {len(images)} 个镜像")
        return images

    def list_tags(self, repo_name: str, count: int = 5) -> List[TagInfo]:
        """列出镜像最近更新的标签"""
        namespace, repository = split_repository(repo_name)
        text = self.rest_client_tool.get(
            TAGS_URI.format(namespace=namespace, repository=repository),
            params={"page_size": count, "ordering": "last_updated"},
        )
        results = self.json_parse_tool.json_to_dict(text).get("results") or []
        return [
            TagInfo(name=item["name"], last_updated=item.get("last_updated"), full_size=item.get("full_size"))
            for item in results[:count]
            if item.get("name")
        ]

    def _run(self, query: str, page_size: int = 10, include_tags: bool = False, tag_count: int = 5) -> str:
        response = self(Request(query=query, page_size=page_size, include_tags=include_tags, tag_count=tag_count))
        return self.json_parse_tool.to_json(response)

    def as_tool(self) -> StructuredTool:
        """包装为 LangChain 工具，供 ChatClient 调用"""
        return StructuredTool.from_function(
            func=self._run,
            name=TOOL_NAME,
            description=DESCRIPTION,
            args_schema=Request,
        )
