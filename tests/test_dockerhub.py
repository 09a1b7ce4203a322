import json

import httpx
import pytest

from studio.core.exceptions import ToolCallError
from studio.toolcalling.common import JsonParseTool, RestClientTool
from studio.toolcalling.dockerhub import DockerhubProperties, DockerhubService, Request, TOOL_NAME
from studio.toolcalling.dockerhub.service import split_repository

SEARCH_RESULT = {
    "count": 3,
    "results": [
        {
            "repo_name": "nginx",
            "short_description": "Official build of Nginx.",
            "star_count": 20000,
            "pull_count": 1000000000,
            "is_official": True,
            "is_automated": False,
        },
        {"repo_name": "bitnami/nginx", "short_description": "", "star_count": 200, "pull_count": 5000},
        {"short_description": "no name"},
    ],
}

TAGS_RESULT = {
    "results": [
        {"name": "latest", "last_updated": "2024-05-01T00:00:00Z", "full_size": 1000},
        {"name": "1.25", "last_updated": "2024-04-01T00:00:00Z", "full_size": 900},
    ],
}


def _service(handler):
    http_client = httpx.Client(base_url="https://hub.docker.com", transport=httpx.MockTransport(handler))
    rest_client_tool = RestClientTool.builder(JsonParseTool(), DockerhubProperties()).http_client(http_client).build()
    return DockerhubService(rest_client_tool)


def _dockerhub(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/v2/search/repositories/":
            return httpx.Response(200, json=SEARCH_RESULT)
        if request.url.path.endswith("/tags"):
            return httpx.Response(200, json=TAGS_RESULT)
        return httpx.Response(404)
    return handler


def test_split_repository():
    assert split_repository("nginx") == ("library", "nginx")
    assert split_repository("bitnami/nginx") == ("bitnami", "nginx")


def test_search_images():
    requests = []
    images = _service(_dockerhub(requests)).search_images("nginx", page_size=5)

    assert [image.name for image in images] == ["nginx", "bitnami/nginx"]
    assert images[0].is_official
    assert images[0].star_count == 20000
    assert images[1].description is None
    assert images[1].tags is None
    assert requests[0].url.params["query"] == "nginx"
    assert requests[0].url.params["page_size"] == "5"


def test_search_with_tags():
    requests = []
    response = _service(_dockerhub(requests))(Request(query="nginx", include_tags=True, tag_count=2))

    assert [tag.name for tag in response.images[0].tags] == ["latest", "1.25"]
    paths = [r.url.path for r in requests]
    assert paths[1:] == ["/v2/repositories/library/nginx/tags", "/v2/repositories/bitnami/nginx/tags"]
    assert requests[1].url.params["ordering"] == "last_updated"


def test_http_error_raises_tool_call_error():
    service = _service(lambda request: httpx.Response(503))
    with pytest.raises(ToolCallError) as e:
        service.search_images("nginx")
    assert "503" in e.value.message


def test_as_tool_returns_json():
    tool = _service(_dockerhub([])).as_tool()
    assert tool.name == TOOL_NAME
    result = json.loads(tool.invoke({"query": "nginx"}))
    assert result["images"][0]["name"] == "nginx"


def test_rest_client_post_sends_json():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, text="{}")

    http_client = httpx.Client(base_url="https://example.com", transport=httpx.MockTransport(handler))
    tool = RestClientTool(JsonParseTool(), http_client)
    assert tool.post("/items", {"name": "镜像"}) == "{}"
    assert json.loads(captured[0].content) == {"name": "镜像"}
    assert captured[0].headers["Content-Type"] == "application/json"


def test_json_parse_tool():
    parser = JsonParseTool()
    text = '{"data": {"items": [{"name": "nginx"}]}}'
    assert parser.get_field_value(text, "data.items.0.name") == "nginx"
    assert parser.get_field_value(text, "data.missing.name") is None
    with pytest.raises(ValueError):
        parser.json_to_dict("[1, 2]")
