import pytest

from studio.core.conditions import on_missing_service, on_module, on_property
from studio.core.container import ServiceContainer
from studio.toolcalling import load_tool_calling
from studio.toolcalling.dockerhub import DockerhubAutoConfiguration, DockerhubProperties, DockerhubService, TOOL_NAME
from studio.toolcalling.resolver import ToolResolver


@pytest.fixture(autouse=True)
def clear_dockerhub_env(monkeypatch):
    monkeypatch.delenv("STUDIO_TOOLCALLING_DOCKERHUB_ENABLED", raising=False)


def test_on_property():
    assert on_property(None)
    assert not on_property(None, match_if_missing=False)
    assert on_property(True)
    assert on_property("TRUE")
    assert not on_property(False)
    assert not on_property("false")
    assert on_property("on", having_value="on")


def test_on_module():
    assert on_module("studio.toolcalling.dockerhub")
    assert not on_module("studio.toolcalling.not_a_tool")


def test_on_missing_service():
    c = ServiceContainer()
    assert on_missing_service(c, "x")
    c.register_instance("x", object())
    assert not on_missing_service(c, "x")


def test_registers_when_flag_absent():
    c = ServiceContainer()
    assert DockerhubAutoConfiguration(DockerhubProperties()).apply(c)
    assert isinstance(c.get(TOOL_NAME), DockerhubService)
    assert c.describe(TOOL_NAME) == "Search images and tags from dockerhub"


def test_registers_when_flag_true():
    c = ServiceContainer()
    assert DockerhubAutoConfiguration(DockerhubProperties(enabled=True)).apply(c)
    assert c.has(TOOL_NAME)


def test_skips_when_flag_false():
    c = ServiceContainer()
    assert not DockerhubAutoConfiguration(DockerhubProperties(enabled=False)).apply(c)
    assert not c.has(TOOL_NAME)


def test_flag_read_from_env(monkeypatch):
    monkeypatch.setenv("STUDIO_TOOLCALLING_DOCKERHUB_ENABLED", "false")
    c = ServiceContainer()
    assert load_tool_calling(c) == []
    assert not c.has(TOOL_NAME)


def test_skips_when_marker_missing():
    c = ServiceContainer()
    configuration = DockerhubAutoConfiguration(DockerhubProperties(enabled=True))
    configuration.marker_module = "studio.toolcalling.not_a_tool"
    assert not configuration.apply(c)
    assert not c.has(TOOL_NAME)


def test_existing_service_is_kept():
    c = ServiceContainer()
    existing = object()
    c.register_instance(TOOL_NAME, existing)
    assert not DockerhubAutoConfiguration(DockerhubProperties()).apply(c)
    assert c.get(TOOL_NAME) is existing


def test_load_tool_calling_and_list_tools():
    c = ServiceContainer()
    assert load_tool_calling(c) == ["dockerhub"]
    tools = ToolResolver(c).list_tools()
    assert tools == {TOOL_NAME: "Search images and tags from dockerhub"}
    assert ToolResolver(c).resolve(TOOL_NAME).name == TOOL_NAME
