import asyncio

import pytest

from studio.core.container import IService, ServiceContainer
from studio.core.exceptions import ServiceNotFoundError


class Recorder(IService):
    def __init__(self, name, events):
        self.name = name
        self.events = events

    async def initialize(self):
        self.events.append(f"init:{self.name}")

    async def shutdown(self):
        self.events.append(f"shutdown:{self.name}")


class Base:
    pass


class Child(Base):
    pass


def test_register_is_lazy_singleton():
    created = []
    c = ServiceContainer()
    c.register("a", lambda: created.append(1) or Base())
    assert created == []
    assert c.get("a") is c.get("a")
    assert created == [1]


def test_non_singleton_creates_new_instances():
    c = ServiceContainer()
    c.register("a", Base, singleton=False)
    assert c.get("a") is not c.get("a")


def test_get_missing_returns_default():
    c = ServiceContainer()
    assert c.get("missing") is None
    assert c.get("missing", 1) == 1
    assert not c.has("missing")


def test_get_required_missing_and_wrong_type():
    c = ServiceContainer()
    c.register_instance("a", Base())
    with pytest.raises(ServiceNotFoundError) as e:
        c.get_required("missing")
    assert e.value.http_status == 404
    assert isinstance(e.value, LookupError)
    with pytest.raises(ServiceNotFoundError):
        c.get_required("a", Child)
    assert isinstance(c.get_required("a", Base), Base)


def test_get_by_type_keeps_registration_order():
    c = ServiceContainer()
    c.register("second", Child)
    c.register("other", dict)
    c.register("first", Base)
    assert list(c.get_by_type(Base).keys()) == ["second", "first"]
    assert list(c.get_by_type(Child).keys()) == ["second"]


def test_describe():
    c = ServiceContainer()
    c.register("a", Base, description="desc")
    assert c.describe("a") == "desc"
    assert c.describe("missing") is None


def test_lifecycle_order():
    events = []
    c = ServiceContainer()
    c.register("a", lambda: Recorder("a", events))
    c.register("plain", Base)
    c.register("b", lambda: Recorder("b", events))

    asyncio.run(c.initialize_all())
    assert c.list_services() == {"a": True, "plain": False, "b": True}

    asyncio.run(c.shutdown_all())
    assert events == ["init:a", "init:b", "shutdown:b", "shutdown:a"]


def test_get_by_type_propagates_factory_errors():
    def broken():
        raise RuntimeError("factory failed")

    c = ServiceContainer()
    c.register("ok", Base)
    c.register("broken", broken)
    with pytest.raises(RuntimeError):
        c.get_by_type(Base)
