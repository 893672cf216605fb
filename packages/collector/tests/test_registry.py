import logging

import pytest

from publication_collector.ports import IPublicationRegistry
from publication_collector.primitives.exceptions import PublicationRegistrationError
from publication_collector.registry import PublicationRegistry, get_default_registry


def handler_func(session) -> None:
    pass


def other_handler(session) -> None:
    pass


def test_register_and_get(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    registry = PublicationRegistry()

    registry.register("widgets", handler_func)
    assert registry.get("widgets") is handler_func
    assert "widgets" in registry
    assert "Registered publication 'widgets'" in caplog.text

    # Same handler again is fine
    registry.register("widgets", handler_func)

    with pytest.raises(PublicationRegistrationError, match="Duplicate publication"):
        registry.register("widgets", other_handler)


def test_unknown_name_returns_none() -> None:
    registry = PublicationRegistry()
    assert registry.get("missing") is None
    assert "missing" not in registry


def test_publish_decorator() -> None:
    registry = PublicationRegistry()

    @registry.publish("gadgets")
    def gadgets(session) -> None:
        pass

    assert registry.get("gadgets") is gadgets
    assert registry.names() == ["gadgets"]


def test_unregister_and_clear() -> None:
    registry = PublicationRegistry()
    registry.register("a", handler_func)
    registry.register("b", other_handler)

    registry.unregister("a")
    registry.unregister("never-registered")
    assert registry.names() == ["b"]

    registry.clear()
    assert registry.names() == []


def test_registry_satisfies_port() -> None:
    assert isinstance(PublicationRegistry(), IPublicationRegistry)
    assert get_default_registry() is get_default_registry()
