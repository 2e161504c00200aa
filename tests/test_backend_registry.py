from __future__ import annotations

import pytest

from texcompiler.backends import registry
from texcompiler.backends.raster import RasterBackend
from tests.utils import FakeBackend


@pytest.fixture(autouse=True)
def _fresh_registry():
    registry.backend_factories.cache_clear()
    yield
    registry.backend_factories.cache_clear()


def _plugins(monkeypatch, *entry_points) -> None:
    monkeypatch.setattr(
        "texcompiler.backends.registry.metadata.entry_points",
        lambda group: list(entry_points),
    )


class _EntryPoint:
    def __init__(self, name, target=None, error=None) -> None:
        self.name = name
        self._target = target
        self._error = error

    def load(self):
        if self._error is not None:
            raise self._error
        return self._target


def test_default_backend_is_raster() -> None:
    backend = registry.get_backend()
    assert isinstance(backend, RasterBackend)
    assert "RGB" in backend.spec().formats


def test_unknown_backend_names_available_ones() -> None:
    with pytest.raises(KeyError, match="available: raster"):
        registry.get_backend("missing")


def test_plugin_backend_is_discovered(monkeypatch) -> None:
    _plugins(monkeypatch, _EntryPoint("fake", FakeBackend))

    assert isinstance(registry.get_backend("fake"), FakeBackend)
    names = [name for name, _spec in registry.describe_backends()]
    assert names == ["fake", "raster"]


def test_plugin_cannot_replace_builtin(monkeypatch) -> None:
    _plugins(monkeypatch, _EntryPoint("raster", FakeBackend))
    assert isinstance(registry.get_backend("raster"), RasterBackend)


def test_broken_plugins_are_ignored(monkeypatch) -> None:
    _plugins(
        monkeypatch,
        _EntryPoint("broken", error=ImportError("no module")),
        _EntryPoint("constant", "not callable"),
    )
    assert list(registry.backend_factories()) == ["raster"]


def test_describe_skips_backends_that_fail_to_start(monkeypatch) -> None:
    def exploding_factory():
        raise RuntimeError("missing driver")

    _plugins(monkeypatch, _EntryPoint("exploding", exploding_factory))

    described = registry.describe_backends()
    assert [name for name, _spec in described] == ["raster"]
    assert described[0][1].name == "raster"
