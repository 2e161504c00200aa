"""Named texture compile backends: the built-in raster backend plus plugins.

Plugins register a zero-argument factory under the ``texcompiler.backends``
entry point group. A plugin cannot replace a built-in name.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib import metadata
from typing import Callable, Iterator

from texcompiler.backends.base import BackendSpec, TextureBackend
from texcompiler.backends.raster import RasterBackend

BackendFactory = Callable[[], TextureBackend]
PLUGIN_GROUP = "texcompiler.backends"
DEFAULT_BACKEND = "raster"

LOGGER = logging.getLogger(__name__)

_BUILTIN_BACKENDS: dict[str, BackendFactory] = {
    DEFAULT_BACKEND: RasterBackend,
}


def _plugin_factories() -> Iterator[tuple[str, BackendFactory]]:
    for entry_point in metadata.entry_points(group=PLUGIN_GROUP):
        try:
            factory = entry_point.load()
        except Exception as exc:
            LOGGER.warning("Ignoring texture backend plugin %r: %s", entry_point.name, exc)
            continue
        if not callable(factory):
            LOGGER.warning("Texture backend plugin %r is not a factory.", entry_point.name)
            continue
        yield entry_point.name, factory


@lru_cache(maxsize=1)
def backend_factories() -> dict[str, BackendFactory]:
    """Return backend factories keyed by name, discovered once per process."""
    factories = dict(_BUILTIN_BACKENDS)
    for name, factory in _plugin_factories():
        if name in factories:
            LOGGER.warning("Texture backend %r is already registered; plugin ignored.", name)
            continue
        factories[name] = factory
    return factories


def get_backend(name: str = DEFAULT_BACKEND) -> TextureBackend:
    """Instantiate the backend registered as ``name``."""
    factories = backend_factories()
    if name not in factories:
        known = ", ".join(sorted(factories))
        raise KeyError(f"Unknown backend: {name} (available: {known})")
    return factories[name]()


def describe_backends() -> list[tuple[str, BackendSpec]]:
    """Return ``(name, spec)`` for each backend that can be instantiated."""
    described: list[tuple[str, BackendSpec]] = []
    for name, factory in sorted(backend_factories().items()):
        try:
            described.append((name, factory().spec()))
        except Exception as exc:
            LOGGER.warning("Texture backend %r failed to initialize: %s", name, exc)
    return described
