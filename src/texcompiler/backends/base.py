"""Shared backend types and protocol for texture compilers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from texcompiler.options import CompileOptions

TextureMetadata = Mapping[str, Any]


@dataclass(frozen=True)
class BackendSpec:
    """Describe backend capabilities."""

    name: str
    version: str
    formats: tuple[str, ...]


class TextureBackend(Protocol):
    """Protocol implemented by compile backends.

    ``compile`` writes the pixel payload to ``options.target_path`` and returns
    JSON-compatible metadata describing it. Failures are raised.
    """

    def spec(self) -> BackendSpec:
        ...

    def compile(self, options: CompileOptions) -> TextureMetadata:
        ...
