"""Backend package exports."""

from texcompiler.backends.base import BackendSpec, TextureBackend, TextureMetadata
from texcompiler.backends.registry import describe_backends, get_backend

__all__ = [
    "BackendSpec",
    "TextureBackend",
    "TextureMetadata",
    "describe_backends",
    "get_backend",
]
