"""Error types raised and recorded while building textures."""

from __future__ import annotations


class TextureCompilerError(Exception):
    """Base error carrying a stable kind and an optional underlying cause."""

    kind = "error"

    def __init__(self, message: str, *, cause: BaseException | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "message": self.message,
            "cause": str(self.cause) if self.cause is not None else None,
        }


class InputNotFoundError(TextureCompilerError):
    """The stand-alone source file does not exist."""

    kind = "input_not_found"


class CompilationError(TextureCompilerError):
    """The compile capability failed to produce texture metadata."""

    kind = "compilation"


class MetadataWriteError(TextureCompilerError):
    """The metadata sidecar could not be persisted."""

    kind = "metadata_write"


class ProtocolViolationError(TextureCompilerError):
    """A build state was used outside of its open lifecycle."""

    kind = "protocol_violation"
