"""Build lifecycle tracking: requests, accumulated outputs/errors, and results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from texcompiler.errors import ProtocolViolationError, TextureCompilerError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildRequest:
    """Inputs describing a single texture build."""

    source_path: str
    target_path: str
    platform: str = ""
    is_ipc: bool = False


@dataclass(frozen=True)
class BuildError:
    """Structured error recorded against a build."""

    message: str
    cause: str | None = None
    kind: str = "error"

    @classmethod
    def from_exception(cls, exc: BaseException) -> "BuildError":
        """Convert an exception into a recordable build error."""
        if isinstance(exc, TextureCompilerError):
            cause = str(exc.cause) if exc.cause is not None else None
            return cls(message=str(exc), cause=cause, kind=exc.kind)
        return cls(message=str(exc) or type(exc).__name__, kind=type(exc).__name__)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "cause": self.cause}


@dataclass(frozen=True)
class BuildResult:
    """Immutable snapshot of a finished build."""

    outputs: tuple[str, ...]
    errors: tuple[BuildError, ...]

    @property
    def succeeded(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "outputs": list(self.outputs),
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class BuildState:
    """Mutable record of one build from start to finish.

    A state accepts outputs and errors only while open. ``finish`` closes it
    exactly once and returns the result snapshot; any later mutation raises
    ``ProtocolViolationError``.
    """

    request: BuildRequest
    outputs: list[str] = field(default_factory=list)
    errors: list[BuildError] = field(default_factory=list)
    is_open: bool = True

    def _require_open(self, operation: str) -> None:
        if not self.is_open:
            raise ProtocolViolationError(
                f"Cannot {operation} after the build has finished",
                cause=self.request.source_path,
            )

    def add_output(self, path: str) -> None:
        """Record a produced output file."""
        self._require_open("add an output")
        self.outputs.append(str(path))

    def add_error(self, error: BuildError | BaseException) -> None:
        """Record an error; the caller decides whether to keep going."""
        self._require_open("add an error")
        if not isinstance(error, BuildError):
            error = BuildError.from_exception(error)
        self.errors.append(error)

    def finish(self) -> BuildResult:
        """Close the build and return its result."""
        self._require_open("finish")
        if not self.outputs and not self.errors:
            raise ProtocolViolationError(
                "Build finished without recording outputs or errors",
                cause=self.request.source_path,
            )
        self.is_open = False
        result = BuildResult(outputs=tuple(self.outputs), errors=tuple(self.errors))
        LOGGER.debug(
            "Finished build: %s output(s), %s error(s).",
            len(result.outputs),
            len(result.errors),
            extra={"source": self.request.source_path},
        )
        return result


def start_build(request: BuildRequest) -> BuildState:
    """Open a new build state for a request."""
    LOGGER.debug("Starting build.", extra={"source": request.source_path})
    return BuildState(request=request)


def add_output(state: BuildState, path: str) -> None:
    state.add_output(path)


def add_error(state: BuildState, error: BuildError | BaseException) -> None:
    state.add_error(error)


def finish_build(state: BuildState) -> BuildResult:
    return state.finish()
