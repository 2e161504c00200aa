"""Build dispatch for stand-alone and persistent execution."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, TextIO

from texcompiler.backends.base import TextureBackend
from texcompiler.build_state import BuildRequest, BuildResult, start_build
from texcompiler.compiler import compile_texture
from texcompiler.config import COMPILER_VERSION, AppConfig
from texcompiler.errors import InputNotFoundError
from texcompiler.paths import derive_default_output_path, is_file, parse_resource_path

LOGGER = logging.getLogger(__name__)

ResultSink = Callable[[BuildResult], None]


class BuildOutcome(Enum):
    """Typed outcome of a stand-alone run, mapped to an exit code by the CLI."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INPUT_NOT_FOUND = "input_not_found"


def query_compiler_version() -> int:
    """Return the compiler protocol version used for cache invalidation."""
    return COMPILER_VERSION


def build_texture(request: BuildRequest, *, backend: TextureBackend) -> BuildResult:
    """Run one build from start to finish and return its result."""
    state = start_build(request)
    resource = parse_resource_path(request.source_path)
    LOGGER.info(
        "Building %s (%s)",
        resource.name,
        request.platform or "generic",
        extra={"source": request.source_path},
    )
    compile_texture(state, backend=backend)
    return state.finish()


def request_from_event(payload: Mapping[str, Any]) -> BuildRequest:
    """Convert a persistent-mode ``build`` event payload into a request."""
    return BuildRequest(
        source_path=str(payload["sourcePath"]),
        target_path=str(payload["targetPath"]),
        platform=str(payload.get("platform") or ""),
        is_ipc=True,
    )


def standalone_request(config: AppConfig) -> BuildRequest:
    """Build the stand-alone request, deriving the output path when absent."""
    target_path = config.target_path or derive_default_output_path(
        config.source_path,
        config.startup_directory,
    )
    return BuildRequest(
        source_path=config.source_path,
        target_path=target_path,
        platform=config.platform,
        is_ipc=False,
    )


def run_standalone(
    config: AppConfig,
    *,
    backend: TextureBackend,
    err_stream: TextIO,
) -> BuildOutcome:
    """Run exactly one build from CLI-derived configuration."""
    if not is_file(config.source_path):
        error = InputNotFoundError(
            "No input file specified or input file not found.",
            cause=config.source_path or None,
        )
        LOGGER.debug("Rejected input (%s): %s", error.kind, error)
        print(f"Error: {error.message}", file=err_stream)
        return BuildOutcome.INPUT_NOT_FOUND

    result = build_texture(standalone_request(config), backend=backend)
    if result.succeeded:
        return BuildOutcome.SUCCEEDED
    print("An error has occurred:", file=err_stream)
    print(f"  {result.errors[0].message}", file=err_stream)
    return BuildOutcome.FAILED


def run_persistent(
    requests: Iterable[BuildRequest],
    sink: ResultSink,
    *,
    backend: TextureBackend,
) -> int:
    """Handle build requests until the transport runs dry.

    Each request gets its own build state. Failed builds are handed to the
    sink like successful ones; nothing here exits the process.
    """
    handled = 0
    for request in requests:
        result = build_texture(request, backend=backend)
        if not result.succeeded:
            LOGGER.warning(
                "Build failed: %s",
                result.errors[0].message,
                extra={"source": request.source_path},
            )
        sink(result)
        handled += 1
    return handled
