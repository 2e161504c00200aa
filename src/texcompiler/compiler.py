"""Compile invocation: run the backend, persist the sidecar, record outputs."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

import jsonschema

from texcompiler.backends.base import TextureBackend, TextureMetadata
from texcompiler.build_state import BuildError, BuildState
from texcompiler.contracts import validate_texture_metadata
from texcompiler.errors import CompilationError, MetadataWriteError, TextureCompilerError
from texcompiler.options import CompileOptions, default_compile_options
from texcompiler.paths import derive_metadata_path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileSuccess:
    """Metadata produced by a successful compile."""

    metadata: TextureMetadata
    metadata_path: str
    payload_path: str


@dataclass(frozen=True)
class CompileFailure:
    """Error produced by a failed compile or sidecar write."""

    error: TextureCompilerError


CompileOutcome = Union[CompileSuccess, CompileFailure]


def _json_metadata(metadata: TextureMetadata) -> dict[str, Any]:
    """Return the metadata as a plain dict that round-trips through JSON."""
    return json.loads(json.dumps(dict(metadata)))


def invoke_compiler(
    options: CompileOptions,
    backend: TextureBackend,
) -> CompileSuccess | CompileFailure:
    """Call the backend and convert any failure into a ``CompileFailure``."""
    metadata_path = derive_metadata_path(options.target_path)
    try:
        metadata = _json_metadata(backend.compile(options))
        validate_texture_metadata(metadata)
    except jsonschema.ValidationError as exc:
        return CompileFailure(
            CompilationError("Compiler returned invalid texture metadata", cause=exc.message)
        )
    except Exception as exc:
        return CompileFailure(CompilationError("Texture compilation failed", cause=exc))
    return CompileSuccess(
        metadata=metadata,
        metadata_path=metadata_path,
        payload_path=options.target_path,
    )


def _default_file_mode() -> int:
    """Return the mode a plain `open(path, "w")` would create under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_texture_metadata(path: str | Path, metadata: Mapping[str, Any]) -> None:
    """Write texture metadata as tab-indented JSON with a trailing newline.

    The document is written to a sibling temporary file and renamed into
    place, so a failed write never leaves a partial sidecar behind.
    """
    path = Path(path)
    tmp_name: str | None = None
    try:
        text = json.dumps(dict(metadata), indent="\t") + "\n"
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, TypeError, ValueError) as exc:
        raise MetadataWriteError(f"Failed to write texture metadata to {path}", cause=exc) from exc
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)


def compile_texture(state: BuildState, *, backend: TextureBackend) -> CompileOutcome:
    """Compile the state's request and record the outcome into ``state``.

    On success the metadata path and payload path are recorded, in that
    order. On failure exactly one error is recorded and no sidecar is written.
    Process exit is left to the caller.
    """
    request = state.request
    options = default_compile_options(request.source_path, request.target_path)
    outcome: CompileOutcome
    if os.path.abspath(derive_metadata_path(request.target_path)) == os.path.abspath(
        request.target_path
    ):
        outcome = CompileFailure(
            CompilationError(
                "Output path collides with its metadata sidecar",
                cause=request.target_path,
            )
        )
    else:
        outcome = invoke_compiler(options, backend)
    if isinstance(outcome, CompileSuccess):
        try:
            write_texture_metadata(outcome.metadata_path, outcome.metadata)
        except MetadataWriteError as exc:
            outcome = CompileFailure(exc)

    if isinstance(outcome, CompileFailure):
        LOGGER.debug("Compile failed: %s", outcome.error, extra={"source": request.source_path})
        state.add_error(BuildError.from_exception(outcome.error))
        return outcome

    state.add_output(outcome.metadata_path)
    state.add_output(outcome.payload_path)
    LOGGER.debug(
        "Compiled texture to %s",
        outcome.payload_path,
        extra={"source": request.source_path},
    )
    return outcome
