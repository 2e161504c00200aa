"""Resource path helpers (extension rewriting, default outputs, descriptors)."""

from __future__ import annotations

import os
from dataclasses import dataclass

METADATA_EXTENSION = "texture"
PAYLOAD_EXTENSION = "pixels"


@dataclass(frozen=True)
class ResourceDescriptor:
    """Parsed decomposition of a source resource path."""

    path: str
    directory: str
    name: str
    properties: tuple[str, ...]
    extension: str


def change_extension(path: str, extension: str) -> str:
    """Replace the extension of the file name in ``path``.

    Only the final path component is touched. A leading dot on the file name
    (``.hidden``) is not treated as an extension separator.
    """
    extension = extension.lstrip(".")
    directory, filename = os.path.split(path)
    stem, _ = os.path.splitext(filename)
    return os.path.join(directory, f"{stem}.{extension}")


def derive_metadata_path(target_path: str) -> str:
    """Return the sidecar metadata path for a target payload path."""
    return change_extension(target_path, METADATA_EXTENSION)


def derive_default_output_path(source_path: str, cwd: str) -> str:
    """Return the payload path used when no explicit output was given."""
    filename = change_extension(os.path.basename(source_path), PAYLOAD_EXTENSION)
    return os.path.join(cwd, filename)


def parse_resource_path(source_path: str) -> ResourceDescriptor:
    """Split ``dir/name.prop1.prop2.ext`` into its naming components."""
    directory, filename = os.path.split(source_path)
    parts = filename.split(".")
    if filename.startswith("."):
        parts = [f".{parts[1]}", *parts[2:]] if len(parts) > 1 else parts
    name = parts[0]
    extension = parts[-1] if len(parts) > 1 else ""
    properties = tuple(part for part in parts[1:-1] if part)
    return ResourceDescriptor(
        path=source_path,
        directory=directory,
        name=name,
        properties=properties,
        extension=extension,
    )


def is_file(path: str | None) -> bool:
    """Return True if ``path`` names an existing regular file."""
    if not path:
        return False
    return os.path.isfile(path)
