"""Schema validation helpers for texture metadata and build events."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Mapping

import jsonschema

@lru_cache(maxsize=None)
def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema bundled in the package."""
    with resources.files("texcompiler.schemas").joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_texture_metadata(metadata: Mapping[str, Any]) -> None:
    """Validate compiled texture metadata against the schema."""
    schema = _load_schema("texture_metadata.schema.json")
    jsonschema.validate(metadata, schema)


def validate_build_event(payload: Mapping[str, Any]) -> None:
    """Validate a persistent-mode build event payload against the schema."""
    schema = _load_schema("build_event.schema.json")
    jsonschema.validate(payload, schema)
