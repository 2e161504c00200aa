from __future__ import annotations

import os
import warnings
from pathlib import Path

import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning

from texcompiler.backends.base import BackendSpec
from texcompiler.options import CompileOptions


def write_image(path: Path, data: np.ndarray, *, driver: str = "PNG") -> None:
    """Write a (bands, rows, cols) or (rows, cols) array as an image file."""
    if data.ndim == 2:
        data = data[np.newaxis]
    count, height, width = data.shape
    path.parent.mkdir(parents=True, exist_ok=True)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        with rasterio.open(
            path,
            "w",
            driver=driver,
            height=height,
            width=width,
            count=count,
            dtype=data.dtype,
        ) as dataset:
            dataset.write(data)


def gradient_rgb(width: int = 4, height: int = 2) -> np.ndarray:
    """Return a small RGB image whose rows are distinguishable."""
    rows = np.arange(height, dtype=np.uint8)[:, np.newaxis] * 100
    cols = np.arange(width, dtype=np.uint8)[np.newaxis, :] * 10
    red = (rows + cols).astype(np.uint8)
    green = np.full((height, width), 50, dtype=np.uint8)
    blue = np.full((height, width), 200, dtype=np.uint8)
    return np.stack([red, green, blue])


class FakeBackend:
    """Backend that writes a stub payload and returns canned metadata."""

    def __init__(self, *, fail: Exception | None = None, metadata: dict | None = None) -> None:
        self.fail = fail
        self.metadata = metadata
        self.calls: list[CompileOptions] = []

    def spec(self) -> BackendSpec:
        return BackendSpec(name="fake", version="0", formats=("RGB",))

    def compile(self, options: CompileOptions) -> dict:
        self.calls.append(options)
        if self.fail is not None:
            raise self.fail
        Path(options.target_path).write_bytes(b"\x00\x01\x02")
        if self.metadata is not None:
            return self.metadata
        return {
            "type": options.type,
            "format": options.format,
            "target": options.target,
            "width": 1,
            "height": 1,
        }


def with_src_env(base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Return an environment with repo src/ on PYTHONPATH."""
    env = dict(base_env or os.environ)
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if src_path.exists():
        existing = env.get("PYTHONPATH", "")
        entries = [entry for entry in existing.split(os.pathsep) if entry]
        src_str = str(src_path)
        if src_str not in entries:
            entries.insert(0, src_str)
        env["PYTHONPATH"] = os.pathsep.join(entries)
    return env
