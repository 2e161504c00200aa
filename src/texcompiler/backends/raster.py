"""Built-in compile backend that decodes images through rasterio."""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
from rasterio.enums import Resampling
from rasterio.errors import NotGeoreferencedWarning

from texcompiler.backends.base import BackendSpec, TextureMetadata
from texcompiler.options import CompileOptions

LOGGER = logging.getLogger(__name__)

FORMAT_CHANNELS: dict[str, int] = {
    "ALPHA": 1,
    "LUMINANCE": 1,
    "LUMINANCE_ALPHA": 2,
    "RGB": 3,
    "RGBA": 4,
}
FILTER_RESAMPLING: dict[str, Resampling] = {
    "NEAREST": Resampling.nearest,
    "LINEAR": Resampling.bilinear,
    "CUBIC": Resampling.cubic,
}
SUPPORTED_TARGETS = ("TEXTURE_2D",)
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def _next_power_of_two(value: int) -> int:
    return 1 << max(0, int(value) - 1).bit_length()


def _level_shapes(width: int, height: int, options: CompileOptions) -> list[tuple[int, int]]:
    """Return (width, height) for each level written to the payload."""
    shapes = [(width, height)]
    if not options.build_mipmaps:
        return shapes
    limit = options.level_count if options.level_count > 0 else None
    while (width > 1 or height > 1) and (limit is None or len(shapes) < limit):
        width = max(1, width // 2)
        height = max(1, height // 2)
        shapes.append((width, height))
    return shapes


def _to_uint8(data: np.ndarray) -> np.ndarray:
    """Scale raster samples of any dtype into 8-bit unsigned values."""
    if data.dtype == np.uint8:
        return data
    if np.issubdtype(data.dtype, np.integer):
        info = np.iinfo(data.dtype)
        lo = max(0, info.min)
        scaled = (data.astype(np.float64) - lo) / float(info.max - lo)
    else:
        scaled = np.nan_to_num(data.astype(np.float64), nan=0.0)
    return np.clip(np.rint(scaled * 255.0), 0, 255).astype(np.uint8)


def _expand_rgba(data: np.ndarray) -> np.ndarray:
    """Return a (4, rows, cols) RGBA array from 1-4 source bands."""
    count = data.shape[0]
    opaque = np.full(data.shape[1:], 255, dtype=np.uint8)
    if count == 1:
        return np.stack([data[0], data[0], data[0], opaque])
    if count == 2:
        return np.stack([data[0], data[0], data[0], data[1]])
    alpha = data[3] if count >= 4 else opaque
    return np.stack([data[0], data[1], data[2], alpha])


def _select_channels(rgba: np.ndarray, fmt: str) -> np.ndarray:
    """Reduce an RGBA array to the channels of a pixel format."""
    if fmt == "RGBA":
        return rgba
    if fmt == "RGB":
        return rgba[:3]
    if fmt == "ALPHA":
        return rgba[3:4]
    luminance = np.tensordot(LUMA_WEIGHTS, rgba[:3].astype(np.float64), axes=1)
    luminance = np.clip(np.rint(luminance), 0, 255).astype(np.uint8)
    if fmt == "LUMINANCE":
        return luminance[np.newaxis]
    return np.stack([luminance, rgba[3]])


def _premultiply(rgba: np.ndarray) -> np.ndarray:
    alpha = rgba[3].astype(np.float64) / 255.0
    color = np.rint(rgba[:3].astype(np.float64) * alpha).astype(np.uint8)
    return np.concatenate([color, rgba[3:4]])


class RasterBackend:
    """Compile images into raw, interleaved 8-bit pixel payloads."""

    def spec(self) -> BackendSpec:
        return BackendSpec(
            name="raster",
            version="1",
            formats=tuple(sorted(FORMAT_CHANNELS)),
        )

    def _validate(self, options: CompileOptions) -> None:
        if options.format not in FORMAT_CHANNELS:
            raise ValueError(f"Unsupported pixel format: {options.format}")
        if options.target not in SUPPORTED_TARGETS:
            raise ValueError(f"Unsupported texture target: {options.target}")
        if options.minify_filter not in FILTER_RESAMPLING:
            raise ValueError(f"Unsupported minify filter: {options.minify_filter}")
        if options.target_width < 0 or options.target_height < 0 or options.level_count < 0:
            raise ValueError("Target dimensions and level count must be >= 0.")
        if not Path(options.source_path).is_file():
            raise FileNotFoundError(f"Source image not found: {options.source_path}")

    def _read_level(
        self,
        dataset: Any,
        width: int,
        height: int,
        options: CompileOptions,
    ) -> np.ndarray:
        """Read, convert and orient one level as a (rows, cols, channels) array."""
        data = dataset.read(
            out_shape=(dataset.count, height, width),
            resampling=FILTER_RESAMPLING[options.minify_filter],
        )
        rgba = _expand_rgba(_to_uint8(data))
        if options.premultiplied_alpha:
            rgba = _premultiply(rgba)
        pixels = _select_channels(rgba, options.format)
        if options.flip_y:
            pixels = pixels[:, ::-1, :]
        return np.ascontiguousarray(np.transpose(pixels, (1, 2, 0)))

    def compile(self, options: CompileOptions) -> TextureMetadata:
        """Decode the source image, write the payload, and describe it."""
        self._validate(options)
        target = Path(options.target_path)
        target.parent.mkdir(parents=True, exist_ok=True)

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(options.source_path) as dataset:
                if dataset.count < 1:
                    raise ValueError(f"Source image has no bands: {options.source_path}")
                width = options.target_width or dataset.width
                height = options.target_height or dataset.height
                if options.force_power_of_two:
                    width = _next_power_of_two(width)
                    height = _next_power_of_two(height)
                source_size = (dataset.width, dataset.height)
                levels = [
                    self._read_level(dataset, level_width, level_height, options)
                    for level_width, level_height in _level_shapes(width, height, options)
                ]

        level_entries: list[dict[str, int]] = []
        offset = 0
        with target.open("wb") as handle:
            for index, level in enumerate(levels):
                payload = level.tobytes()
                handle.write(payload)
                level_entries.append(
                    {
                        "level": index,
                        "width": int(level.shape[1]),
                        "height": int(level.shape[0]),
                        "byteOffset": offset,
                        "byteSize": len(payload),
                    }
                )
                offset += len(payload)

        LOGGER.debug(
            "Wrote %s level(s), %s bytes to %s",
            len(level_entries),
            offset,
            target,
            extra={"source": options.source_path},
        )
        return {
            "compiler": {"name": "raster", "version": self.spec().version},
            "type": options.type,
            "format": options.format,
            "target": options.target,
            "dataType": "UNSIGNED_BYTE",
            "channels": FORMAT_CHANNELS[options.format],
            "sourceWidth": source_size[0],
            "sourceHeight": source_size[1],
            "width": level_entries[0]["width"],
            "height": level_entries[0]["height"],
            "wrapModeS": options.wrap_mode_s,
            "wrapModeT": options.wrap_mode_t,
            "minifyFilter": options.minify_filter,
            "magnifyFilter": options.magnify_filter,
            "borderMode": options.border_mode,
            "premultipliedAlpha": options.premultiplied_alpha,
            "flipY": options.flip_y,
            "levels": level_entries,
            "byteSize": offset,
        }
