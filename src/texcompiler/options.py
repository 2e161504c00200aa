"""Fixed texture compile configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CompileOptions:
    """Structured options passed to the compile capability."""

    source_path: str
    target_path: str
    type: str = "COLOR"
    format: str = "RGB"
    target: str = "TEXTURE_2D"
    wrap_mode_s: str = "CLAMP_TO_EDGE"
    wrap_mode_t: str = "CLAMP_TO_EDGE"
    minify_filter: str = "LINEAR"
    magnify_filter: str = "LINEAR"
    border_mode: str = "CLAMP"
    premultiplied_alpha: bool = False
    force_power_of_two: bool = False
    flip_y: bool = True
    build_mipmaps: bool = False
    level_count: int = 0
    target_width: int = 0
    target_height: int = 0

    def as_dict(self) -> dict[str, object]:
        return {
            "sourcePath": self.source_path,
            "targetPath": self.target_path,
            "type": self.type,
            "format": self.format,
            "target": self.target,
            "wrapModeS": self.wrap_mode_s,
            "wrapModeT": self.wrap_mode_t,
            "minifyFilter": self.minify_filter,
            "magnifyFilter": self.magnify_filter,
            "borderMode": self.border_mode,
            "premultipliedAlpha": self.premultiplied_alpha,
            "forcePowerOfTwo": self.force_power_of_two,
            "flipY": self.flip_y,
            "buildMipmaps": self.build_mipmaps,
            "levelCount": self.level_count,
            "targetWidth": self.target_width,
            "targetHeight": self.target_height,
        }


def default_compile_options(source_path: str, target_path: str) -> CompileOptions:
    """Return the fixed compile policy for a source/target pair."""
    return CompileOptions(source_path=str(source_path), target_path=str(target_path))
