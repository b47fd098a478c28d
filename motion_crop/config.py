"""Configuration model and loader for the motion crop tool."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Codec name -> four-character tag handed to the video writer.
CODECS: Dict[str, str] = {
    "DIVX": "DIVX",
    "MJPG": "MJPG",
    "MPEG": "MPEG",
    "MP4V": "MP4V",
    "H264": "H264",
    "X264": "X264",
    "AVC1": "avc1",
    "WMV2": "WMV2",
}
DEFAULT_CODEC = "DIVX"

OUTPUT_FORMATS = ("avi", "mp4")
DEFAULT_FORMAT = "avi"

WINDOW_RANGE = (50, 5000)
THRESHOLD_RANGE = (0.05, 2.0)
ITERATIONS_RANGE = (1, 5)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def resolve_codec(name: str) -> str:
    """Return the canonical codec name for *name* or raise ``ValueError``."""
    key = str(name).strip().upper()
    if key not in CODECS:
        raise ValueError(f"Unknown codec: {name} (use one of {', '.join(CODECS)})")
    return key


def resolve_format(name: str) -> str:
    fmt = str(name).strip().lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown format: {name} (use avi or mp4)")
    return fmt


class CropConfig(BaseModel):
    """Settings applied to every frame of a file.

    Out-of-range numbers are clamped rather than rejected; unknown codecs and
    output formats are rejected.
    """

    model_config = ConfigDict(frozen=True)

    window_size: int = Field(400, description="Side of the square output window in pixels.")
    threshold_scalar: float = Field(1.0, description="Multiplier applied to the Otsu threshold for Canny.")
    iterations: int = Field(2, description="Dilation passes used to close broken edge contours.")
    verbose: bool = Field(False, description="Emit diagnostics and overlay every candidate region.")
    codec: str = Field(DEFAULT_CODEC, description="Output codec name from CODECS.")
    output_format: str = Field(DEFAULT_FORMAT, description="Output container extension: avi or mp4.")
    progress: bool = Field(True, description="Show a per-file progress bar.")

    @field_validator("window_size", mode="before")
    @classmethod
    def clamp_window_size(cls, value: Any) -> int:
        return int(clamp(int(value), *WINDOW_RANGE))

    @field_validator("threshold_scalar", mode="before")
    @classmethod
    def clamp_threshold_scalar(cls, value: Any) -> float:
        return float(clamp(float(value), *THRESHOLD_RANGE))

    @field_validator("iterations", mode="before")
    @classmethod
    def clamp_iterations(cls, value: Any) -> int:
        return int(clamp(int(value), *ITERATIONS_RANGE))

    @field_validator("codec", mode="before")
    @classmethod
    def validate_codec(cls, value: Any) -> str:
        return resolve_codec(value)

    @field_validator("output_format", mode="before")
    @classmethod
    def validate_output_format(cls, value: Any) -> str:
        return resolve_format(value)

    @property
    def fourcc_tag(self) -> str:
        return CODECS[self.codec]


def merge_overrides(config: CropConfig, **overrides: Any) -> CropConfig:
    """Return a new validated config with every non-``None`` override applied."""
    data = config.model_dump()
    data.update({key: value for key, value in overrides.items() if value is not None})
    return CropConfig.model_validate(data)


def load_config(path: Path | str) -> CropConfig:
    """Load configuration from YAML, falling back to defaults when missing."""

    cfg_path = Path(path)
    if not cfg_path.exists():
        return CropConfig()
    data = yaml.safe_load(cfg_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {cfg_path} must contain a mapping")
    return CropConfig.model_validate(data)
