"""Video decode/encode helpers built on OpenCV."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple

import cv2
import numpy as np
from loguru import logger

FPS_FALLBACK = 30.0
OUTPUT_SUFFIX = "_mcrop"


class VideoIOError(RuntimeError):
    pass


class InputOpenError(VideoIOError):
    pass


class OutputOpenError(VideoIOError):
    pass


@dataclass
class VideoStreamInfo:
    path: Path
    fps: float
    width: int
    height: int
    frame_count: int


def output_path_for(path: Path | str, output_format: str) -> Path:
    """``clip.mov`` -> ``clip_mcrop.<output_format>`` next to the input."""
    base = Path(path).with_suffix("")
    return base.with_name(f"{base.name}{OUTPUT_SUFFIX}.{output_format}")


def fourcc(tag: str) -> int:
    if len(tag) != 4:
        raise ValueError(f"FourCC tag must have four characters: {tag!r}")
    return cv2.VideoWriter_fourcc(*tag)


def stream_info(cap: cv2.VideoCapture, path: Path | str) -> VideoStreamInfo:
    fps = cap.get(cv2.CAP_PROP_FPS)
    if not fps or fps <= 0:
        logger.warning("Source FPS unavailable for {}; assuming {}", path, FPS_FALLBACK)
        fps = FPS_FALLBACK
    return VideoStreamInfo(
        path=Path(path),
        fps=float(fps),
        width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
        height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        frame_count=max(0, int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)),
    )


@contextmanager
def open_capture(path: Path | str) -> Iterator[cv2.VideoCapture]:
    """Open a decoder for *path*, released when the block exits."""
    cap = cv2.VideoCapture(str(path))
    try:
        if not cap.isOpened():
            raise InputOpenError(f"Cannot open video file: {path}")
        yield cap
    finally:
        cap.release()


@contextmanager
def open_writer(path: Path | str, tag: str, fps: float, frame_size: Tuple[int, int]) -> Iterator[cv2.VideoWriter]:
    """Open an encoder writing ``frame_size`` (w, h) frames, released when the block exits."""
    writer = cv2.VideoWriter(str(path), fourcc(tag), fps, frame_size)
    try:
        if not writer.isOpened():
            raise OutputOpenError(f"Cannot open output file: {path}")
        yield writer
    finally:
        writer.release()


def iter_frames(cap: cv2.VideoCapture) -> Iterator[np.ndarray]:
    """Yield decoded frames until the stream ends."""
    while True:
        ok, frame = cap.read()
        if not ok:
            return
        yield frame
