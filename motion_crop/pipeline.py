"""Per-frame localisation and cropping loop, per file and per batch."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np
from loguru import logger
from tqdm import tqdm

from .config import CropConfig
from .crop import CropRect, crop_rect, extract_crop, pad_frame, padded_shape
from .io import VideoIOError, iter_frames, open_capture, open_writer, output_path_for, stream_info
from .preview import CROP_WINDOW, ORIGINAL_WINDOW, NullPreview, WindowPreview, draw_overlay
from .regions import Region, TrackPoint, find_regions, select_dominant, track_point
from .segment import SegmentBuffers, StageHook, segment_frame

Preview = Union[NullPreview, WindowPreview]


@dataclass
class FrameBuffers:
    """Scratch images owned by one file's run and reused for each of its frames."""

    segment: SegmentBuffers
    padded: np.ndarray

    @classmethod
    def for_shape(cls, frame_shape: Tuple[int, ...], window: int) -> "FrameBuffers":
        return cls(
            segment=SegmentBuffers.for_shape(frame_shape),
            padded=np.empty(padded_shape(frame_shape, window), dtype=np.uint8),
        )

    def fits(self, frame_shape: Tuple[int, ...], window: int) -> bool:
        return self.segment.fits(frame_shape) and self.padded.shape == padded_shape(frame_shape, window)


@dataclass
class FrameResult:
    """Geometry for one frame.

    ``crop`` is a view into the shared padded buffer and is only valid until
    the next frame is processed.
    """

    index: int
    point: TrackPoint
    rect: CropRect
    regions: List[Region]
    dominant: Optional[int]
    crop: np.ndarray


@dataclass
class BatchSummary:
    succeeded: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _as_bgr(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    if frame.shape[2] == 1:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    if frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    return frame


def _progress_bar(total: int, desc: str, enabled: bool) -> tqdm:
    if total > 0:
        bar_format = "{desc} {percentage:3.0f}% ({n_fmt}/{total_fmt})"
    else:
        bar_format = "{desc} {n_fmt} frames"
    return tqdm(
        total=total if total > 0 else None,
        desc=desc,
        unit="frame",
        bar_format=bar_format,
        disable=not enabled,
    )


class VideoPipeline:
    """Decode -> segment -> select -> track -> crop -> encode, one file at a time."""

    def __init__(self, config: CropConfig, preview: Optional[Preview] = None) -> None:
        self.config = config
        self.preview: Preview = preview if preview is not None else NullPreview()

    def _stage_hook(self) -> Optional[StageHook]:
        if self.config.verbose and self.preview.enabled:
            return self.preview.show
        return None

    def process_frame(self, frame: np.ndarray, buffers: FrameBuffers, index: int = 0) -> FrameResult:
        window = self.config.window_size
        height, width = frame.shape[:2]
        pad_frame(frame, window, out=buffers.padded)

        mask = segment_frame(frame, self.config, buffers.segment, on_stage=self._stage_hook())
        regions = find_regions(mask)
        dominant = select_dominant(regions)
        point = track_point(regions, dominant, (width, height))
        rect = crop_rect(point, window)
        crop = extract_crop(buffers.padded, rect)
        logger.debug(
            "frame {} regions={} dominant={} point=({}, {}){}",
            index,
            len(regions),
            dominant,
            point.x,
            point.y,
            " fallback" if point.fallback else "",
        )
        return FrameResult(index=index, point=point, rect=rect, regions=regions, dominant=dominant, crop=crop)

    def track(self, frames: Iterable[np.ndarray]) -> Iterator[FrameResult]:
        """Run every frame through the stages without any file I/O."""
        buffers: Optional[FrameBuffers] = None
        window = self.config.window_size
        for index, frame in enumerate(frames):
            frame = _as_bgr(frame)
            if buffers is None or not buffers.fits(frame.shape, window):
                buffers = FrameBuffers.for_shape(frame.shape, window)
            yield self.process_frame(frame, buffers, index)

    def _show(self, frame: np.ndarray, result: FrameResult) -> None:
        overlay = draw_overlay(frame, result.regions, result.dominant, result.point, self.config.verbose)
        self.preview.show(ORIGINAL_WINDOW, overlay)
        self.preview.show(CROP_WINDOW, result.crop)

    def _run(self, path: Path, output_path: Path) -> None:
        window = self.config.window_size
        with open_capture(path) as cap:
            info = stream_info(cap, path)
            logger.info("Processing: {} ({} frames)", path, info.frame_count)
            with open_writer(output_path, self.config.fourcc_tag, info.fps, (window, window)) as writer:
                written = 0
                buffers: Optional[FrameBuffers] = None
                with _progress_bar(info.frame_count, path.name, self.config.progress) as bar:
                    for frame in iter_frames(cap):
                        frame = _as_bgr(frame)
                        if buffers is None or not buffers.fits(frame.shape, window):
                            buffers = FrameBuffers.for_shape(frame.shape, window)
                        result = self.process_frame(frame, buffers, written)
                        writer.write(np.ascontiguousarray(result.crop))
                        written += 1
                        if bar.total is None or bar.n < bar.total:
                            bar.update(1)
                        if self.preview.enabled:
                            self._show(frame, result)
                            if self.preview.poll_cancel():
                                logger.warning("Cancelled {} after {} frames", path, written)
                                break
        logger.info("{} frames -> {}", written, output_path)

    def process(self, path: Path | str) -> bool:
        """Crop one file; failures are logged and reported as ``False``."""
        path = Path(path)
        output_path = output_path_for(path, self.config.output_format)
        try:
            self._run(path, output_path)
        except VideoIOError as exc:
            logger.error(str(exc))
            return False
        except cv2.error as exc:
            logger.error("OpenCV failed while processing {}: {}", path, exc)
            return False
        return True


def process(path: Path | str, config: CropConfig, preview: Optional[Preview] = None) -> bool:
    return VideoPipeline(config, preview).process(path)


def process_batch(
    paths: Sequence[Path | str],
    config: CropConfig,
    preview: Optional[Preview] = None,
) -> BatchSummary:
    """Process every path in order; one failure never stops the rest."""
    pipeline = VideoPipeline(config, preview)
    summary = BatchSummary()
    pipeline.preview.open()
    try:
        for raw in paths:
            path = Path(raw)
            if pipeline.process(path):
                summary.succeeded.append(path)
            else:
                summary.failed.append(path)
    finally:
        pipeline.preview.close()
    if len(paths) > 1:
        logger.info("Completed: {} succeeded, {} failed.", len(summary.succeeded), len(summary.failed))
    return summary
