"""Turn a colour frame into a closed-edge foreground mask."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from .config import CropConfig

KERNEL_SIZE = (5, 5)
LOW_HIGH_RATIO = 0.5

StageHook = Callable[[str, np.ndarray], None]


def dilation_kernel() -> np.ndarray:
    return cv2.getStructuringElement(cv2.MORPH_RECT, KERNEL_SIZE)


@dataclass
class SegmentBuffers:
    """Scratch images reused frame to frame for one frame size."""

    hsv: np.ndarray
    value: np.ndarray
    binary: np.ndarray
    edges: np.ndarray
    mask: np.ndarray
    kernel: np.ndarray

    @classmethod
    def for_shape(cls, frame_shape: Tuple[int, ...]) -> "SegmentBuffers":
        h, w = frame_shape[:2]
        return cls(
            hsv=np.empty((h, w, 3), dtype=np.uint8),
            value=np.empty((h, w), dtype=np.uint8),
            binary=np.empty((h, w), dtype=np.uint8),
            edges=np.empty((h, w), dtype=np.uint8),
            mask=np.empty((h, w), dtype=np.uint8),
            kernel=dilation_kernel(),
        )

    def fits(self, frame_shape: Tuple[int, ...]) -> bool:
        return self.value.shape == tuple(frame_shape[:2])


def value_channel(frame: np.ndarray, buffers: Optional[SegmentBuffers] = None) -> np.ndarray:
    """HSV value channel, the plane that best separates an aircraft from open sky."""
    if buffers is None:
        hsv = cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)
        return cv2.extractChannel(hsv, 2)
    cv2.cvtColor(frame, cv2.COLOR_BGR2HSV, dst=buffers.hsv)
    cv2.extractChannel(buffers.hsv, 2, dst=buffers.value)
    return buffers.value


def adaptive_threshold(channel: np.ndarray, out: Optional[np.ndarray] = None) -> Tuple[float, np.ndarray]:
    """Otsu threshold of *channel* and the binary image it produces."""
    if out is None:
        thresh, binary = cv2.threshold(channel, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
    else:
        thresh, binary = cv2.threshold(channel, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU, dst=out)
    return float(thresh), binary


def canny_thresholds(otsu: float, scalar: float) -> Tuple[float, float]:
    """(low, high) hysteresis pair; low is always half of high."""
    high = otsu * scalar
    return high * LOW_HIGH_RATIO, high


def segment_frame(
    frame: np.ndarray,
    config: CropConfig,
    buffers: Optional[SegmentBuffers] = None,
    on_stage: Optional[StageHook] = None,
) -> np.ndarray:
    """Value channel -> Otsu -> Canny -> dilation.

    The returned mask is ``buffers.mask`` when buffers are supplied and is
    overwritten by the next call.
    """
    if buffers is None:
        buffers = SegmentBuffers.for_shape(frame.shape)

    value = value_channel(frame, buffers)
    if on_stage is not None:
        on_stage("FrameGray", value)

    otsu, binary = adaptive_threshold(value, buffers.binary)
    if on_stage is not None:
        on_stage("Otsu", binary)

    low, high = canny_thresholds(otsu, config.threshold_scalar)
    edges = cv2.Canny(value, low, high, edges=buffers.edges)
    if on_stage is not None:
        on_stage("Edges", edges)

    mask = cv2.dilate(edges, buffers.kernel, dst=buffers.mask, iterations=config.iterations)
    if on_stage is not None:
        on_stage("Dilation", mask)
    return mask
