"""Boundary-safe square crops around a tracking point."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from .regions import TrackPoint


@dataclass(frozen=True)
class CropRect:
    x: int
    y: int
    width: int
    height: int

    def within(self, shape: Tuple[int, ...]) -> bool:
        h, w = shape[:2]
        return self.x >= 0 and self.y >= 0 and self.x + self.width <= w and self.y + self.height <= h


def padded_shape(frame_shape: Tuple[int, ...], window: int) -> Tuple[int, ...]:
    h, w = frame_shape[:2]
    return (h + 2 * window, w + 2 * window) + tuple(frame_shape[2:])


def pad_frame(frame: np.ndarray, window: int, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Replicate the frame's edge pixels outward by *window* on every side."""
    if out is None:
        return cv2.copyMakeBorder(frame, window, window, window, window, cv2.BORDER_REPLICATE)
    return cv2.copyMakeBorder(frame, window, window, window, window, cv2.BORDER_REPLICATE, dst=out)


def crop_rect(point: TrackPoint, window: int) -> CropRect:
    """Window-sized square centred on *point*, in padded-buffer coordinates."""
    half = window // 2
    return CropRect(window + point.x - half, window + point.y - half, window, window)


def extract_crop(padded: np.ndarray, rect: CropRect) -> np.ndarray:
    """View of *padded* covered by *rect*."""
    return padded[rect.y : rect.y + rect.height, rect.x : rect.x + rect.width]
