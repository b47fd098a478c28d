"""Optional on-screen preview and diagnostic overlay."""
from __future__ import annotations

from typing import Optional, Sequence

import cv2
import numpy as np

from .regions import Region, TrackPoint

ESC_KEY = 27
CANDIDATE_COLOR = (0, 128, 0)
DOMINANT_COLOR = (0, 255, 0)
POINT_COLOR = (0, 0, 255)

ORIGINAL_WINDOW = "Original"
CROP_WINDOW = "Motion Crop"


def draw_overlay(
    frame: np.ndarray,
    regions: Sequence[Region],
    dominant: Optional[int],
    point: TrackPoint,
    show_candidates: bool,
) -> np.ndarray:
    """Return a copy of *frame* with region outlines and the tracked point drawn on it."""
    canvas = frame.copy()
    contours = [r.contour for r in regions]
    if show_candidates:
        for idx in range(len(contours)):
            cv2.drawContours(canvas, contours, idx, CANDIDATE_COLOR, 1)
    if dominant is not None and not point.fallback:
        cv2.drawContours(canvas, contours, dominant, DOMINANT_COLOR, 2)
        cv2.circle(canvas, point.as_tuple(), 9, POINT_COLOR, 3)
    return canvas


class NullPreview:
    """Headless stand-in: shows nothing and never cancels."""

    enabled = False

    def open(self) -> None:
        pass

    def show(self, name: str, image: np.ndarray) -> None:
        pass

    def poll_cancel(self) -> bool:
        return False

    def close(self) -> None:
        pass


class WindowPreview:
    """OpenCV HighGUI windows; the key wait doubles as frame pacing."""

    enabled = True

    def __init__(self, delay_ms: int = 30, cancel_key: int = ESC_KEY) -> None:
        self.delay_ms = int(max(1, delay_ms))
        self.cancel_key = cancel_key

    def open(self) -> None:
        cv2.namedWindow(CROP_WINDOW, cv2.WINDOW_AUTOSIZE)
        cv2.namedWindow(ORIGINAL_WINDOW, cv2.WINDOW_AUTOSIZE)

    def show(self, name: str, image: np.ndarray) -> None:
        cv2.imshow(name, image)

    def poll_cancel(self) -> bool:
        return (cv2.waitKey(self.delay_ms) & 0xFF) == self.cancel_key

    def close(self) -> None:
        cv2.destroyAllWindows()
