"""Dominant region selection and tracking-point computation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np


@dataclass
class Region:
    """One contour from the mask with its enclosed area and first-order moments."""

    contour: np.ndarray
    area: float
    m00: float
    m10: float
    m01: float

    @classmethod
    def from_contour(cls, contour: np.ndarray) -> "Region":
        mu = cv2.moments(contour)
        return cls(
            contour=contour,
            area=float(cv2.contourArea(contour)),
            m00=float(mu["m00"]),
            m10=float(mu["m10"]),
            m01=float(mu["m01"]),
        )


@dataclass(frozen=True)
class TrackPoint:
    x: int
    y: int
    fallback: bool = False

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


def frame_center(width: int, height: int) -> TrackPoint:
    return TrackPoint(width // 2, height // 2, fallback=True)


def find_regions(mask: np.ndarray) -> List[Region]:
    """All contours of *mask* (nested ones included) in discovery order."""
    contours, _hierarchy = cv2.findContours(mask, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    return [Region.from_contour(c) for c in contours]


def select_dominant(regions: Sequence[Region]) -> Optional[int]:
    """Index of the largest region, first one wins on ties; ``None`` when empty."""
    if not regions:
        return None
    best = 0
    for idx in range(1, len(regions)):
        if regions[idx].area > regions[best].area:
            best = idx
    return best


def track_point(
    regions: Sequence[Region],
    dominant: Optional[int],
    frame_size: Tuple[int, int],
) -> TrackPoint:
    """Centroid of the dominant region, or the frame centre.

    ``frame_size`` is (width, height). A dominant region whose zeroth moment
    is exactly zero falls back to the centre as well.
    """
    width, height = frame_size
    if dominant is None:
        return frame_center(width, height)
    region = regions[dominant]
    if region.m00 == 0.0:
        return frame_center(width, height)
    return TrackPoint(int(region.m10 / region.m00), int(region.m01 / region.m00))
