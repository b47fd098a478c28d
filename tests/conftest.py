"""Shared fixtures for the motion crop test suite."""
from __future__ import annotations

from pathlib import Path
from typing import List

import cv2
import numpy as np
import pytest

from motion_crop.config import CropConfig

FRAME_W = 320
FRAME_H = 240
CIRCLE_RADIUS = 20
CIRCLE_Y = 120


def moving_circle_frames(count: int = 10, step: int = 25, start_x: int = 40) -> List[np.ndarray]:
    frames = []
    for idx in range(count):
        frame = np.full((FRAME_H, FRAME_W, 3), 40, dtype=np.uint8)
        cv2.circle(frame, (start_x + idx * step, CIRCLE_Y), CIRCLE_RADIUS, (230, 230, 230), -1)
        frames.append(frame)
    return frames


def circle_x_positions(count: int = 10, step: int = 25, start_x: int = 40) -> List[int]:
    return [start_x + idx * step for idx in range(count)]


@pytest.fixture
def default_config() -> CropConfig:
    """Default settings with the progress bar silenced."""
    return CropConfig(progress=False)


@pytest.fixture
def small_window_config() -> CropConfig:
    return CropConfig(window_size=100, codec="MJPG", progress=False)


@pytest.fixture
def circle_frames() -> List[np.ndarray]:
    return moving_circle_frames()


@pytest.fixture
def uniform_frames() -> List[np.ndarray]:
    return [np.full((FRAME_H, FRAME_W, 3), 128, dtype=np.uint8) for _ in range(5)]


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    """Write a minimal config.yaml and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "window_size: 300\n"
        "threshold_scalar: 0.5\n"
        "iterations: 3\n"
        "codec: mjpg\n"
        "output_format: mp4\n"
    )
    return cfg


def write_video(path: Path, frames: List[np.ndarray], fps: float = 10.0) -> bool:
    """Encode *frames* with MJPG; ``False`` when this OpenCV build cannot write."""
    height, width = frames[0].shape[:2]
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, (width, height))
    if not writer.isOpened():
        return False
    for frame in frames:
        writer.write(frame)
    writer.release()
    return True
