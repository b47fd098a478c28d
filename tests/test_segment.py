"""Tests for motion_crop.segment."""
from __future__ import annotations

import cv2
import numpy as np
import pytest

from motion_crop.config import CropConfig
from motion_crop.segment import (
    SegmentBuffers,
    adaptive_threshold,
    canny_thresholds,
    dilation_kernel,
    segment_frame,
    value_channel,
)


def _circle_frame(radius: int = 20) -> np.ndarray:
    frame = np.full((120, 160, 3), 30, dtype=np.uint8)
    cv2.circle(frame, (80, 60), radius, (220, 220, 220), -1)
    return frame


# --- value_channel -------------------------------------------------------------

class TestValueChannel:
    def test_is_max_of_bgr(self):
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        frame[0, 0] = (10, 200, 30)
        frame[1, 1] = (90, 20, 40)
        value = value_channel(frame)
        assert value.shape == (2, 2)
        assert value[0, 0] == 200
        assert value[1, 1] == 90
        assert value[0, 1] == 0

    def test_uses_buffers(self):
        frame = _circle_frame()
        buffers = SegmentBuffers.for_shape(frame.shape)
        value = value_channel(frame, buffers)
        assert np.shares_memory(value, buffers.value)
        assert value[60, 80] == 220


# --- adaptive_threshold --------------------------------------------------------

class TestAdaptiveThreshold:
    def test_bimodal(self):
        channel = np.full((10, 10), 20, dtype=np.uint8)
        channel[:, 5:] = 220
        thresh, binary = adaptive_threshold(channel)
        assert 20 <= thresh < 220
        assert np.all(binary[:, 5:] == 255)
        assert np.all(binary[:, :5] == 0)

    def test_depends_on_frame(self):
        dark = np.full((10, 10), 10, dtype=np.uint8)
        dark[:, 5:] = 60
        bright = np.full((10, 10), 150, dtype=np.uint8)
        bright[:, 5:] = 250
        assert adaptive_threshold(dark)[0] < adaptive_threshold(bright)[0]


# --- canny_thresholds ----------------------------------------------------------

class TestCannyThresholds:
    def test_two_to_one_ratio(self):
        low, high = canny_thresholds(100.0, 1.0)
        assert high == pytest.approx(100.0)
        assert low == pytest.approx(50.0)

    def test_scalar(self):
        low, high = canny_thresholds(120.0, 0.5)
        assert high == pytest.approx(60.0)
        assert low == pytest.approx(30.0)


# --- segment_frame -------------------------------------------------------------

class TestSegmentFrame:
    def test_kernel_is_5x5(self):
        kernel = dilation_kernel()
        assert kernel.shape == (5, 5)
        assert np.all(kernel == 1)

    def test_uniform_frame_has_no_foreground(self, default_config):
        frame = np.full((60, 80, 3), 128, dtype=np.uint8)
        mask = segment_frame(frame, default_config)
        assert mask.shape == (60, 80)
        assert not mask.any()

    def test_circle_outline_detected(self, default_config):
        mask = segment_frame(_circle_frame(), default_config)
        assert mask.dtype == np.uint8
        assert mask[60, 60] == 255  # left edge of the circle
        assert mask[0, 0] == 0

    def test_more_iterations_grow_mask(self):
        frame = _circle_frame()
        thin = segment_frame(frame, CropConfig(iterations=1))
        thick = segment_frame(frame, CropConfig(iterations=4))
        assert np.count_nonzero(thick) > np.count_nonzero(thin)

    def test_writes_into_buffers(self, default_config):
        frame = _circle_frame()
        buffers = SegmentBuffers.for_shape(frame.shape)
        mask = segment_frame(frame, default_config, buffers)
        assert np.shares_memory(mask, buffers.mask)
        again = segment_frame(frame, default_config, buffers)
        assert np.array_equal(mask, again)

    def test_stage_hook_order(self, default_config):
        seen = []
        segment_frame(_circle_frame(), default_config, on_stage=lambda name, img: seen.append(name))
        assert seen == ["FrameGray", "Otsu", "Edges", "Dilation"]

    def test_buffers_fit(self):
        buffers = SegmentBuffers.for_shape((120, 160, 3))
        assert buffers.fits((120, 160, 3))
        assert not buffers.fits((120, 161, 3))
