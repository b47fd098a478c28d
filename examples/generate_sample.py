"""Generate a tiny synthetic aircraft-against-sky clip for testing using OpenCV."""
from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

SKY_BGR = (235, 206, 135)
AIRCRAFT_BGR = (60, 60, 60)


def draw_aircraft(frame: np.ndarray, center: tuple[int, int], span: int = 40) -> None:
    cx, cy = center
    cv2.ellipse(frame, (cx, cy), (span // 2, span // 8), 0, 0, 360, AIRCRAFT_BGR, -1)
    wing = np.array(
        [[cx - span // 8, cy], [cx + span // 8, cy], [cx - span // 16, cy - span // 2], [cx - span // 5, cy - span // 2]],
        dtype=np.int32,
    )
    cv2.fillPoly(frame, [wing], AIRCRAFT_BGR)
    mirrored = (wing * np.array([1, -1]) + np.array([0, 2 * cy])).astype(np.int32)
    cv2.fillPoly(frame, [mirrored], AIRCRAFT_BGR)


def render_frames(frames: int = 48, size: tuple[int, int] = (320, 240)) -> list[np.ndarray]:
    width, height = size
    out = []
    for idx in range(frames):
        frame = np.empty((height, width, 3), dtype=np.uint8)
        frame[:] = SKY_BGR
        x = int(40 + (width - 80) * idx / max(1, frames - 1))
        y = int(height / 2 + 0.15 * height * np.sin(idx / 8.0))
        draw_aircraft(frame, (x, y))
        out.append(frame)
    return out


def main(output: Path = Path("sample_flight.avi"), frames: int = 48, fps: float = 24.0) -> Path:
    rendered = render_frames(frames)
    height, width = rendered[0].shape[:2]
    writer = cv2.VideoWriter(str(output), cv2.VideoWriter_fourcc(*"MJPG"), fps, (width, height))
    if not writer.isOpened():
        raise RuntimeError(f"Could not open video writer: {output}")
    try:
        for frame in rendered:
            writer.write(frame)
    finally:
        writer.release()
    print(f"Wrote {output}")
    return Path(output)


if __name__ == "__main__":
    main()
