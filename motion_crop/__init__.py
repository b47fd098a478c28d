"""Aircraft-centred crop tracking for sky footage."""

from .config import CropConfig, load_config
from .pipeline import BatchSummary, FrameResult, VideoPipeline, process, process_batch

__all__ = [
    "BatchSummary",
    "CropConfig",
    "FrameResult",
    "VideoPipeline",
    "load_config",
    "process",
    "process_batch",
]
