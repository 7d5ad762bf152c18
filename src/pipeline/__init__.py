"""
Pipeline module for the road hazard monitor.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources
- Inference to raw model output
- Decode, suppression, tracking and traffic classification (FramePipeline)
- Web state updates
"""

from .frame_pipeline import FramePipeline, FrameResult
from .engine import (
    PipelineConfig,
    PipelineEngine,
    PipelineStats,
    create_backend_from_config,
    create_engine_from_config,
    create_source_from_config,
)

__all__ = [
    "FramePipeline",
    "FrameResult",
    "PipelineConfig",
    "PipelineEngine",
    "PipelineStats",
    "create_backend_from_config",
    "create_engine_from_config",
    "create_source_from_config",
]
