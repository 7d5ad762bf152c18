"""
Inference backends producing raw model output buffers.
"""

from .backend import InferenceBackend
from .replay_backend import ReplayBackend, load_recording

__all__ = ["InferenceBackend", "ReplayBackend", "load_recording"]
