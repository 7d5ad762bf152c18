"""
Detection module.

Turns raw model output into clean per-frame detections:
decode (confidence threshold, box bounds) then non-maximum suppression.
"""

from .decoder import OutputDecoder, decode_output
from .labels import load_labels
from .nms import non_max_suppression

__all__ = ['OutputDecoder', 'decode_output', 'load_labels', 'non_max_suppression']
