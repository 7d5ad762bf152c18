"""
Tracking module.

The canonical tracker implementation is in tracking.tracker.
"""

from .tracker import ObjectTracker

__all__ = ["ObjectTracker"]
