"""
bytetracker: ByteTrack multi-object tracking.

Fuses per-frame detections into persistent track identities using a
Kalman filter motion model and cascaded LAPJV association.

Usage:
    from bytetracker import ByteTracker, Detection

    tracker = ByteTracker(max_retention_time=30)
    tracks = tracker.update([Detection.from_tlbr(10, 20, 50, 120, 0.9)])
"""

__version__ = '1.0.0'

from .tracking import (
    ByteTracker,
    TrackerConfig,
    Track,
    TrackState,
    Detection,
    Rect,
    KalmanTracker,
    compute_iou,
    lapjv,
    linear_assignment,
    AssignmentError,
)

__all__ = [
    'ByteTracker',
    'TrackerConfig',
    'Track',
    'TrackState',
    'Detection',
    'Rect',
    'KalmanTracker',
    'compute_iou',
    'lapjv',
    'linear_assignment',
    'AssignmentError',
]
