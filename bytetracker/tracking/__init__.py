"""
Multi-object tracking module.

Main components:
- ByteTracker: Per-frame association of detections into persistent tracks
- Track: Single tracked identity with its Kalman filter and lifecycle state
- KalmanTracker: 8-dimensional constant-velocity box filter
- lapjv / linear_assignment: Jonker-Volgenant min-cost matching
- Rect / Detection: Geometry and detector output containers

Quick Start:
    from bytetracker.tracking import ByteTracker, Detection

    tracker = ByteTracker(max_retention_time=30, track_thresh=0.5)

    detections = [
        Detection.from_tlbr(x1, y1, x2, y2, score, payload=obj)
        for (x1, y1, x2, y2, score, obj) in detector_output
    ]
    tracks = tracker.update(detections)

    for track in tracks:
        print(track.track_id, track.state, track.predicted_rect, track.payload)
"""

# Tracker
from .byte_tracker import (
    # Main interface
    ByteTracker,
    TrackerConfig,

    # Track set operations
    joint_tracks,
    sub_tracks,
    remove_duplicate_tracks,
    fuse_score,
)

# Tracks
from .track import (
    Track,
    TrackState,
)

# Kalman filter
from .kalman_filter import KalmanTracker

# Assignment
from .lapjv import (
    lapjv,
    linear_assignment,
    solve_square,
    AssignmentError,
)

# Geometry and detections
from .geometry import (
    Rect,
    compute_iou,
    compute_iou_matrix,
    iou_distance,
)
from .detection import (
    Detection,
    filter_valid_detections,
)


__all__ = [
    # Tracker
    'ByteTracker',
    'TrackerConfig',
    'joint_tracks',
    'sub_tracks',
    'remove_duplicate_tracks',
    'fuse_score',

    # Tracks
    'Track',
    'TrackState',
    'KalmanTracker',

    # Assignment
    'lapjv',
    'linear_assignment',
    'solve_square',
    'AssignmentError',

    # Geometry and detections
    'Rect',
    'compute_iou',
    'compute_iou_matrix',
    'iou_distance',
    'Detection',
    'filter_valid_detections',
]
