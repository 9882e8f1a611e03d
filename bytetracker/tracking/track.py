"""
Tracked identities and their lifecycle.

State machine:
    TENTATIVE --(matched next frame)--> TRACKED <--> LOST --(expired)--> REMOVED
    TENTATIVE --(unmatched next frame)--> REMOVED
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .detection import Detection
from .geometry import Rect
from .kalman_filter import KalmanTracker


class TrackState(Enum):
    """Track lifecycle states."""
    TENTATIVE = 1    # Created, waiting for a second match
    TRACKED = 2      # Confirmed and matched this frame
    LOST = 3         # Confirmed but currently unmatched
    REMOVED = 4      # Terminal


class Track:
    """
    Single tracked object.

    Owns its motion filter exclusively. Identity is the integer `track_id`,
    assigned by the tracker and never reused.
    """

    def __init__(
        self,
        detection: Detection,
        frame_id: int,
        track_id: int,
        filter_kwargs: Optional[Dict[str, Any]] = None,
    ):
        """
        Create a tentative track from an unmatched detection.

        Args:
            detection: Detection that starts the track
            frame_id: Current frame number
            track_id: Unique id for this track
            filter_kwargs: Noise weights forwarded to KalmanTracker
        """
        self.track_id = track_id
        self.state = TrackState.TENTATIVE
        self.is_confirmed = False

        self.start_frame = frame_id
        self.frame_id = frame_id
        self.tracklet_len = 0

        self.score = detection.score
        self.detection = detection
        self.payload = detection.payload

        self.kalman_filter = KalmanTracker(**(filter_kwargs or {}))
        self.predicted_rect = self.kalman_filter.initiate(detection.rect)
        self.trajectory: List[Tuple[float, float]] = [self.predicted_rect.center]

    def __repr__(self) -> str:
        return (
            f"Track(id={self.track_id}, state={self.state.name}, "
            f"frames={self.start_frame}-{self.frame_id})"
        )

    @property
    def end_frame(self) -> int:
        """Last frame in which the track was matched."""
        return self.frame_id

    @property
    def rect(self) -> Rect:
        return self.predicted_rect

    def age(self, frame_id: int) -> int:
        """Frames elapsed since the track was created."""
        return frame_id - self.start_frame

    def predict(self) -> Rect:
        """Advance the motion filter by one frame."""
        self.predicted_rect = self.kalman_filter.predict(
            zero_height_velocity=self.state != TrackState.TRACKED
        )
        return self.predicted_rect

    def update(self, detection: Detection, frame_id: int):
        """
        Correct the track with a matched detection.

        Confirms tentative tracks and recovers lost ones.
        """
        self.predicted_rect = self.kalman_filter.update(detection.rect)
        self.state = TrackState.TRACKED
        self.is_confirmed = True
        self.frame_id = frame_id
        self.tracklet_len += 1
        self.score = detection.score
        self.detection = detection
        self.trajectory.append(self.predicted_rect.center)

        self.on_matched(detection)

    def on_matched(self, detection: Detection):
        """Hook run after every successful match; carries the payload over."""
        self.payload = detection.payload

    def mark_as_lost(self):
        if self.state == TrackState.TRACKED:
            self.state = TrackState.LOST

    def mark_as_removed(self):
        self.state = TrackState.REMOVED
