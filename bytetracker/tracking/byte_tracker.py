"""
ByteTrack: Multi-Object Tracking by Associating Every Detection Box.

Per-frame pipeline:
1. Split detections into high and low score sets
2. Predict confirmed and lost tracks with their Kalman filters
3. First association: high score detections vs tracked + lost tracks
   (IoU fused with detection score)
4. Second association: low score detections vs still unmatched tracked tracks
5. Third association: leftover high score detections vs tentative tracks;
   remaining confident detections start new tracks
6. Expire lost tracks, reconcile pools by id, suppress duplicates

Usage:
    from bytetracker.tracking import ByteTracker, Detection, Rect

    tracker = ByteTracker(max_retention_time=30)
    for frame_detections in stream:
        tracks = tracker.update(frame_detections)
        for track in tracks:
            print(track.track_id, track.predicted_rect)

Reference: Zhang et al. "ByteTrack" (ECCV 2022)
"""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..utils.helpers import load_config
from .detection import Detection
from .geometry import iou_distance
from .lapjv import linear_assignment
from .track import Track, TrackState

logger = logging.getLogger(__name__)

# Fixed association thresholds (cost ceilings)
LOW_SCORE_MATCH_THRESH = 0.5
UNCONFIRMED_MATCH_THRESH = 0.7
# Pairs with 1 - IoU below this are duplicates
DUPLICATE_IOU_DISTANCE = 0.15


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class TrackerConfig:
    """Tracker settings, fixed for the lifetime of a tracker."""
    max_retention_time: int = 30          # Frames a lost track survives
    track_thresh: float = 0.5             # High/low detection score split
    high_thresh: float = 0.6              # Minimum score to start a track
    match_thresh: float = 0.8             # First association cost ceiling
    mot20: bool = False                   # Disable score fusion
    std_weight_position: float = 1.0 / 20
    std_weight_velocity: float = 1.0 / 160

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ValueError for settings the tracker cannot run with."""
        if self.max_retention_time < 0:
            raise ValueError(f"max_retention_time must be >= 0, got {self.max_retention_time}")
        for name in ('track_thresh', 'high_thresh', 'match_thresh'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.std_weight_position <= 0 or self.std_weight_velocity <= 0:
            raise ValueError("Kalman std weights must be positive")
        if self.high_thresh < self.track_thresh:
            logger.warning(
                f"high_thresh ({self.high_thresh}) is below track_thresh "
                f"({self.track_thresh}); low score detections will start tracks"
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'TrackerConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown tracker config keys: {sorted(unknown)}")
        return cls(**config)

    @classmethod
    def from_yaml(cls, path: str) -> 'TrackerConfig':
        """Load settings from a YAML file (optionally nested under `tracker`)."""
        config = load_config(path) or {}
        if 'tracker' in config:
            config = config['tracker'] or {}
        return cls.from_dict(config)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Id-keyed Track Set Operations
# =============================================================================

def joint_tracks(a: Sequence[Track], b: Sequence[Track]) -> List[Track]:
    """Union by track id, keeping order (a first)."""
    exists = set()
    res = []
    for track in list(a) + list(b):
        if track.track_id not in exists:
            exists.add(track.track_id)
            res.append(track)
    return res


def sub_tracks(a: Sequence[Track], b: Sequence[Track]) -> List[Track]:
    """Difference by track id."""
    tracks = {track.track_id: track for track in a}
    for track in b:
        tracks.pop(track.track_id, None)
    return list(tracks.values())


def remove_duplicate_tracks(
    a_tracks: Sequence[Track],
    b_tracks: Sequence[Track],
) -> Tuple[List[Track], List[Track]]:
    """
    Drop the younger track of every overlapping (a, b) pair.

    Age is measured from creation to the last matched frame; on equal ages
    the tracked one is dropped.

    Args:
        a_tracks: Currently tracked tracks
        b_tracks: Lost tracks

    Returns:
        (a_tracks, b_tracks) without the duplicates
    """
    if len(a_tracks) == 0 or len(b_tracks) == 0:
        return list(a_tracks), list(b_tracks)

    distances = iou_distance(
        [t.predicted_rect for t in a_tracks],
        [t.predicted_rect for t in b_tracks],
    )
    dup_a = set()
    dup_b = set()
    for ai, bi in zip(*np.where(distances < DUPLICATE_IOU_DISTANCE)):
        time_a = a_tracks[ai].frame_id - a_tracks[ai].start_frame
        time_b = b_tracks[bi].frame_id - b_tracks[bi].start_frame
        if time_a > time_b:
            dup_b.add(bi)
        else:
            dup_a.add(ai)

    res_a = [t for i, t in enumerate(a_tracks) if i not in dup_a]
    res_b = [t for i, t in enumerate(b_tracks) if i not in dup_b]
    return res_a, res_b


def fuse_score(cost_matrix: np.ndarray, detections: Sequence[Detection]) -> np.ndarray:
    """Fold detection confidence into an IoU cost: 1 - IoU * score."""
    if cost_matrix.size == 0:
        return cost_matrix
    iou_sim = 1.0 - cost_matrix
    det_scores = np.array([d.score for d in detections], dtype=np.float64)
    fuse_sim = iou_sim * det_scores[None, :]
    return 1.0 - fuse_sim


# =============================================================================
# ByteTrack
# =============================================================================

class ByteTracker:
    """
    ByteTrack multi-object tracker.

    Associates both high and low confidence detections. Not thread safe:
    use one instance per stream.
    """

    def __init__(self, config: Optional[TrackerConfig] = None, **overrides):
        """
        Initialize ByteTracker.

        Args:
            config: Tracker settings (defaults if None)
            **overrides: Individual TrackerConfig fields, e.g.
                max_retention_time=60
        """
        if config is None:
            config = TrackerConfig.from_dict(overrides)
        elif overrides:
            config = TrackerConfig.from_dict({**config.to_dict(), **overrides})
        self.config = config

        self.tracked_tracks: List[Track] = []
        self.lost_tracks: List[Track] = []
        self.removed_tracks: List[Track] = []

        self.frame_id = 0
        self.track_id_count = 0

        logger.info(
            f"ByteTracker initialized (max_retention_time={config.max_retention_time}, "
            f"track_thresh={config.track_thresh}, high_thresh={config.high_thresh}, "
            f"match_thresh={config.match_thresh}, mot20={config.mot20})"
        )

    @property
    def _filter_kwargs(self) -> Dict[str, float]:
        return {
            'std_weight_position': self.config.std_weight_position,
            'std_weight_velocity': self.config.std_weight_velocity,
        }

    def update(self, detections: Sequence[Detection]) -> List[Track]:
        """
        Update tracks with one frame of detections.

        Args:
            detections: Detections of the current frame

        Returns:
            Confirmed tracks, both currently tracked and lost
        """
        self.frame_id += 1
        cfg = self.config
        detections = list(detections)

        # Split detections by score
        high_dets = [d for d in detections if d.score >= cfg.track_thresh]
        low_dets = [d for d in detections if d.score < cfg.track_thresh]

        # Split existing tracks by confirmation
        confirmed = [t for t in self.tracked_tracks if t.is_confirmed]
        unconfirmed = [t for t in self.tracked_tracks if not t.is_confirmed]

        track_pool = joint_tracks(confirmed, self.lost_tracks)
        for track in track_pool:
            track.predict()

        # First association, with IoU (and score)
        matched, unmatched_tracked, unmatched_dets = self._iou_association(
            track_pool, high_dets
        )

        # Second association, with low score detections
        new_lost = self._low_score_association(matched, low_dets, unmatched_tracked)

        # Tentative tracks and new tracks
        new_removed = self._init_new_tracks(matched, unconfirmed, unmatched_dets)

        # Expire lost tracks
        for track in self.lost_tracks:
            if self.frame_id - track.frame_id > cfg.max_retention_time:
                track.mark_as_removed()
                new_removed.append(track)
                logger.debug(f"Frame {self.frame_id}: track {track.track_id} expired")

        # Reconcile pools by id
        self.removed_tracks = joint_tracks(self.removed_tracks, new_removed)
        lost = sub_tracks(self.lost_tracks, matched)
        lost = joint_tracks(lost, new_lost)
        lost = sub_tracks(lost, self.removed_tracks)

        self.tracked_tracks, self.lost_tracks = remove_duplicate_tracks(matched, lost)

        output = [t for t in self.tracked_tracks if t.is_confirmed]
        output.extend(t for t in self.lost_tracks if t.is_confirmed)

        logger.debug(
            f"Frame {self.frame_id}: {len(detections)} detections "
            f"({len(high_dets)} high), tracked={len(self.tracked_tracks)}, "
            f"lost={len(self.lost_tracks)}, removed={len(self.removed_tracks)}, "
            f"output={len(output)}"
        )

        return output

    def clear(self):
        """Reset tracker state."""
        self.tracked_tracks = []
        self.lost_tracks = []
        self.removed_tracks = []
        self.frame_id = 0
        self.track_id_count = 0

    def reset(self):
        """Alias of clear()."""
        self.clear()

    # -------------------------------------------------------------------------
    # Association stages
    # -------------------------------------------------------------------------

    def _iou_association(
        self,
        track_pool: List[Track],
        detections: List[Detection],
    ) -> Tuple[List[Track], List[Track], List[Detection]]:
        matches, unmatched_tracks, unmatched_dets = self._linear_assignment(
            track_pool, detections, self.config.match_thresh, not self.config.mot20
        )

        matched_tracks = []
        for track, detection in matches:
            track.update(detection, self.frame_id)
            matched_tracks.append(track)

        unmatched_tracked = [t for t in unmatched_tracks if t.state == TrackState.TRACKED]

        logger.debug(
            f"Frame {self.frame_id}: first association matched {len(matches)}/"
            f"{len(track_pool)} tracks"
        )
        return matched_tracks, unmatched_tracked, unmatched_dets

    def _low_score_association(
        self,
        matched_tracks: List[Track],
        low_dets: List[Detection],
        unmatched_tracked: List[Track],
    ) -> List[Track]:
        matches, unmatched_tracks, _ = self._linear_assignment(
            unmatched_tracked, low_dets, LOW_SCORE_MATCH_THRESH, False
        )

        for track, detection in matches:
            track.update(detection, self.frame_id)
            matched_tracks.append(track)

        new_lost = []
        for track in unmatched_tracks:
            if track.state != TrackState.LOST:
                track.mark_as_lost()
                new_lost.append(track)
                logger.debug(f"Frame {self.frame_id}: track {track.track_id} lost")

        return new_lost

    def _init_new_tracks(
        self,
        matched_tracks: List[Track],
        unconfirmed: List[Track],
        unmatched_dets: List[Detection],
    ) -> List[Track]:
        matches, unmatched_unconfirmed, new_dets = self._linear_assignment(
            unconfirmed, unmatched_dets, UNCONFIRMED_MATCH_THRESH, not self.config.mot20
        )

        for track, detection in matches:
            track.update(detection, self.frame_id)
            matched_tracks.append(track)

        new_removed = []
        for track in unmatched_unconfirmed:
            track.mark_as_removed()
            new_removed.append(track)

        for detection in new_dets:
            if detection.score < self.config.high_thresh:
                continue
            self.track_id_count += 1
            track = Track(detection, self.frame_id, self.track_id_count, self._filter_kwargs)
            matched_tracks.append(track)
            logger.debug(f"Frame {self.frame_id}: started track {track.track_id}")

        return new_removed

    def _linear_assignment(
        self,
        tracks: List[Track],
        detections: List[Detection],
        thresh: float,
        use_fuse_score: bool,
    ) -> Tuple[List[Tuple[Track, Detection]], List[Track], List[Detection]]:
        """Match tracks to detections under a cost ceiling."""
        if len(tracks) == 0 or len(detections) == 0:
            return [], list(tracks), list(detections)

        cost_matrix = iou_distance(
            [t.predicted_rect for t in tracks],
            [d.rect for d in detections],
        )
        if use_fuse_score:
            cost_matrix = fuse_score(cost_matrix, detections)

        matches, unmatched_a, unmatched_b = linear_assignment(cost_matrix, thresh)

        pairs = [(tracks[i], detections[j]) for i, j in matches]
        return pairs, [tracks[i] for i in unmatched_a], [detections[j] for j in unmatched_b]
