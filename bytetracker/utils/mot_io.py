"""
MOTChallenge text files.

Detections (det.txt):
    frame, id, bb_left, bb_top, bb_width, bb_height, conf, x, y, z

Results:
    frame, track_id, bb_left, bb_top, bb_width, bb_height, conf, -1, -1, -1

Frames are 1-based.
"""

import logging
import os
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from ..tracking.detection import Detection
from ..tracking.geometry import Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackRecord:
    """Output values of one track in one frame."""
    track_id: int
    rect: Rect
    score: float

    @classmethod
    def from_track(cls, track) -> 'TrackRecord':
        return cls(track.track_id, track.predicted_rect, track.score)


def load_mot_detections(
    path: str,
    min_score: float = 0.0,
) -> Dict[int, List[Detection]]:
    """
    Load detections grouped by frame.

    Rows with non-positive width/height or a score below `min_score` are
    skipped. Each detection carries its row index in the file as payload.

    Args:
        path: Path to det.txt
        min_score: Minimum detection score to keep

    Returns:
        Dictionary of {frame: [Detection, ...]}
    """
    data = np.loadtxt(path, delimiter=',', ndmin=2)
    if data.size == 0:
        return {}
    if data.shape[1] < 7:
        raise ValueError(f"{path}: expected at least 7 columns, got {data.shape[1]}")

    detections = defaultdict(list)
    skipped = 0

    for row_index, row in enumerate(data):
        frame = int(row[0])
        left, top, width, height, score = (float(v) for v in row[2:7])
        if width <= 0 or height <= 0 or score < min_score:
            skipped += 1
            continue
        detections[frame].append(
            Detection(Rect(top=top, left=left, width=width, height=height), score, row_index)
        )

    if skipped:
        logger.info(f"Skipped {skipped} detection rows from {path}")
    logger.info(f"Loaded {len(data) - skipped} detections over {len(detections)} frames from {path}")

    return dict(detections)


def write_mot_results(
    path: str,
    results: Iterable[Tuple[int, Sequence[TrackRecord]]],
):
    """
    Write tracking results.

    Args:
        path: Output file
        results: (frame, records) pairs, taken from each frame's
            ByteTracker.update output with TrackRecord.from_track
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    num_rows = 0
    with open(path, 'w') as f:
        for frame, records in results:
            for record in records:
                rect = record.rect
                f.write(
                    f"{frame},{record.track_id},{rect.left:.2f},{rect.top:.2f},"
                    f"{rect.width:.2f},{rect.height:.2f},{record.score:.2f},-1,-1,-1\n"
                )
                num_rows += 1

    logger.info(f"Wrote {num_rows} result rows to {path}")


def extract_trajectories(
    tracks: Iterable,
    min_length: int = 8,
) -> Dict[int, np.ndarray]:
    """
    Extract trajectories from tracks.

    Args:
        tracks: Tracks with a `trajectory` list of box centers
        min_length: Minimum trajectory length

    Returns:
        Dictionary of {track_id: trajectory [T, 2]}
    """
    trajectories = {}

    for track in tracks:
        if len(track.trajectory) >= min_length:
            trajectories[track.track_id] = np.array(track.trajectory)

    return trajectories
