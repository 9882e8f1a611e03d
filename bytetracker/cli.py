#!/usr/bin/env python3
"""
ByteTrack MOT Runner
Track MOTChallenge-format detections and write MOTChallenge results

Usage:
    bytetrack-mot --detections MOT17-02/det/det.txt --output results/MOT17-02.txt
    bytetrack-mot --detections det.txt --output out.txt --config configs/default.yaml --mot20
"""

import argparse
import logging
import sys

from tqdm import tqdm

from .tracking import ByteTracker, TrackerConfig
from .utils import TrackRecord, load_mot_detections, setup_logging, write_mot_results


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Run ByteTrack on MOTChallenge detections')

    # Input / output
    parser.add_argument('--detections', type=str, required=True,
                        help='Path to det.txt')
    parser.add_argument('--output', type=str, required=True,
                        help='Path to write tracking results')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to tracker YAML config')

    # Override config options
    parser.add_argument('--max-retention-time', type=int, default=None,
                        help='Frames a lost track is kept')
    parser.add_argument('--track-thresh', type=float, default=None,
                        help='High/low detection score split')
    parser.add_argument('--high-thresh', type=float, default=None,
                        help='Minimum score to start a new track')
    parser.add_argument('--match-thresh', type=float, default=None,
                        help='First association cost ceiling')
    parser.add_argument('--mot20', action='store_true',
                        help='Disable score fusion')
    parser.add_argument('--min-score', type=float, default=0.0,
                        help='Drop detections below this score when loading')

    # Logging
    parser.add_argument('--log-dir', type=str, default='logs',
                        help='Directory for log files')
    parser.add_argument('--verbose', action='store_true',
                        help='Debug logging')

    return parser.parse_args(argv)


def build_config(args) -> TrackerConfig:
    """Merge the YAML config (if any) with command line overrides."""
    config = TrackerConfig.from_yaml(args.config).to_dict() if args.config else {}

    overrides = {
        'max_retention_time': args.max_retention_time,
        'track_thresh': args.track_thresh,
        'high_thresh': args.high_thresh,
        'match_thresh': args.match_thresh,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})
    if args.mot20:
        config['mot20'] = True

    return TrackerConfig.from_dict(config)


def run(detections_by_frame, config: TrackerConfig, progress: bool = True):
    """
    Track every frame from 1 to the last frame with detections.

    Returns:
        List of (frame, records) pairs, one TrackRecord per reported track
    """
    tracker = ByteTracker(config)
    last_frame = max(detections_by_frame) if detections_by_frame else 0

    results = []
    for frame in tqdm(range(1, last_frame + 1), desc='Tracking', disable=not progress):
        tracks = tracker.update(detections_by_frame.get(frame, []))
        results.append((frame, [TrackRecord.from_track(t) for t in tracks]))

    return results


def main(argv=None):
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logger = setup_logging(args.log_dir, level=level)

    config = build_config(args)
    logger.info(f"Config: {config.to_dict()}")

    detections = load_mot_detections(args.detections, min_score=args.min_score)
    results = run(detections, config)
    write_mot_results(args.output, results)

    track_ids = {track.track_id for _, tracks in results for track in tracks}
    num_boxes = sum(len(tracks) for _, tracks in results)

    print("\n" + "=" * 60)
    print("TRACKING RESULTS")
    print("=" * 60)
    print(f"  Frames:        {len(results)}")
    print(f"  Tracks:        {len(track_ids)}")
    print(f"  Output boxes:  {num_boxes}")
    print(f"  Saved to:      {args.output}")
    print("=" * 60)

    return 0


if __name__ == '__main__':
    sys.exit(main())
