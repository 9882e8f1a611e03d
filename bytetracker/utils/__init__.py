"""
Utility functions for the tracker.

Modules:
- helpers: config loading/saving, logging setup
- mot_io: MOTChallenge detection and result files, trajectory extraction

Usage:
    from bytetracker.utils import (
        load_config, save_config, setup_logging,
        load_mot_detections, write_mot_results, extract_trajectories,
    )
"""

# Helpers
from .helpers import (
    load_config,
    save_config,
    setup_logging,
)

# MOT files
from .mot_io import (
    TrackRecord,
    load_mot_detections,
    write_mot_results,
    extract_trajectories,
)

__all__ = [
    # Helpers
    'load_config',
    'save_config',
    'setup_logging',

    # MOT files
    'TrackRecord',
    'load_mot_detections',
    'write_mot_results',
    'extract_trajectories',
]
