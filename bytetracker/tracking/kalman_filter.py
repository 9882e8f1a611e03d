"""
Kalman Filter for Bounding Box Motion.

Constant-velocity model in (center x, center y, aspect ratio, height) space,
with process and observation noise proportional to the current box height:
larger boxes get proportionally larger positional uncertainty.

State: [cx, cy, a, h, vcx, vcy, va, vh]
Observation: [cx, cy, a, h]

Usage:
    kf = KalmanTracker()
    rect = kf.initiate(detection.rect)
    rect = kf.predict()
    rect = kf.update(next_detection.rect)
"""

from typing import Tuple

import numpy as np
from filterpy.kalman import KalmanFilter

from .geometry import Rect

STATE_DIM = 8
MEASUREMENT_DIM = 4

# Fixed std for the aspect ratio terms (not height scaled)
ASPECT_STD_INIT = 1e-2
ASPECT_VELOCITY_STD = 1e-5
ASPECT_STD_PROCESS = 1e-2
ASPECT_STD_MEASUREMENT = 1e-1


class KalmanTracker:
    """
    Per-track Kalman filter over an 8-dimensional box state.

    Each instance is owned by exactly one track.
    """

    def __init__(
        self,
        std_weight_position: float = 1.0 / 20,
        std_weight_velocity: float = 1.0 / 160,
    ):
        """
        Args:
            std_weight_position: Position std as a fraction of box height
            std_weight_velocity: Velocity std as a fraction of box height
        """
        self.std_weight_position = std_weight_position
        self.std_weight_velocity = std_weight_velocity

        self.kf = KalmanFilter(dim_x=STATE_DIM, dim_z=MEASUREMENT_DIM)

        # State transition matrix
        self.kf.F = np.eye(STATE_DIM)
        for i in range(MEASUREMENT_DIM):
            self.kf.F[i, MEASUREMENT_DIM + i] = 1.0

        # Measurement matrix
        self.kf.H = np.eye(MEASUREMENT_DIM, STATE_DIM)

    @property
    def mean(self) -> np.ndarray:
        """State mean, shape [8]."""
        return self.kf.x.flatten()

    @property
    def covariance(self) -> np.ndarray:
        """State covariance, shape [8, 8]."""
        return self.kf.P

    def _height(self) -> float:
        return float(self.kf.x[3, 0])

    def initiate(self, rect: Rect) -> Rect:
        """
        Start the filter from an unassociated measurement.

        Args:
            rect: Initial box (height must be positive)

        Returns:
            Box recovered from the initial state
        """
        measurement = rect.to_xyah()
        self.kf.x = np.r_[measurement, np.zeros(MEASUREMENT_DIM)].reshape(STATE_DIM, 1)

        h = measurement[3]
        std = np.array([
            2 * self.std_weight_position * h,
            2 * self.std_weight_position * h,
            ASPECT_STD_INIT,
            2 * self.std_weight_position * h,
            10 * self.std_weight_velocity * h,
            10 * self.std_weight_velocity * h,
            ASPECT_VELOCITY_STD,
            10 * self.std_weight_velocity * h,
        ])
        self.kf.P = np.diag(np.square(std))

        return self.get_state()

    def _motion_noise(self) -> np.ndarray:
        h = self._height()
        std = np.array([
            self.std_weight_position * h,
            self.std_weight_position * h,
            ASPECT_STD_PROCESS,
            self.std_weight_position * h,
            self.std_weight_velocity * h,
            self.std_weight_velocity * h,
            ASPECT_VELOCITY_STD,
            self.std_weight_velocity * h,
        ])
        return np.diag(np.square(std))

    def _measurement_noise(self) -> np.ndarray:
        h = self._height()
        std = np.array([
            self.std_weight_position * h,
            self.std_weight_position * h,
            ASPECT_STD_MEASUREMENT,
            self.std_weight_position * h,
        ])
        return np.diag(np.square(std))

    def predict(self, zero_height_velocity: bool = False) -> Rect:
        """
        Run the prediction step.

        Args:
            zero_height_velocity: Reset the height velocity before
                predicting (used for tracks that are not currently matched)

        Returns:
            Predicted box
        """
        if zero_height_velocity:
            self.kf.x[7, 0] = 0.0

        self.kf.predict(Q=self._motion_noise())
        return self.get_state()

    def project(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project the state distribution to observation space.

        Returns:
            (mean [4], covariance [4, 4])
        """
        mean = self.kf.H @ self.kf.x
        cov = self.kf.H @ self.kf.P @ self.kf.H.T + self._measurement_noise()
        return mean.flatten(), cov

    def update(self, rect: Rect) -> Rect:
        """
        Run the correction step.

        Args:
            rect: Measured box

        Returns:
            Corrected box
        """
        self.kf.update(rect.to_xyah(), R=self._measurement_noise())
        return self.get_state()

    def get_state(self) -> Rect:
        """Get current box estimate."""
        return Rect.from_xyah(self.kf.x[:MEASUREMENT_DIM, 0])

    def get_velocity(self) -> np.ndarray:
        """Get center velocity estimate (vcx, vcy)."""
        return self.kf.x[4:6].flatten()
