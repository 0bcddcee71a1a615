"""
posesmooth - Adaptive smoothing for tracked 3D poses

Turns a noisy, variable-rate stream of tracked poses (position, quaternion
orientation, scale) into a stable transform for rendering while staying
responsive to fast motion.

Features:
- One-Euro filtering of position, adaptive slerp filtering of orientation
- Speed-adaptive lerp/slerp following as an alternative filter variant
- Snap on reacquisition, freeze on tracking loss
- Overscan scaling of the rendered content
- Live-tunable settings with JSON persistence
- Offline smoothing of recorded traces (`posesmooth` console script)

License: MIT
"""

__version__ = "1.0.0"
__author__ = "posesmooth Contributors"
__license__ = "MIT"

from posesmooth.config.settings import Settings, FilterConfig, FilterVariant, ScalePolicy
from posesmooth.core.pose_smoother import (
    ControllerState,
    PoseSmoothingController,
    PoseSmootherBank,
    smooth_sequence,
)
from posesmooth.data.pose import RawPoseSample, SmoothedPose

__all__ = [
    "Settings",
    "FilterConfig",
    "FilterVariant",
    "ScalePolicy",
    "ControllerState",
    "PoseSmoothingController",
    "PoseSmootherBank",
    "smooth_sequence",
    "RawPoseSample",
    "SmoothedPose",
]
