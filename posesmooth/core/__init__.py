"""
Core pose smoothing module.

Contains the smoothing pipeline:
- Adaptive scalar, vector and quaternion filters
- Pose filter variants behind one interface
- Per-target controller with acquisition/loss handling
- Offline replay of recorded traces
"""

from posesmooth.core.temporal_filter import (
    LowPassFilter,
    OneEuroFilter,
    VectorFilter,
    OrientationFilter,
    smoothing_factor,
    adaptive_cutoff,
    compute_adaptive_alpha,
)
from posesmooth.core.pose_filter import (
    PoseFilter,
    ClassicOneEuroPoseFilter,
    AdaptiveAlphaLerpPoseFilter,
    create_pose_filter,
)
from posesmooth.core.pose_smoother import (
    ControllerState,
    PoseSmoothingController,
    PoseSmootherBank,
    smooth_sequence,
)
from posesmooth.core.pipeline import smooth_trace

__all__ = [
    "LowPassFilter",
    "OneEuroFilter",
    "VectorFilter",
    "OrientationFilter",
    "smoothing_factor",
    "adaptive_cutoff",
    "compute_adaptive_alpha",
    "PoseFilter",
    "ClassicOneEuroPoseFilter",
    "AdaptiveAlphaLerpPoseFilter",
    "create_pose_filter",
    "ControllerState",
    "PoseSmoothingController",
    "PoseSmootherBank",
    "smooth_sequence",
    "smooth_trace",
]
