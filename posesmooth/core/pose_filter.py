"""
Pose filters: one interface over the available smoothing variants.

- ClassicOneEuroPoseFilter: per-axis One-Euro position filter plus adaptive
  slerp orientation filter
- AdaptiveAlphaLerpPoseFilter: follows the raw pose with a lerp/slerp whose
  blend factor grows with combined linear and angular speed
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

import numpy as np

from posesmooth.config.settings import FilterConfig, FilterVariant, ScalePolicy
from posesmooth.core.temporal_filter import (
    OrientationFilter,
    VectorFilter,
    compute_adaptive_alpha,
)
from posesmooth.data.pose import RawPoseSample, SmoothedPose
from posesmooth.utils.math_utils import quaternion_angle, slerp


class PoseFilter(ABC):
    """Abstract base class for pose filters."""

    variant: FilterVariant

    def __init__(self):
        self._target_scale = np.ones(3)
        self._scratch = np.zeros(3)

    @abstractmethod
    def apply(
        self,
        raw: RawPoseSample,
        dt: float,
        config: FilterConfig,
        pose: SmoothedPose,
    ) -> None:
        """
        Advance the smoothed pose toward a raw sample.

        Args:
            raw: Tracker reading for this tick
            dt: Seconds since the previous tick (> 0)
            config: Configuration snapshot for this tick
            pose: Pose to update in place
        """
        pass

    @abstractmethod
    def reset(self):
        """Reset the filter state."""
        pass

    def _apply_scale(
        self,
        raw: RawPoseSample,
        config: FilterConfig,
        pose: SmoothedPose,
        alpha: Union[float, np.ndarray],
    ):
        np.multiply(raw.scale, config.overscan, out=self._target_scale)

        if config.scale_policy is ScalePolicy.BLEND:
            np.subtract(self._target_scale, pose.scale, out=self._scratch)
            self._scratch *= alpha
            pose.scale += self._scratch
        else:
            np.copyto(pose.scale, self._target_scale)


class ClassicOneEuroPoseFilter(PoseFilter):
    """
    One-Euro smoothing of position and orientation.

    Scale blending (ScalePolicy.BLEND) uses each position axis's smoothing
    factor for the matching scale axis.
    """

    variant = FilterVariant.CLASSIC_ONE_EURO

    def __init__(self, config: Optional[FilterConfig] = None, simplified_orientation: bool = False):
        super().__init__()
        config = config or FilterConfig()

        self.position_filter = VectorFilter(config.min_cutoff, config.beta, config.d_cutoff)
        self.orientation_filter = OrientationFilter(
            config.min_cutoff, config.beta, simplified=simplified_orientation
        )

    def apply(
        self,
        raw: RawPoseSample,
        dt: float,
        config: FilterConfig,
        pose: SmoothedPose,
    ) -> None:
        self.position_filter.configure(config.min_cutoff, config.beta, config.d_cutoff)
        self.orientation_filter.configure(config.min_cutoff, config.beta)

        self.position_filter.filter(raw.position, dt, out=pose.position)
        self.orientation_filter.filter(raw.orientation, dt, out=pose.orientation)

        self._apply_scale(raw, config, pose, self.position_filter.alphas)

    def reset(self):
        self.position_filter.reset()
        self.orientation_filter.reset()


class AdaptiveAlphaLerpPoseFilter(PoseFilter):
    """
    Speed-adaptive following of the raw pose.

    The state is the smoothed pose itself: every tick it moves toward the
    raw sample by alpha, where alpha rises from alpha_min at rest to
    alpha_max at speed.
    """

    variant = FilterVariant.ADAPTIVE_ALPHA_LERP

    def __init__(self, config: Optional[FilterConfig] = None):
        super().__init__()
        self._delta = np.zeros(3)
        self.last_alpha = 1.0

    def apply(
        self,
        raw: RawPoseSample,
        dt: float,
        config: FilterConfig,
        pose: SmoothedPose,
    ) -> None:
        np.subtract(raw.position, pose.position, out=self._delta)
        linear_speed = float(np.linalg.norm(self._delta)) / dt
        angular_speed = quaternion_angle(pose.orientation, raw.orientation) / dt

        alpha = compute_adaptive_alpha(
            linear_speed, angular_speed, config.alpha_min, config.alpha_max
        )

        self._delta *= alpha
        pose.position += self._delta
        slerp(pose.orientation, raw.orientation, alpha, out=pose.orientation)

        self._apply_scale(raw, config, pose, alpha)
        self.last_alpha = alpha

    def reset(self):
        self.last_alpha = 1.0


def create_pose_filter(
    variant: Union[FilterVariant, str],
    config: Optional[FilterConfig] = None,
) -> PoseFilter:
    """
    Factory function to create a pose filter.

    Args:
        variant: FilterVariant or its name ('classic_one_euro', 'adaptive_alpha_lerp')
        config: Initial tuning parameters

    Returns:
        Configured pose filter instance
    """
    if isinstance(variant, str):
        name = variant.upper().replace('-', '_')
        if name not in FilterVariant.__members__:
            raise ValueError(f"Unknown filter variant: {variant}")
        variant = FilterVariant[name]

    filter_map = {
        FilterVariant.CLASSIC_ONE_EURO: ClassicOneEuroPoseFilter,
        FilterVariant.ADAPTIVE_ALPHA_LERP: AdaptiveAlphaLerpPoseFilter,
    }

    return filter_map[variant](config)
