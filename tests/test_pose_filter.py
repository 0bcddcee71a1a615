"""Tests for posesmooth.core.pose_filter module."""

import numpy as np
import pytest

from posesmooth.config.settings import FilterConfig, FilterVariant, ScalePolicy
from posesmooth.core.pose_filter import (
    PoseFilter,
    ClassicOneEuroPoseFilter,
    AdaptiveAlphaLerpPoseFilter,
    create_pose_filter,
)
from posesmooth.core.temporal_filter import compute_adaptive_alpha, smoothing_factor
from posesmooth.data.pose import SmoothedPose

DT = 1.0 / 60.0


def _snapped_pose(sample, overscan=1.0):
    pose = SmoothedPose()
    pose.set_from(sample, overscan)
    return pose


class TestFactory:
    """Test pose filter creation."""

    def test_create_by_enum(self):
        """Should map each variant to its class."""
        assert isinstance(create_pose_filter(FilterVariant.CLASSIC_ONE_EURO), ClassicOneEuroPoseFilter)
        assert isinstance(create_pose_filter(FilterVariant.ADAPTIVE_ALPHA_LERP), AdaptiveAlphaLerpPoseFilter)

    def test_create_by_name(self):
        """Should accept variant names in any case."""
        f = create_pose_filter("adaptive-alpha-lerp")
        assert f.variant is FilterVariant.ADAPTIVE_ALPHA_LERP
        assert isinstance(f, PoseFilter)

    def test_unknown_variant(self):
        """Unknown names should raise ValueError."""
        with pytest.raises(ValueError):
            create_pose_filter("kalman")


class TestClassicOneEuroPoseFilter:
    """Test the One-Euro pose filter."""

    def test_first_apply_passthrough(self, make_sample, tilted_quaternion):
        """First sample after reset should pass straight through."""
        config = FilterConfig()
        f = ClassicOneEuroPoseFilter(config)
        pose = SmoothedPose()
        sample = make_sample((0.1, 0.2, 0.3), tilted_quaternion, (2.0, 2.0, 2.0))

        f.apply(sample, DT, config, pose)

        np.testing.assert_array_equal(pose.position, sample.position)
        np.testing.assert_array_equal(pose.orientation, sample.orientation)
        np.testing.assert_array_equal(pose.scale, sample.scale * config.overscan)

    def test_smooths_position(self, make_sample):
        """A jump at rest should be followed only partially."""
        config = FilterConfig(min_cutoff=1.0, beta=0.0)
        f = ClassicOneEuroPoseFilter(config)
        pose = SmoothedPose()

        f.apply(make_sample((0.0, 0.0, 0.0)), DT, config, pose)
        f.apply(make_sample((1.0, 0.0, 0.0)), DT, config, pose)

        assert pose.position[0] == pytest.approx(smoothing_factor(DT, 1.0))

    def test_direct_scale_policy(self, make_sample):
        """Direct policy should apply raw scale times overscan immediately."""
        config = FilterConfig(overscan=1.05, scale_policy=ScalePolicy.DIRECT)
        f = ClassicOneEuroPoseFilter(config)
        pose = SmoothedPose()

        f.apply(make_sample(scale=(1.0, 1.0, 1.0)), DT, config, pose)
        f.apply(make_sample(scale=(2.0, 3.0, 4.0)), DT, config, pose)

        np.testing.assert_allclose(pose.scale, [2.1, 3.15, 4.2])

    def test_blend_scale_policy(self, make_sample):
        """Blend policy should move scale by the position blend factor."""
        config = FilterConfig(min_cutoff=0.5, beta=60.0, overscan=1.0, scale_policy=ScalePolicy.BLEND)
        f = ClassicOneEuroPoseFilter(config)
        pose = SmoothedPose()

        f.apply(make_sample(scale=(1.0, 1.0, 1.0)), DT, config, pose)
        f.apply(make_sample(scale=(2.0, 2.0, 2.0)), DT, config, pose)

        a = smoothing_factor(DT, 0.5)
        np.testing.assert_allclose(pose.scale, 1.0 + a)

    def test_reset_restarts_filters(self, make_sample):
        """After reset the next sample should pass through."""
        config = FilterConfig()
        f = ClassicOneEuroPoseFilter(config)
        pose = SmoothedPose()

        f.apply(make_sample((0.0, 0.0, 0.0)), DT, config, pose)
        f.reset()
        f.apply(make_sample((5.0, 5.0, 5.0)), DT, config, pose)

        np.testing.assert_array_equal(pose.position, [5.0, 5.0, 5.0])


class TestAdaptiveAlphaLerpPoseFilter:
    """Test the speed-adaptive lerp pose filter."""

    def test_moves_by_adaptive_alpha(self, make_sample):
        """Position should move toward the sample by the adaptive alpha."""
        config = FilterConfig(variant=FilterVariant.ADAPTIVE_ALPHA_LERP)
        f = AdaptiveAlphaLerpPoseFilter(config)
        pose = _snapped_pose(make_sample((0.0, 0.0, 0.0)))

        f.apply(make_sample((0.001, 0.0, 0.0)), DT, config, pose)

        alpha = compute_adaptive_alpha(0.001 / DT, 0.0, config.alpha_min, config.alpha_max)
        assert f.last_alpha == pytest.approx(alpha)
        assert pose.position[0] == pytest.approx(0.001 * alpha)

    def test_fast_motion_uses_alpha_max(self, make_sample):
        """Fast motion should saturate at alpha_max."""
        config = FilterConfig(variant=FilterVariant.ADAPTIVE_ALPHA_LERP)
        f = AdaptiveAlphaLerpPoseFilter(config)
        pose = _snapped_pose(make_sample((0.0, 0.0, 0.0)))

        f.apply(make_sample((1.0, 0.0, 0.0)), DT, config, pose)

        assert pose.position[0] == pytest.approx(config.alpha_max)

    def test_rotation_raises_alpha(self, make_sample, tilted_quaternion):
        """Angular motion alone should push alpha toward alpha_max."""
        config = FilterConfig(variant=FilterVariant.ADAPTIVE_ALPHA_LERP)
        f = AdaptiveAlphaLerpPoseFilter(config)
        pose = _snapped_pose(make_sample())

        f.apply(make_sample(orientation=tilted_quaternion), DT, config, pose)

        assert f.last_alpha == pytest.approx(config.alpha_max)
        assert np.linalg.norm(pose.orientation) == pytest.approx(1.0)

    def test_constant_input_is_fixed_point(self, make_sample, tilted_quaternion):
        """A pose already at the sample should not move."""
        config = FilterConfig(variant=FilterVariant.ADAPTIVE_ALPHA_LERP, scale_policy=ScalePolicy.BLEND)
        f = AdaptiveAlphaLerpPoseFilter(config)
        sample = make_sample((0.3, 0.1, -0.7), tilted_quaternion, (1.5, 1.5, 1.5))
        pose = _snapped_pose(sample, config.overscan)

        for _ in range(10):
            f.apply(sample, DT, config, pose)

        np.testing.assert_array_equal(pose.position, sample.position)
        np.testing.assert_array_equal(pose.orientation, sample.orientation)
        np.testing.assert_array_equal(pose.scale, sample.scale * config.overscan)

    def test_blend_scale_policy(self, make_sample):
        """Blend policy should move scale by alpha."""
        config = FilterConfig(
            variant=FilterVariant.ADAPTIVE_ALPHA_LERP,
            overscan=1.0,
            scale_policy=ScalePolicy.BLEND,
        )
        f = AdaptiveAlphaLerpPoseFilter(config)
        pose = _snapped_pose(make_sample())

        f.apply(make_sample(scale=(2.0, 2.0, 2.0)), DT, config, pose)

        np.testing.assert_allclose(pose.scale, 1.0 + config.alpha_min)
