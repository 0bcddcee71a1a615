"""Shared pytest fixtures."""

import numpy as np
import pytest

from posesmooth.data.pose import RawPoseSample
from posesmooth.utils.math_utils import axis_angle_to_quaternion

FRAME_DT = 1.0 / 60.0


@pytest.fixture
def frame_dt():
    return FRAME_DT


@pytest.fixture
def make_sample():
    """Build a RawPoseSample with identity defaults."""
    def _make(position=(0.0, 0.0, 0.0), orientation=None, scale=(1.0, 1.0, 1.0), timestamp=0.0):
        if orientation is None:
            orientation = (1.0, 0.0, 0.0, 0.0)
        return RawPoseSample(position, orientation, scale, timestamp)
    return _make


@pytest.fixture
def tilted_quaternion():
    """A unit quaternion 40 degrees about a skewed axis."""
    return axis_angle_to_quaternion(np.array([0.3, 1.0, -0.5]), np.radians(40.0))
