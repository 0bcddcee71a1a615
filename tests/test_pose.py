"""Tests for posesmooth.data.pose and logging setup."""

import logging

import numpy as np
import pytest

from posesmooth.data.pose import RawPoseSample, SmoothedPose
from posesmooth.utils.logging_utils import setup_logging
from posesmooth.utils.math_utils import compose_transform


class TestRawPoseSample:
    """Test raw sample construction."""

    def test_coerces_sequences(self):
        """Lists and tuples should become float64 arrays."""
        sample = RawPoseSample([1, 2, 3], (1, 0, 0, 0), [2, 2, 2], 5)
        assert sample.position.dtype == np.float64
        assert sample.orientation.shape == (4,)
        assert sample.timestamp == 5.0

    def test_default_scale(self):
        """Scale should default to ones."""
        sample = RawPoseSample([0.0, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0])
        np.testing.assert_array_equal(sample.scale, [1.0, 1.0, 1.0])

    def test_arrays_are_read_only(self):
        """A sample must not change after creation."""
        sample = RawPoseSample([0.0, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0])
        with pytest.raises(ValueError):
            sample.position[0] = 1.0

    def test_copies_input(self):
        """Mutating the source array should not affect the sample."""
        position = np.array([1.0, 2.0, 3.0])
        sample = RawPoseSample(position, [1.0, 0.0, 0.0, 0.0])
        position[0] = 99.0
        assert sample.position[0] == 1.0

    def test_wrong_shape(self):
        """Mis-sized inputs should be rejected."""
        with pytest.raises(ValueError):
            RawPoseSample([0.0, 0.0], [1.0, 0.0, 0.0, 0.0])

    def test_from_matrix(self, tilted_quaternion):
        """Should decompose an anchor world matrix."""
        matrix = compose_transform(
            np.array([0.1, 0.2, -1.0]), tilted_quaternion, np.array([0.5, 0.5, 0.5])
        )
        sample = RawPoseSample.from_matrix(matrix, timestamp=2.5)

        np.testing.assert_allclose(sample.position, [0.1, 0.2, -1.0])
        np.testing.assert_allclose(sample.orientation, tilted_quaternion, atol=1e-12)
        np.testing.assert_allclose(sample.scale, [0.5, 0.5, 0.5])
        assert sample.timestamp == 2.5


class TestSmoothedPose:
    """Test the rendered pose container."""

    def test_defaults(self):
        """New poses are hidden identity transforms."""
        pose = SmoothedPose()
        assert not pose.visible
        np.testing.assert_array_equal(pose.to_matrix(), np.eye(4))

    def test_set_from_applies_overscan(self, make_sample, tilted_quaternion):
        """set_from should copy the sample and scale by overscan."""
        pose = SmoothedPose()
        sample = make_sample((1.0, 2.0, 3.0), tilted_quaternion, (2.0, 2.0, 2.0))
        position = pose.position

        pose.set_from(sample, 1.02)

        assert pose.position is position
        np.testing.assert_array_equal(pose.position, sample.position)
        np.testing.assert_array_equal(pose.orientation, sample.orientation)
        np.testing.assert_array_equal(pose.scale, sample.scale * 1.02)

    def test_copy_is_detached(self, make_sample):
        """A copy should not follow later updates."""
        pose = SmoothedPose()
        pose.set_from(make_sample((1.0, 0.0, 0.0)))
        snapshot = pose.copy()

        pose.set_from(make_sample((5.0, 0.0, 0.0)))

        assert snapshot.position[0] == 1.0

    def test_to_matrix(self, make_sample):
        """Matrix should contain translation and scale."""
        pose = SmoothedPose()
        pose.set_from(make_sample((1.0, 2.0, 3.0), scale=(2.0, 2.0, 2.0)))

        matrix = pose.to_matrix()

        np.testing.assert_allclose(matrix[:3, 3], [1.0, 2.0, 3.0])
        np.testing.assert_allclose(np.diag(matrix)[:3], [2.0, 2.0, 2.0])

    def test_to_dict(self):
        """Dictionary should hold plain lists."""
        data = SmoothedPose(visible=True).to_dict()
        assert data == {
            "position": [0.0, 0.0, 0.0],
            "orientation": [1.0, 0.0, 0.0, 0.0],
            "scale": [1.0, 1.0, 1.0],
            "visible": True,
        }


class TestLoggingSetup:
    """Test console logging configuration."""

    def test_installs_handler(self):
        """Should attach a formatted handler to the package logger."""
        package_logger = logging.getLogger("posesmooth")
        names = ("posesmooth", "posesmooth.core", "posesmooth.config")
        levels = {name: logging.getLogger(name).level for name in names}

        handler = setup_logging(logging.DEBUG)
        try:
            assert handler in package_logger.handlers
            assert package_logger.level == logging.DEBUG
            assert handler.formatter is not None
        finally:
            package_logger.removeHandler(handler)
            for name, level in levels.items():
                logging.getLogger(name).setLevel(level)

    def test_repeated_setup_reuses_handler(self):
        """Calling setup twice should not duplicate console output."""
        package_logger = logging.getLogger("posesmooth")
        names = ("posesmooth", "posesmooth.core", "posesmooth.config")
        levels = {name: logging.getLogger(name).level for name in names}
        handlers = list(package_logger.handlers)

        try:
            first = setup_logging(logging.INFO)
            second = setup_logging(logging.DEBUG)

            assert first is second
            assert len(package_logger.handlers) == len(handlers) + 1
            assert second.level == logging.DEBUG
        finally:
            package_logger.handlers[:] = handlers
            for name, level in levels.items():
                logging.getLogger(name).setLevel(level)
