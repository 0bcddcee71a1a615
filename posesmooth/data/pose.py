"""
Pose data exchanged with the tracking and rendering collaborators.

- RawPoseSample: one tracker reading, immutable once produced
- SmoothedPose: the rendered transform, updated in place once per tick
"""

from dataclasses import dataclass, field

import numpy as np

from posesmooth.utils.math_utils import compose_transform, decompose_transform


def _vector(value, size: int) -> np.ndarray:
    array = np.array(value, dtype=np.float64).reshape(size)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class RawPoseSample:
    """
    A single tracker reading.

    Arrays are converted to read-only float64 copies so a sample cannot be
    changed after it was handed to a controller.
    """

    position: np.ndarray
    orientation: np.ndarray  # [w, x, y, z]
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    timestamp: float = 0.0  # seconds, monotonic

    def __post_init__(self):
        object.__setattr__(self, "position", _vector(self.position, 3))
        object.__setattr__(self, "orientation", _vector(self.orientation, 4))
        object.__setattr__(self, "scale", _vector(self.scale, 3))
        object.__setattr__(self, "timestamp", float(self.timestamp))

    @classmethod
    def from_matrix(cls, matrix: np.ndarray, timestamp: float = 0.0) -> "RawPoseSample":
        """Decompose a 4x4 world matrix of the tracked anchor."""
        position, orientation, scale = decompose_transform(matrix)
        return cls(position, orientation, scale, timestamp)


@dataclass(eq=False)
class SmoothedPose:
    """
    The transform handed to the renderer.

    The arrays are allocated once and overwritten in place by the owning
    controller; consumers that keep a pose across ticks should copy() it.
    """

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    visible: bool = False

    def set_from(self, sample: RawPoseSample, overscan: float = 1.0):
        """Copy a raw sample verbatim, applying overscan to the scale."""
        np.copyto(self.position, sample.position)
        np.copyto(self.orientation, sample.orientation)
        np.multiply(sample.scale, overscan, out=self.scale)

    def copy(self) -> "SmoothedPose":
        """Detached copy of the current values."""
        return SmoothedPose(
            position=self.position.copy(),
            orientation=self.orientation.copy(),
            scale=self.scale.copy(),
            visible=self.visible,
        )

    def to_matrix(self) -> np.ndarray:
        """Compose the 4x4 transform (T * R * S)."""
        return compose_transform(self.position, self.orientation, self.scale)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "position": self.position.tolist(),
            "orientation": self.orientation.tolist(),
            "scale": self.scale.tolist(),
            "visible": self.visible,
        }
