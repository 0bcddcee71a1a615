"""Utility modules for posesmooth."""

from posesmooth.utils.math_utils import (
    normalize_vector,
    renormalize_quaternion,
    clamp,
    quaternion_angle,
    slerp,
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
    axis_angle_to_quaternion,
    compose_transform,
    decompose_transform,
)
from posesmooth.utils.logging_utils import setup_logging

__all__ = [
    "normalize_vector",
    "renormalize_quaternion",
    "clamp",
    "quaternion_angle",
    "slerp",
    "quaternion_to_rotation_matrix",
    "rotation_matrix_to_quaternion",
    "axis_angle_to_quaternion",
    "compose_transform",
    "decompose_transform",
    "setup_logging",
]
