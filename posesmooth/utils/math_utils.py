"""
Mathematical utilities for pose smoothing.

Provides functions for:
- Vector normalization
- Quaternion operations (all quaternions are [w, x, y, z])
- Rotation conversions (quaternion, matrix)
- Rigid transform composition and decomposition
"""

from typing import Optional, Tuple

import numpy as np

# Norm deviation tolerated before a quaternion is renormalized
NORM_EPSILON = 1e-9

# Above this |dot| the two quaternions are treated as nearly parallel
SLERP_LINEAR_THRESHOLD = 0.9995


def normalize_vector(v: np.ndarray) -> np.ndarray:
    """
    Normalize a vector to unit length.

    Args:
        v: Input vector

    Returns:
        Normalized vector (or zero vector if input is zero)
    """
    norm = np.linalg.norm(v)
    if norm < 1e-10:
        return np.zeros_like(v)
    return v / norm


def renormalize_quaternion(q: np.ndarray) -> np.ndarray:
    """
    Rescale a quaternion in place if its norm drifted away from 1.

    Quaternions already within NORM_EPSILON of unit length are left
    untouched so that exact values survive.

    Args:
        q: Quaternion [w, x, y, z], modified in place

    Returns:
        The same array
    """
    norm = float(np.sqrt(np.dot(q, q)))
    if norm < 1e-12:
        q[:] = (1.0, 0.0, 0.0, 0.0)
    elif abs(norm - 1.0) > NORM_EPSILON:
        q /= norm
    return q


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a scalar into [low, high]."""
    return max(low, min(high, value))


def quaternion_angle(q1: np.ndarray, q2: np.ndarray) -> float:
    """
    Shortest-arc rotation angle between two unit quaternions.

    The dot product is clamped before arccos since rounding can push it
    slightly outside [-1, 1].

    Args:
        q1: First quaternion [w, x, y, z]
        q2: Second quaternion [w, x, y, z]

    Returns:
        Angle in radians, in [0, pi]
    """
    dot = abs(float(np.dot(q1, q2)))
    return 2.0 * float(np.arccos(clamp(dot, -1.0, 1.0)))


def slerp(
    q1: np.ndarray,
    q2: np.ndarray,
    t: float,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Spherical linear interpolation between quaternions.

    Args:
        q1: Start quaternion [w, x, y, z]
        q2: End quaternion [w, x, y, z]
        t: Interpolation factor [0, 1]
        out: Optional array receiving the result (may alias q1)

    Returns:
        Interpolated unit quaternion
    """
    if out is None:
        out = np.empty(4, dtype=np.float64)

    if t <= 0.0 or np.array_equal(q1, q2):
        out[:] = q1
        return renormalize_quaternion(out)

    dot = float(np.dot(q1, q2))

    # Negate the end point to stay on the shorter arc
    sign = 1.0
    if dot < 0.0:
        sign = -1.0
        dot = -dot

    if t >= 1.0:
        np.multiply(q2, sign, out=out)
        return renormalize_quaternion(out)

    # If very close, use linear interpolation
    if dot > SLERP_LINEAR_THRESHOLD:
        w1 = 1.0 - t
        w2 = t * sign
    else:
        theta_0 = float(np.arccos(clamp(dot, -1.0, 1.0)))
        sin_theta_0 = float(np.sin(theta_0))
        w1 = float(np.sin((1.0 - t) * theta_0)) / sin_theta_0
        w2 = float(np.sin(t * theta_0)) / sin_theta_0 * sign

    # q1 is read completely before out is written, so out may alias q1
    a0, a1, a2, a3 = q1
    b0, b1, b2, b3 = q2
    out[0] = w1 * a0 + w2 * b0
    out[1] = w1 * a1 + w2 * b1
    out[2] = w1 * a2 + w2 * b2
    out[3] = w1 * a3 + w2 * b3
    return renormalize_quaternion(out)


def quaternion_to_rotation_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert quaternion to rotation matrix.

    Args:
        q: Quaternion [w, x, y, z]

    Returns:
        3x3 rotation matrix
    """
    q = q / np.linalg.norm(q)
    w, x, y, z = q

    return np.array([
        [1 - 2*(y*y + z*z), 2*(x*y - w*z), 2*(x*z + w*y)],
        [2*(x*y + w*z), 1 - 2*(x*x + z*z), 2*(y*z - w*x)],
        [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x*x + y*y)]
    ])


def rotation_matrix_to_quaternion(R: np.ndarray) -> np.ndarray:
    """
    Convert rotation matrix to quaternion.

    Args:
        R: 3x3 rotation matrix

    Returns:
        Quaternion [w, x, y, z] with w >= 0
    """
    trace = R[0, 0] + R[1, 1] + R[2, 2]

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (R[2, 1] - R[1, 2]) * s
        y = (R[0, 2] - R[2, 0]) * s
        z = (R[1, 0] - R[0, 1]) * s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
        w = (R[2, 1] - R[1, 2]) / s
        x = 0.25 * s
        y = (R[0, 1] + R[1, 0]) / s
        z = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
        w = (R[0, 2] - R[2, 0]) / s
        x = (R[0, 1] + R[1, 0]) / s
        y = 0.25 * s
        z = (R[1, 2] + R[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
        w = (R[1, 0] - R[0, 1]) / s
        x = (R[0, 2] + R[2, 0]) / s
        y = (R[1, 2] + R[2, 1]) / s
        z = 0.25 * s

    q = np.array([w, x, y, z])
    if q[0] < 0:
        q = -q
    return q / np.linalg.norm(q)


def axis_angle_to_quaternion(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Build a quaternion rotating by angle (radians) about axis.

    Args:
        axis: Rotation axis (need not be normalized)
        angle: Rotation angle in radians

    Returns:
        Quaternion [w, x, y, z]
    """
    axis = normalize_vector(np.asarray(axis, dtype=np.float64))
    half = angle / 2.0
    return np.concatenate([[np.cos(half)], axis * np.sin(half)])


def compose_transform(
    position: np.ndarray,
    orientation: np.ndarray,
    scale: np.ndarray
) -> np.ndarray:
    """
    Compose a 4x4 transform from translation, rotation and scale.

    Args:
        position: 3D translation
        orientation: Quaternion [w, x, y, z]
        scale: Per-axis scale

    Returns:
        4x4 homogeneous matrix (T * R * S)
    """
    matrix = np.eye(4)
    matrix[:3, :3] = quaternion_to_rotation_matrix(orientation) * scale
    matrix[:3, 3] = position
    return matrix


def decompose_transform(
    matrix: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split a 4x4 transform into translation, rotation and scale.

    A negative determinant is folded into the x scale so the rotation part
    stays proper.

    Args:
        matrix: 4x4 homogeneous matrix without shear

    Returns:
        Tuple of (position, orientation quaternion, scale)
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    basis = matrix[:3, :3]

    scale = np.linalg.norm(basis, axis=0)
    if np.linalg.det(basis) < 0:
        scale[0] = -scale[0]

    safe_scale = np.where(np.abs(scale) < 1e-12, 1.0, scale)
    rotation = basis / safe_scale

    return matrix[:3, 3].copy(), rotation_matrix_to_quaternion(rotation), scale
