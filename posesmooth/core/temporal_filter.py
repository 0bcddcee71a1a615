"""
Adaptive low-pass filters for tracked poses.

Building blocks, leaves first:
- LowPassFilter: single-channel exponential smoothing with a cutoff frequency
- OneEuroFilter: LowPassFilter whose cutoff follows the estimated signal rate
- VectorFilter: three independent One-Euro channels for a 3D position
- OrientationFilter: adaptive slerp smoothing of a unit quaternion stream

Reference:
Casiez, G., Roussel, N., & Vogel, D. (2012).
1€ Filter: A Simple Speed-based Low-pass Filter for Noisy Input in Interactive Systems.
CHI '12.

Tuning (Casiez): set beta=0 and lower min_cutoff until slow motion stops
jittering, then raise beta until fast motion stops lagging.
"""

from typing import Optional, Union

import numpy as np

from posesmooth.utils.math_utils import (
    clamp,
    quaternion_angle,
    renormalize_quaternion,
    slerp,
)

TWO_PI = 2.0 * np.pi


def smoothing_factor(dt: float, cutoff: float) -> float:
    """
    Exponential smoothing factor for a sample interval and cutoff.

    a = dt / (dt + tau) with tau = 1 / (2*pi*cutoff). Tends to 1 (trust the
    new sample) for large dt or cutoff and to 0 (trust history) as the
    cutoff goes to 0.

    Args:
        dt: Time since the previous sample in seconds (> 0)
        cutoff: Cutoff frequency in Hz (> 0)

    Returns:
        Smoothing factor in (0, 1)
    """
    tau = 1.0 / (TWO_PI * cutoff)
    return dt / (dt + tau)


def adaptive_cutoff(min_cutoff: float, beta: float, rate: float) -> float:
    """Cutoff frequency raised in proportion to the signal rate."""
    return min_cutoff + beta * abs(rate)


def compute_adaptive_alpha(
    linear_speed: float,
    angular_speed: float,
    alpha_min: float,
    alpha_max: float,
) -> float:
    """
    Blend factor for lerp/slerp following, driven by motion speed.

    Linear and angular speed are combined into one motion intensity; faster
    motion moves alpha toward alpha_max (less smoothing, more response).

    Args:
        linear_speed: Linear velocity magnitude (units/s)
        angular_speed: Angular velocity magnitude (rad/s)
        alpha_min: Blend factor when at rest
        alpha_max: Blend factor at or above full speed

    Returns:
        Alpha clamped between alpha_min and alpha_max
    """
    combined_speed = float(np.hypot(linear_speed, angular_speed))
    alpha = alpha_min + (alpha_max - alpha_min) * min(1.0, combined_speed * 2.0)
    return clamp(alpha, alpha_min, alpha_max)


class LowPassFilter:
    """
    First-order low-pass filter over one scalar channel.

    The first sample after construction or reset() is returned unchanged
    and becomes the filter state.
    """

    def __init__(self):
        self._last_value = 0.0
        self._initialized = False
        self.last_alpha = 1.0

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def last_value(self) -> float:
        return self._last_value

    def filter(self, value: float, cutoff: float, dt: float) -> float:
        """
        Filter one sample.

        Callers guarantee cutoff > 0 and dt > 0.
        """
        if not self._initialized:
            self._last_value = value
            self._initialized = True
            self.last_alpha = 1.0
            return value

        a = smoothing_factor(dt, cutoff)
        # Incremental form keeps a constant input an exact fixed point
        self._last_value = self._last_value + a * (value - self._last_value)
        self.last_alpha = a
        return self._last_value

    def reset(self):
        """Reset filter state."""
        self._last_value = 0.0
        self._initialized = False
        self.last_alpha = 1.0


class OneEuroFilter:
    """
    One Euro Filter - an adaptive low-pass filter over one scalar channel.

    The rate of change is estimated from consecutive raw samples, smoothed
    by a second low-pass filter at d_cutoff, and raises the value filter's
    cutoff: smooth results for slow movement, little lag for quick movement.

    Attributes:
        min_cutoff: Minimum cutoff frequency (lower = more smoothing)
        beta: Speed coefficient (higher = less lag during fast movement)
        d_cutoff: Cutoff frequency for derivative calculation
    """

    def __init__(
        self,
        min_cutoff: float = 1.0,
        beta: float = 0.0,
        d_cutoff: float = 1.0,
    ):
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff

        self._x = LowPassFilter()
        self._dx = LowPassFilter()
        self._prev_raw = 0.0
        self.last_cutoff = min_cutoff

    @property
    def last_alpha(self) -> float:
        """Smoothing factor applied to the most recent sample."""
        return self._x.last_alpha

    def filter(self, value: float, dt: float) -> float:
        """Apply One Euro Filter to a value sampled dt seconds after the last."""
        if not self._x.initialized:
            # First call - no filtering, derivative starts at rest
            self._prev_raw = value
            self._dx.filter(0.0, self.d_cutoff, dt)
            self.last_cutoff = self.min_cutoff
            return self._x.filter(value, self.min_cutoff, dt)

        # Calculate derivative
        rate = (value - self._prev_raw) / dt
        rate_hat = self._dx.filter(rate, self.d_cutoff, dt)
        self._prev_raw = value

        # Calculate cutoff frequency based on speed
        self.last_cutoff = adaptive_cutoff(self.min_cutoff, self.beta, rate_hat)

        return self._x.filter(value, self.last_cutoff, dt)

    def reset(self):
        """Reset filter state."""
        self._x.reset()
        self._dx.reset()
        self._prev_raw = 0.0
        self.last_cutoff = self.min_cutoff

    def filter_batch(
        self,
        values: np.ndarray,
        dt: Union[float, np.ndarray],
    ) -> np.ndarray:
        """
        Apply filter to a batch of values.

        Args:
            values: 1D sequence of samples
            dt: Sample interval, scalar or one per sample

        Returns:
            Filtered values with same shape as input
        """
        self.reset()
        values = np.asarray(values, dtype=np.float64)
        dts = np.broadcast_to(np.asarray(dt, dtype=np.float64), values.shape)
        result = np.zeros_like(values)

        for i in range(len(values)):
            result[i] = self.filter(float(values[i]), float(dts[i]))

        return result


class VectorFilter:
    """
    One-Euro filtering of a 3D position.

    Each axis has its own filter and its own rate estimate; axes are not
    coupled.
    """

    def __init__(
        self,
        min_cutoff: float = 1.0,
        beta: float = 0.0,
        d_cutoff: float = 1.0,
    ):
        self._axes = [OneEuroFilter(min_cutoff, beta, d_cutoff) for _ in range(3)]
        self._out = np.zeros(3)
        self.alphas = np.ones(3)

    def configure(self, min_cutoff: float, beta: float, d_cutoff: float):
        """Apply new tuning parameters without touching filter state."""
        for axis in self._axes:
            axis.min_cutoff = min_cutoff
            axis.beta = beta
            axis.d_cutoff = d_cutoff

    def filter(
        self,
        raw: np.ndarray,
        dt: float,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Filter one position sample.

        Args:
            raw: Position (x, y, z)
            dt: Seconds since the previous sample (> 0)
            out: Optional array receiving the result

        Returns:
            Filtered position (out, or an internal buffer reused every call)
        """
        if out is None:
            out = self._out

        for i, axis in enumerate(self._axes):
            out[i] = axis.filter(float(raw[i]), dt)
            self.alphas[i] = axis.last_alpha

        return out

    def reset(self):
        """Reset all axis filters."""
        for axis in self._axes:
            axis.reset()
        self.alphas[:] = 1.0


class OrientationFilter:
    """
    Adaptive smoothing of unit quaternions by spherical interpolation.

    The angular rate between the running estimate and the new sample sets
    the cutoff the same way OneEuroFilter does for scalars; the estimate
    then slerps toward the sample by the resulting factor. Quaternions are
    never decomposed into Euler angles.
    """

    def __init__(
        self,
        min_cutoff: float = 1.0,
        beta: float = 0.0,
        simplified: bool = False,
    ):
        """
        Args:
            min_cutoff: Minimum cutoff frequency
            beta: Angular speed coefficient
            simplified: Use a = clamp(cutoff * dt, 0, 1) instead of the
                low-pass smoothing factor
        """
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.simplified = simplified

        self._q = np.array([1.0, 0.0, 0.0, 0.0])
        self._out = np.zeros(4)
        self._initialized = False
        self.last_alpha = 1.0

    @property
    def initialized(self) -> bool:
        return self._initialized

    def configure(self, min_cutoff: float, beta: float):
        """Apply new tuning parameters without touching filter state."""
        self.min_cutoff = min_cutoff
        self.beta = beta

    def filter(
        self,
        raw: np.ndarray,
        dt: float,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Filter one orientation sample.

        Args:
            raw: Unit quaternion [w, x, y, z]
            dt: Seconds since the previous sample (> 0)
            out: Optional array receiving the result

        Returns:
            Filtered unit quaternion
        """
        if out is None:
            out = self._out

        if not self._initialized:
            self._q[:] = raw
            renormalize_quaternion(self._q)
            self._initialized = True
            self.last_alpha = 1.0
            out[:] = self._q
            return out

        angular_rate = quaternion_angle(self._q, raw) / dt
        cutoff = adaptive_cutoff(self.min_cutoff, self.beta, angular_rate)

        if self.simplified:
            a = clamp(cutoff * dt, 0.0, 1.0)
        else:
            a = smoothing_factor(dt, cutoff)

        slerp(self._q, raw, a, out=self._q)
        self.last_alpha = a
        out[:] = self._q
        return out

    def reset(self):
        """Reset filter state."""
        self._q[:] = (1.0, 0.0, 0.0, 0.0)
        self._initialized = False
        self.last_alpha = 1.0
