"""
Pose smoothing controller.

Turns per-tick tracker readings of one tracked target into the smoothed
transform handed to the renderer:
- acquisition / loss state machine
- snap to the raw pose on (re)acquisition
- configuration snapshot per tick
- non-smoothed overscan or blended scale (per ScalePolicy)
"""

from enum import Enum, auto
from typing import Dict, Hashable, Iterable, Optional, Union
import logging
import math

import numpy as np

from posesmooth.config.settings import FilterConfig, Settings
from posesmooth.core.pose_filter import PoseFilter, create_pose_filter
from posesmooth.data.pose import RawPoseSample, SmoothedPose

logger = logging.getLogger(__name__)

DEFAULT_NOMINAL_DT = 1.0 / 60.0

ConfigSource = Union[FilterConfig, Settings]


class ControllerState(Enum):
    """Tracking state of a controller."""
    UNINITIALIZED = auto()
    TRACKING = auto()
    LOST = auto()


class PoseSmoothingController:
    """
    Smooths the pose of one tracked target.

    State machine:
        UNINITIALIZED --acquire--> TRACKING
        TRACKING --tick(dt > 0)--> TRACKING
        TRACKING --lose--> LOST
        LOST --acquire--> TRACKING

    The controller owns its filters and its SmoothedPose; each tracked
    target needs its own controller. tick() must not run concurrently for
    the same controller. Configuration is read once at the start of every
    tick, from a Settings store (live tuning) or a fixed FilterConfig.
    """

    def __init__(
        self,
        config: Optional[ConfigSource] = None,
        target_id: Optional[Hashable] = None,
    ):
        """
        Initialize the controller.

        Args:
            config: Settings store or fixed configuration (default FilterConfig())
            target_id: Identifier of the tracked target, used in log messages
        """
        self.target_id = target_id
        self.set_config(config if config is not None else FilterConfig())

        initial = self._read_config()
        self._filter: PoseFilter = create_pose_filter(initial.variant, initial)
        self._pose = SmoothedPose()
        self._state = ControllerState.UNINITIALIZED
        self._snap_pending = False
        self._bypassing = False

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def snap_pending(self) -> bool:
        return self._snap_pending

    @property
    def visible(self) -> bool:
        return self._pose.visible

    @property
    def pose(self) -> SmoothedPose:
        """The smoothed pose, updated in place by tick()."""
        return self._pose

    @property
    def pose_filter(self) -> PoseFilter:
        return self._filter

    def set_config(self, config: ConfigSource):
        """Switch the configuration source; takes effect on the next tick."""
        if isinstance(config, FilterConfig):
            config = config.clamped()
        self._source = config

    def _read_config(self) -> FilterConfig:
        if isinstance(self._source, Settings):
            return self._source.snapshot()
        return self._source

    def on_acquire(self):
        """Target found: reset filters and snap to the next sample."""
        self._filter.reset()
        self._snap_pending = True
        self._bypassing = False
        self._pose.visible = True

        logger.info("Target %s acquired (was %s)", self.target_id, self._state.name)
        self._state = ControllerState.TRACKING

    def on_lose(self):
        """Target lost: freeze the pose and hide it until the next acquire."""
        if self._state is not ControllerState.TRACKING:
            logger.debug("Ignoring loss of target %s in state %s", self.target_id, self._state.name)
            return

        self._pose.visible = False
        self._state = ControllerState.LOST
        logger.info("Target %s lost", self.target_id)

    def tick(self, raw: RawPoseSample, dt_seconds: float) -> bool:
        """
        Advance the smoothed pose by one frame.

        Args:
            raw: Tracker reading for this frame
            dt_seconds: Time since the previous frame

        Returns:
            True if the pose was updated. Ticks outside TRACKING and ticks
            with a non-positive or non-finite dt leave the pose unchanged.
        """
        if self._state is not ControllerState.TRACKING:
            return False

        if not (dt_seconds > 0.0) or not math.isfinite(dt_seconds):
            logger.debug("Skipping tick for target %s: dt=%r", self.target_id, dt_seconds)
            return False

        config = self._read_config()

        if config.variant is not self._filter.variant:
            logger.info(
                "Target %s switching filter %s -> %s",
                self.target_id, self._filter.variant.name, config.variant.name,
            )
            self._filter = create_pose_filter(config.variant, config)

        if self._snap_pending:
            self._pose.set_from(raw, config.overscan)
            self._snap_pending = False
            return True

        if not config.smoothing_enabled:
            if not self._bypassing:
                # Stale history must not leak back in when smoothing resumes
                self._filter.reset()
                self._bypassing = True
            self._pose.set_from(raw, config.overscan)
            return True

        self._bypassing = False
        self._filter.apply(raw, dt_seconds, config, self._pose)
        return True


class PoseSmootherBank:
    """
    Pose smoothing for several tracked targets.

    Keeps one PoseSmoothingController per registered target. Controllers
    share the configuration source, never filter state.
    """

    def __init__(
        self,
        config: Optional[ConfigSource] = None,
        nominal_dt: float = DEFAULT_NOMINAL_DT,
    ):
        """
        Args:
            config: Settings store or fixed configuration shared by all targets
            nominal_dt: Frame interval assumed for the first sample after an
                acquire when tick() derives dt from timestamps
        """
        self.config = config if config is not None else FilterConfig()
        self.nominal_dt = nominal_dt

        self._controllers: Dict[Hashable, PoseSmoothingController] = {}
        self._last_timestamps: Dict[Hashable, Optional[float]] = {}

    def __contains__(self, target_id: Hashable) -> bool:
        return target_id in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

    def register(self, target_id: Hashable) -> PoseSmoothingController:
        """Create the controller for a target (returns the existing one if registered)."""
        if target_id not in self._controllers:
            self._controllers[target_id] = PoseSmoothingController(self.config, target_id)
            self._last_timestamps[target_id] = None
            logger.debug("Registered target %s", target_id)
        return self._controllers[target_id]

    def deregister(self, target_id: Hashable):
        """Destroy a target's controller and filter state."""
        del self._controllers[target_id]
        del self._last_timestamps[target_id]
        logger.debug("Deregistered target %s", target_id)

    def get(self, target_id: Hashable) -> PoseSmoothingController:
        """Controller of a registered target."""
        return self._controllers[target_id]

    def acquire(self, target_id: Hashable):
        self._controllers[target_id].on_acquire()
        self._last_timestamps[target_id] = None

    def lose(self, target_id: Hashable):
        self._controllers[target_id].on_lose()

    def tick(
        self,
        target_id: Hashable,
        raw: RawPoseSample,
        dt_seconds: Optional[float] = None,
    ) -> bool:
        """
        Tick one target.

        When dt_seconds is None it is the difference to the timestamp of
        the last sample that updated this target.
        """
        controller = self._controllers[target_id]

        if dt_seconds is None:
            last = self._last_timestamps[target_id]
            dt_seconds = self.nominal_dt if last is None else raw.timestamp - last

        updated = controller.tick(raw, dt_seconds)
        if updated:
            self._last_timestamps[target_id] = raw.timestamp
        return updated

    def poses(self) -> Dict[Hashable, SmoothedPose]:
        """Current smoothed pose of every registered target."""
        return {target_id: c.pose for target_id, c in self._controllers.items()}


def smooth_sequence(
    samples: Iterable[RawPoseSample],
    config: Optional[ConfigSource] = None,
    nominal_dt: float = DEFAULT_NOMINAL_DT,
) -> Dict[str, np.ndarray]:
    """
    Smooth a recorded sequence of samples offline.

    A fresh controller is acquired before the first sample; dt comes from
    the sample timestamps (nominal_dt for the first one).

    Args:
        samples: Tracker readings in capture order
        config: Settings store or fixed configuration
        nominal_dt: Interval assumed before the first sample

    Returns:
        Dictionary with 'position' (N, 3), 'orientation' (N, 4),
        'scale' (N, 3) and 'updated' (N,) arrays
    """
    samples = list(samples)
    n = len(samples)

    bank = PoseSmootherBank(config, nominal_dt=nominal_dt)
    controller = bank.register(0)
    bank.acquire(0)

    result = {
        "position": np.zeros((n, 3)),
        "orientation": np.zeros((n, 4)),
        "scale": np.zeros((n, 3)),
        "updated": np.zeros(n, dtype=bool),
    }

    for i, sample in enumerate(samples):
        result["updated"][i] = bank.tick(0, sample)
        pose = controller.pose
        result["position"][i] = pose.position
        result["orientation"][i] = pose.orientation
        result["scale"][i] = pose.scale

    return result
