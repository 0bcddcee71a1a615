"""
Offline smoothing of recorded traces with tracking gaps.
"""

from typing import Iterable, List, Optional

from rich.progress import track

from posesmooth.core.pose_smoother import DEFAULT_NOMINAL_DT, ConfigSource, PoseSmootherBank
from posesmooth.data.trace import TraceFrame


def smooth_trace(
    frames: Iterable[TraceFrame],
    config: Optional[ConfigSource] = None,
    nominal_dt: float = DEFAULT_NOMINAL_DT,
    show_progress: bool = False,
) -> List[dict]:
    """
    Replay a trace through a pose-smoothing controller.

    A visible frame after an invisible one (or at the start) acquires the
    target and snaps; an invisible frame loses it and the pose freezes.

    Args:
        frames: Trace frames in capture order
        config: Settings store or fixed configuration
        nominal_dt: Interval assumed for the first frame after an acquire
        show_progress: Show a progress bar on the console

    Returns:
        One row per frame with the rendered pose after that frame
    """
    frames = list(frames)
    bank = PoseSmootherBank(config, nominal_dt=nominal_dt)
    controller = bank.register(0)

    iterator = track(frames, description="Smoothing...") if show_progress else frames

    results = []
    for i, frame in enumerate(iterator):
        updated = False
        if frame.visible:
            if not controller.visible:
                bank.acquire(0)
            updated = bank.tick(0, frame.sample)
        elif controller.visible:
            bank.lose(0)

        row = {
            "frame": i,
            "timestamp": frame.timestamp,
            "tracked": frame.visible,
            "updated": updated,
        }
        row.update(controller.pose.to_dict())
        results.append(row)

    return results
