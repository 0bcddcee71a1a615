"""
Recorded pose traces.

A trace is a JSON document listing tracker readings in capture order:

    {"frames": [{"timestamp": 0.0, "position": [x, y, z],
                 "orientation": [w, x, y, z], "scale": [sx, sy, sz],
                 "visible": true}, ...]}

A bare list of frames is accepted too. "scale" defaults to ones and
"visible" to true; a frame with "visible": false marks a tracking loss and
needs no pose.
"""

import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from posesmooth.data.pose import RawPoseSample


@dataclass
class TraceFrame:
    """One entry of a recorded trace."""
    timestamp: float
    sample: Optional[RawPoseSample]  # None while the target is not visible

    @property
    def visible(self) -> bool:
        return self.sample is not None


def _parse_frame(index: int, entry: dict) -> TraceFrame:
    if not isinstance(entry, dict):
        raise ValueError(f"Frame {index}: expected an object, got {type(entry).__name__}")

    try:
        timestamp = float(entry["timestamp"])
        if not entry.get("visible", True):
            return TraceFrame(timestamp, None)

        sample = RawPoseSample(
            position=entry["position"],
            orientation=entry["orientation"],
            scale=entry.get("scale", (1.0, 1.0, 1.0)),
            timestamp=timestamp,
        )
    except KeyError as e:
        raise ValueError(f"Frame {index}: missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Frame {index}: {e}") from e

    return TraceFrame(timestamp, sample)


def load_trace(path: Path) -> List[TraceFrame]:
    """
    Load a recorded trace.

    Args:
        path: JSON trace file

    Returns:
        Frames in file order

    Raises:
        ValueError: If the document or one of its frames is malformed
    """
    with open(path, "r") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("frames")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of frames")

    return [_parse_frame(i, entry) for i, entry in enumerate(data)]


def export_json(results: List[dict], output_path: Path):
    """
    Export smoothed frames to JSON format.

    Args:
        results: Rows produced by smooth_trace()
        output_path: Output JSON file path
    """
    data = {
        "version": "1.0",
        "num_frames": len(results),
        "frames": results,
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)


def export_csv(results: List[dict], output_path: Path):
    """
    Export smoothed frames to CSV format.

    Format: frame, timestamp, tracked, updated, visible, px, py, pz,
    qw, qx, qy, qz, sx, sy, sz
    """
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)

        writer.writerow([
            "frame", "timestamp", "tracked", "updated", "visible",
            "px", "py", "pz", "qw", "qx", "qy", "qz", "sx", "sy", "sz",
        ])

        for row in results:
            writer.writerow([
                row["frame"],
                row["timestamp"],
                int(row["tracked"]),
                int(row["updated"]),
                int(row["visible"]),
                *row["position"],
                *row["orientation"],
                *row["scale"],
            ])
