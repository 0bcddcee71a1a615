"""
Pose data structures and recorded traces.
"""

from posesmooth.data.pose import RawPoseSample, SmoothedPose
from posesmooth.data.trace import TraceFrame, load_trace, export_json, export_csv

__all__ = [
    "RawPoseSample",
    "SmoothedPose",
    "TraceFrame",
    "load_trace",
    "export_json",
    "export_csv",
]
