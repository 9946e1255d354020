from monitor.delta import CacheDetector, CursorDetector, Detector, delta
from monitor.factory import create_monitor
from monitor.poller import Monitor

__all__ = [
    "CacheDetector",
    "CursorDetector",
    "Detector",
    "Monitor",
    "create_monitor",
    "delta",
]
