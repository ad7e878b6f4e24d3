"""
Tracking package.

Public API:
- ShiftTracker / ShiftState: session + dwell bookkeeping from GPS samples
- LocationReporter: anonymous location pings to the analytics backend
"""
from .location_reporter import LocationReportError, LocationReporter
from .shift import ShiftState, ShiftTracker

__all__ = [
    "LocationReportError",
    "LocationReporter",
    "ShiftState",
    "ShiftTracker",
]
