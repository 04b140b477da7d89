"""RetroSnap credit-metering gateway."""

__version__ = "1.0.0"
