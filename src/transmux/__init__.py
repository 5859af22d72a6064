"""transmux: build and run multi-step ffmpeg conversions from user preferences."""

__version__ = "0.1.0"
