"""Building blocks for collecting, matching, counting and forwarding scan data."""

__version__ = "0.1.0"