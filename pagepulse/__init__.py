"""PagePulse: behavioral signals (heatmaps, rage/dead clicks, error groups, trends, alerts) from web analytics telemetry."""

__version__ = "0.1.0"
