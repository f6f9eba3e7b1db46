# ==============================================================================
# Application Services
# ==============================================================================
"""
Services composing the core detectors with the repository ports.
"""

from pagepulse.services.heatmap import HeatmapService, RegenerationResult

__all__ = [
    "HeatmapService",
    "RegenerationResult",
]
