"""
photobooker - Compose photographs into a chronological PDF

A pipeline for:
1. Reading capture timestamps from EXIF metadata
2. Ordering photos chronologically
3. Rotating landscape shots to portrait, converting to grayscale and
   resampling to 1275x1650 (8.5x11" at 150 dpi)
4. Placing one photo per US Letter page in a single PDF
"""

__version__ = "1.0.0"
__author__ = "photobooker"

from .config import BookerConfig
from .pipeline import PhotoBookPipeline, PipelineResult

__all__ = ["BookerConfig", "PhotoBookPipeline", "PipelineResult"]
