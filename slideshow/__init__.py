"""Slideshow video service.

Assembles an ordered set of still images into a single video:
- Projects with per-image duration and output frame rate
- Base64 image upload with explicit ordering
- ffmpeg-driven generation with tracked status (pending → processing →
  completed | failed)

Usage:
    python -m slideshow serve
    python -m slideshow generate <project_id>
"""

__version__ = "1.0.0"
