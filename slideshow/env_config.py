"""Centralized directory configuration for the slideshow service.

This module provides:
- Single source of truth for where project data, uploads and videos live
- Environment variable overrides for container deployments

Usage:
    from slideshow.env_config import DEFAULT_STORAGE_DIR, DEFAULT_LEDGER_DIR
"""

import os
from pathlib import Path


# =============================================================================
# DIRECTORY CONFIGURATION
# =============================================================================

# Repo root directory
_REPO_ROOT = Path(__file__).resolve().parent.parent

# Base directory for all service data (sibling to repo, not inside it)
DEFAULT_DATA_DIR = Path(os.environ.get(
    "SLIDESHOW_DATA_DIR",
    str(_REPO_ROOT.parent / "slideshow_data")
))

# Artifact store root: uploaded images, generated videos, staging areas
DEFAULT_STORAGE_DIR = Path(os.environ.get(
    "SLIDESHOW_STORAGE_DIR",
    str(DEFAULT_DATA_DIR / "storage")
))

# Ledger root: project and image records
DEFAULT_LEDGER_DIR = Path(os.environ.get(
    "SLIDESHOW_LEDGER_DIR",
    str(DEFAULT_DATA_DIR / "ledger")
))

# Explicit ffmpeg/ffprobe binaries (otherwise looked up on PATH)
FFMPEG_BINARY = os.environ.get("SLIDESHOW_FFMPEG") or None
FFPROBE_BINARY = os.environ.get("SLIDESHOW_FFPROBE") or None


# =============================================================================
# STORE LAYOUT
# =============================================================================

# Store-relative directories
UPLOADS_SUBDIR = "uploads/images"
VIDEOS_SUBDIR = "videos"
STAGING_SUBDIR = "staging"
