"""
Configuration & Global Constants
================================
This module serves as the central registry for the layout constants shared by
the model, the controller and the view.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (size bounds, color ranges, handle
   widths) scattered throughout the code.
2. Tuning: The log level can be overridden from the environment without
   touching the code.

Exports:
    FULL_SIZE (float): Total share of a parent's extent (percent).
    MIN_SIZE, MAX_SIZE (float): Allowed share of one of two siblings.
    SIZE_TOLERANCE (float): Tolerance used when checking the size sum.
    LOG_LEVEL (int): Logging level for the application.
"""
import logging
import os

# --- Partition sizes (percent of the parent's extent) ---
FULL_SIZE: float = 100.0
MIN_SIZE: float = 10.0
MAX_SIZE: float = 90.0
SIZE_TOLERANCE: float = 1e-6

# --- Color sampling (HSL) ---
HUE_RANGE: tuple[int, int] = (0, 360)
SATURATION_RANGE: tuple[float, float] = (70.0, 100.0)
LIGHTNESS_RANGE: tuple[float, float] = (40.0, 60.0)
COLOR_MAX_ATTEMPTS: int = 1000

# --- Renderer metrics (pixels) ---
HANDLE_THICKNESS: int = 4
BUTTON_WIDTH: int = 28
BUTTON_HEIGHT: int = 20
BUTTON_SPACING: int = 6
BORDER_COLOR: str = "#000000"
HANDLE_HOVER_COLOR: str = "#9CA3AF"


def _log_level_from_env(default: int = logging.INFO) -> int:
    """Resolve PARTITIONLAYOUT_LOG_LEVEL (name or number) to a logging level."""
    raw = os.environ.get("PARTITIONLAYOUT_LOG_LEVEL", "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level
    print(f"WARNING: Unknown log level '{raw}', falling back to {logging.getLevelName(default)}")
    return default


LOG_LEVEL: int = _log_level_from_env()
