"""
Color Allocation
================
Hands out random HSL colors that are unique among the live partitions.

Colors are drawn by rejection sampling from a continuous HSL region
(hue over the full circle, saturated and mid-light) so that neighbouring
cells stay visually distinct. The allocator keeps a reference count per
color: a child that inherits its parent's color shares the value until one
of them is removed.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import itertools
import logging
from typing import Optional

import numpy as np

from partitionlayout.config import (
    HUE_RANGE, SATURATION_RANGE, LIGHTNESS_RANGE, COLOR_MAX_ATTEMPTS,
)

logger = logging.getLogger(__name__)

# Lightness shift applied after every full turn of the hue wheel during fallback
_LIGHTNESS_STEP: float = 1e-3


@dataclass(frozen=True)
class HslColor:
    """An HSL color; hue in degrees, saturation and lightness in percent."""
    hue: int
    saturation: float
    lightness: float

    def css(self) -> str:
        return f"hsl({self.hue}, {self.saturation}%, {self.lightness}%)"

    def __str__(self) -> str:
        return self.css()


class ColorAllocator:
    """
    Tracks the colors currently assigned to partitions.

    Args:
        rng: Optional numpy random generator (pass a seeded one for reproducible colors).
        max_attempts: Number of random draws before falling back to a deterministic walk.
    """
    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        max_attempts: int = COLOR_MAX_ATTEMPTS
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self._in_use: Counter[HslColor] = Counter()
        self.max_attempts = max_attempts

    def __len__(self) -> int:
        return len(self._in_use)

    def __contains__(self, color: object) -> bool:
        return color in self._in_use

    def in_use(self, color: HslColor) -> bool:
        return color in self._in_use

    def random_color(self) -> HslColor:
        """Draw one color from the sampling region (not registered)."""
        hue = int(self._rng.integers(HUE_RANGE[0], HUE_RANGE[1]))
        saturation = float(self._rng.uniform(*SATURATION_RANGE))
        lightness = float(self._rng.uniform(*LIGHTNESS_RANGE))
        return HslColor(hue, saturation, lightness)

    def unique_color(self, avoid: Optional[HslColor] = None) -> HslColor:
        """
        Return a color that is not in use and differs from `avoid`, and register it.

        Args:
            avoid: Extra color to stay away from (typically the parent's color).
        """
        color: Optional[HslColor] = None
        for _ in range(self.max_attempts):
            color = self.random_color()
            if self._is_free(color, avoid):
                break
        else:
            start = color if color is not None else self.random_color()
            logger.warning(
                f"No free color after {self.max_attempts} draws, perturbing {start.css()}"
            )
            color = self._perturb(start, avoid)

        self.acquire(color)
        return color

    def acquire(self, color: HslColor) -> None:
        """Register one more holder of `color`."""
        self._in_use[color] += 1

    def release(self, color: HslColor) -> None:
        """Drop one holder of `color`; the value becomes free when nobody holds it."""
        count = self._in_use.get(color, 0)
        if count <= 1:
            self._in_use.pop(color, None)
        else:
            self._in_use[color] = count - 1

    def clear(self) -> None:
        self._in_use.clear()

    def _is_free(self, color: HslColor, avoid: Optional[HslColor]) -> bool:
        return color not in self._in_use and color != avoid

    def _perturb(self, start: HslColor, avoid: Optional[HslColor]) -> HslColor:
        """Walk the hue wheel from `start`, nudging lightness each turn, until a free color appears."""
        lo, hi = LIGHTNESS_RANGE
        span = hi - lo
        hue_span = HUE_RANGE[1] - HUE_RANGE[0]
        for step in itertools.count(1):
            hue = HUE_RANGE[0] + (start.hue - HUE_RANGE[0] + step) % hue_span
            shift = (step // hue_span) * _LIGHTNESS_STEP
            lightness = lo + (start.lightness - lo + shift) % span
            candidate = HslColor(hue, start.saturation, lightness)
            if self._is_free(candidate, avoid):
                return candidate
