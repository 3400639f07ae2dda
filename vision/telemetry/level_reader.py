"""Find hero level icons anywhere on the frame.

Every hero on screen carries a small white level badge. The badge can be
anywhere, so instead of a fixed ROI we binarize the whole frame, keep
regions with the size of a badge digit, and classify them. Two-digit
levels (10-15) come out of the locator as two separate single digits side
by side; a pairing pass glues them back together.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .digit_classifier import DigitTemplates, classify
from .region_locator import SizeFilter, binarize, locate_regions

logger = logging.getLogger(__name__)

MAX_LEVEL = 15

# Level badge digit size in canonical pixels (height 12-15, width 4-10)
LEVEL_DIGIT_SIZE = SizeFilter(12, 15, 4, 10)

# Two digits belong to one badge when they sit on the same baseline
# (|dy| < 3) with a horizontal gap strictly between 8 and 15 pixels.
PAIR_MAX_DY = 3
PAIR_MIN_DX = 8
PAIR_MAX_DX = 15


@dataclass
class DigitDetection:
    """One classified badge digit, positioned by its box's top-left corner."""
    x: int
    y: int
    digit: int


@dataclass
class LevelReading:
    """A hero level read from the frame."""
    position: tuple[int, int]
    level: int


def _is_pair(a: DigitDetection, b: DigitDetection) -> bool:
    dx = abs(a.x - b.x)
    return abs(a.y - b.y) < PAIR_MAX_DY and PAIR_MIN_DX < dx < PAIR_MAX_DX


def pair_level_digits(detections: list[DigitDetection]) -> list[LevelReading]:
    """Merge adjacent single digits into two-digit levels.

    Detections are visited in order. For each one not yet consumed, later
    unconsumed detections are scanned for a partner; the left digit is the
    tens place and the right digit the units place, and the pair is
    reported at the right digit's position. A pair reading above
    MAX_LEVEL is not a badge, so the scan goes on. Whatever stays unpaired
    is reported as a one-digit level unless it reads 0.
    """
    consumed = [False] * len(detections)
    readings: list[LevelReading] = []

    for i, first in enumerate(detections):
        if consumed[i]:
            continue
        for j in range(i + 1, len(detections)):
            if consumed[j]:
                continue
            second = detections[j]
            if not _is_pair(first, second):
                continue
            left, right = (first, second) if first.x < second.x else (second, first)
            level = left.digit * 10 + right.digit
            if level > MAX_LEVEL:
                continue
            readings.append(LevelReading((right.x, right.y), level))
            consumed[i] = consumed[j] = True
            break
        if not consumed[i] and first.digit > 0:
            readings.append(LevelReading((first.x, first.y), first.digit))

    return readings


def detect_level_digits(frame: np.ndarray, binarize_threshold: float,
                        templates: DigitTemplates, error_threshold: float,
                        mask_polygons: list[np.ndarray] | None = None,
                        size_filter: SizeFilter | None = LEVEL_DIGIT_SIZE
                        ) -> list[DigitDetection]:
    """Classify every badge-sized, low-saturation region of the frame."""
    binary = binarize(frame, binarize_threshold)
    boxes = locate_regions(binary, size_filter, mask_polygons, color_frame=frame)
    detections = []
    for box in boxes:
        digit = classify(box.crop(binary), templates, error_threshold)
        if digit is not None:
            detections.append(DigitDetection(box.x, box.y, digit))
    logger.debug('%d badge candidates, %d classified', len(boxes), len(detections))
    return detections


def read_level_icons(frame: np.ndarray, binarize_threshold: float,
                     templates: DigitTemplates, error_threshold: float,
                     mask_polygons: list[np.ndarray] | None = None,
                     size_filter: SizeFilter | None = LEVEL_DIGIT_SIZE
                     ) -> list[LevelReading]:
    """Read all hero level badges visible in a canonical BGR frame.

    Args:
        frame: Canonical-size BGR frame.
        binarize_threshold: Grayscale threshold for badge digit pixels.
        templates: Level badge digit font.
        error_threshold: Classifier acceptance threshold.
        mask_polygons: Exclusion polygons for fixed UI that looks like digits.
        size_filter: Badge digit size bounds; None selects the relative mode.

    Returns:
        Unordered level readings for this frame.
    """
    detections = detect_level_digits(frame, binarize_threshold, templates,
                                     error_threshold, mask_polygons, size_filter)
    return pair_level_digits(detections)
