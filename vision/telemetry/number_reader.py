"""Read a multi-digit number from a fixed HUD rectangle.

Used for ability cooldown timers and the money counter. Digits are
segmented as separate connected regions, classified one by one and then
concatenated left to right.

Known limitation: a digit the classifier rejects is simply left out, so
a miss in the middle of "105" reads as "15". Callers see a plausible but
wrong value rather than an error.
"""

import numpy as np

from .digit_classifier import DigitTemplates, classify
from .region_locator import SizeFilter, binarize, locate_regions


def read_digits(roi: np.ndarray, templates: DigitTemplates,
                error_threshold: float, binarize_threshold: float,
                size_filter: SizeFilter | None = None) -> list[tuple[int, int]]:
    """Return accepted (x, digit) pairs inside ``roi``, sorted by x.

    Regions sharing a left edge count once: the first accepted digit at a
    given x is kept.
    """
    binary = binarize(roi, binarize_threshold)
    found: dict[int, int] = {}
    for box in locate_regions(binary, size_filter):
        # One digit per x; the first accepted one wins
        if box.x in found:
            continue
        digit = classify(box.crop(binary), templates, error_threshold)
        if digit is not None:
            found[box.x] = digit
    return sorted(found.items())


def read_number(roi: np.ndarray, templates: DigitTemplates,
                error_threshold: float, binarize_threshold: float,
                size_filter: SizeFilter | None = None) -> int:
    """Read the non-negative integer displayed in ``roi``.

    Args:
        roi: BGR (or grayscale) crop of the fixed number area.
        templates: Digit font for this HUD element.
        error_threshold: Classifier acceptance threshold.
        binarize_threshold: Grayscale threshold for foreground pixels.
        size_filter: Explicit digit size bounds, or None for the relative
                     mode derived from the ROI size.

    Returns:
        The number, most significant digit leftmost; 0 when nothing is read.
    """
    value = 0
    for _, digit in read_digits(roi, templates, error_threshold,
                                binarize_threshold, size_filter):
        value = value * 10 + digit
    return value
