"""Color checks used to tell white HUD digits from colorful scenery.

Level icons and timers are drawn in white/gray. Bright, saturated blobs
that happen to have digit-like size (spell effects, health bars, map
markers) are rejected before template matching.
"""

import cv2
import numpy as np


# HSV thresholds for a pixel to count as "colored"
SATURATION_MIN = 70
VALUE_MIN = 30

# A region may contain at most this many colored pixels (or 2 per column
# of width, whichever is larger) and still be considered black & white.
MIN_COLOR_PIXEL_BUDGET = 12


def colored_pixel_count(region: np.ndarray) -> int:
    """Count pixels with saturation > 70 and value > 30.

    Args:
        region: BGR image region (H, W, 3).
    """
    if region.size == 0:
        return 0
    hsv = cv2.cvtColor(region, cv2.COLOR_BGR2HSV)
    colored = (hsv[:, :, 1] > SATURATION_MIN) & (hsv[:, :, 2] > VALUE_MIN)
    return int(np.count_nonzero(colored))


def is_black_white(region: np.ndarray) -> bool:
    """True if the region is low-saturation enough to hold a HUD digit."""
    budget = max(MIN_COLOR_PIXEL_BUDGET, region.shape[1] * 2)
    return colored_pixel_count(region) < budget
