"""Find digit-sized connected regions in a binarized image.

The locator is shared by the fixed-ROI readers (cooldowns, money) and the
whole-frame level icon search. Candidates are external contours; each is
reduced to its bounding box and passed through up to three filters:

  1. mask:  drop boxes with a corner inside a known non-digit UI element
  2. size:  relative to the searched image, or explicit pixel bounds
  3. color: drop boxes whose pixels in the color frame are too saturated
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

import cv2
import numpy as np

from .color_utils import is_black_white

logger = logging.getLogger(__name__)

# Relative size mode: a digit spans this fraction of the searched area.
# Height in [rows / 1.6, rows / 1.3], width in [cols / 9.3, cols / 4.1].
REL_HEIGHT_DIVISORS = (1.6, 1.3)
REL_WIDTH_DIVISORS = (9.3, 4.1)


class Box(NamedTuple):
    """Axis-aligned bounding box in image coordinates."""
    x: int
    y: int
    w: int
    h: int

    def corners(self) -> tuple[tuple[int, int], ...]:
        return ((self.x, self.y), (self.x + self.w, self.y),
                (self.x, self.y + self.h), (self.x + self.w, self.y + self.h))

    def crop(self, image: np.ndarray) -> np.ndarray:
        return image[self.y:self.y + self.h, self.x:self.x + self.w]


@dataclass(frozen=True)
class SizeFilter:
    """Explicit inclusive pixel bounds for a candidate box."""
    height_min: float
    height_max: float
    width_min: float
    width_max: float

    @classmethod
    def relative_to(cls, rows: int, cols: int) -> 'SizeFilter':
        """Bounds for the relative mode, derived from the searched image size."""
        return cls(rows / REL_HEIGHT_DIVISORS[0], rows / REL_HEIGHT_DIVISORS[1],
                   cols / REL_WIDTH_DIVISORS[0], cols / REL_WIDTH_DIVISORS[1])

    def accepts(self, box: Box) -> bool:
        return (self.height_min <= box.h <= self.height_max
                and self.width_min <= box.w <= self.width_max)


def binarize(image: np.ndarray, threshold: float) -> np.ndarray:
    """Grayscale (if needed) and threshold: pixels above ``threshold`` -> 255."""
    if image.ndim == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    _, binary = cv2.threshold(image, threshold, 255, cv2.THRESH_BINARY)
    return binary


def mask_polygons_from_image(mask: np.ndarray) -> list[np.ndarray]:
    """Extract exclusion polygons from a binary mask image (all contours)."""
    if mask.ndim == 3:
        mask = cv2.cvtColor(mask, cv2.COLOR_BGR2GRAY)
    _, mask = cv2.threshold(mask, 127, 255, cv2.THRESH_BINARY)
    contours, _ = cv2.findContours(mask, cv2.RETR_LIST, cv2.CHAIN_APPROX_NONE)
    return list(contours)


def is_masked(box: Box, mask_polygons: list[np.ndarray]) -> bool:
    """True if any box corner lies strictly inside any mask polygon."""
    for polygon in mask_polygons:
        for cx, cy in box.corners():
            if cv2.pointPolygonTest(polygon, (float(cx), float(cy)), False) > 0:
                return True
    return False


def locate_regions(binary: np.ndarray,
                   size_filter: SizeFilter | None = None,
                   mask_polygons: list[np.ndarray] | None = None,
                   color_frame: np.ndarray | None = None) -> list[Box]:
    """Return bounding boxes of digit-like regions, in contour order.

    Args:
        binary: Single-channel 0/255 image to search.
        size_filter: Explicit bounds, or None for the relative mode computed
                     from ``binary``'s own size.
        mask_polygons: Optional exclusion polygons in ``binary`` coordinates.
        color_frame: Optional BGR image aligned with ``binary``; when given,
                     saturated regions are discarded.

    Returns:
        Boxes that passed every filter. Zero-sized boxes never pass.
    """
    if size_filter is None:
        size_filter = SizeFilter.relative_to(binary.shape[0], binary.shape[1])

    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)

    boxes = []
    for contour in contours:
        box = Box(*cv2.boundingRect(contour))
        if box.w <= 0 or box.h <= 0:
            continue
        if mask_polygons and is_masked(box, mask_polygons):
            continue
        if not size_filter.accepts(box):
            continue
        if color_frame is not None and not is_black_white(box.crop(color_frame)):
            logger.debug('Region %s rejected by color gate', tuple(box))
            continue
        boxes.append(box)
    return boxes
