"""Classify binarized digit regions against a fixed set of 0-9 bitmaps.

Every number on the HUD (cooldown timers, money, hero level icons) is
rendered in a small set of fonts. For each font we keep ten reference
bitmaps, cut from real captures, and compare candidate regions pixel by
pixel after resampling them to the template size.
"""

import logging
import os

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# A region whose h/w ratio differs from the template's by more than this
# factor is not compared at all.
ASPECT_TOLERANCE = 0.2


class DigitTemplates:
    """Ordered, immutable set of ten binary digit bitmaps.

    Index order doubles as tie-break priority during classification: when
    two digits score the same error, the lower index wins.

    Args:
        bitmaps: Ten 2-D uint8 arrays, one per digit 0-9. Pixels above 127
                 are foreground.
    """

    __slots__ = ('_bitmaps',)

    def __init__(self, bitmaps: list[np.ndarray]):
        if len(bitmaps) != 10:
            raise ValueError(f'expected 10 digit bitmaps, got {len(bitmaps)}')
        binary = []
        for bitmap in bitmaps:
            if bitmap.ndim == 3:
                bitmap = cv2.cvtColor(bitmap, cv2.COLOR_BGR2GRAY)
            out = np.where(bitmap > 127, 255, 0).astype(np.uint8)
            out.setflags(write=False)
            binary.append(out)
        self._bitmaps = tuple(binary)

    @classmethod
    def load(cls, template_dir: str, prefix: str = '') -> 'DigitTemplates':
        """Load ``{prefix}0.bmp`` .. ``{prefix}9.bmp`` from a directory.

        Raises:
            FileNotFoundError: if any of the ten files is missing or cannot
                be decoded.
        """
        bitmaps = []
        for d in range(10):
            path = os.path.join(template_dir, f'{prefix}{d}.bmp')
            img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
            if img is None:
                raise FileNotFoundError(f'cannot load digit template {path}')
            logger.debug('Loaded digit template %s (%dx%d)', path,
                         img.shape[1], img.shape[0])
            bitmaps.append(img)
        return cls(bitmaps)

    def __len__(self) -> int:
        return len(self._bitmaps)

    def __getitem__(self, digit: int) -> np.ndarray:
        return self._bitmaps[digit]

    def __iter__(self):
        return iter(self._bitmaps)


def disagreement_rate(region: np.ndarray, template: np.ndarray) -> float:
    """Fraction of pixels where exactly one of region/template is foreground.

    Both arrays must already share the same shape. Only pure 0/255 pixels
    take part: a foreground pixel against background (or the reverse) is an
    error, matching pixels never are.
    """
    fg_region = region == 255
    bg_region = region == 0
    fg_tmpl = template == 255
    bg_tmpl = template == 0
    errors = np.count_nonzero((fg_region & bg_tmpl) | (bg_region & fg_tmpl))
    return errors / float(region.shape[0] * region.shape[1])


def _aspect_compatible(region: np.ndarray, template: np.ndarray) -> bool:
    hw_region = region.shape[0] / region.shape[1]
    hw_tmpl = template.shape[0] / template.shape[1]
    ratio = hw_region / hw_tmpl
    return 1.0 - ASPECT_TOLERANCE <= ratio <= 1.0 + ASPECT_TOLERANCE


def classify_with_errors(region: np.ndarray, templates: DigitTemplates,
                         error_threshold: float
                         ) -> tuple[int | None, list[float | None]]:
    """Classify a region and expose the per-digit error table.

    Args:
        region: Binary (0/255) single-channel crop of one candidate digit.
        templates: The font to compare against.
        error_threshold: Errors must fall strictly below this to count.

    Returns:
        (digit, errors); digit is None when no template beat the
        threshold. errors[i] is None when template i was skipped by the
        aspect gate.
    """
    best_error = error_threshold
    best_digit = None
    errors: list[float | None] = []

    for digit, template in enumerate(templates):
        if not _aspect_compatible(region, template):
            errors.append(None)
            continue
        th, tw = template.shape[:2]
        resized = cv2.resize(region, (tw, th), interpolation=cv2.INTER_NEAREST)
        error = disagreement_rate(resized, template)
        errors.append(error)
        if error < best_error:
            best_error = error
            best_digit = digit

    return best_digit, errors


def classify(region: np.ndarray, templates: DigitTemplates,
             error_threshold: float) -> int | None:
    """Return the best matching digit (0-9) or None if nothing matched."""
    digit, errors = classify_with_errors(region, templates, error_threshold)
    if digit is None:
        logger.debug('No digit below error %.2f (errors: %s)', error_threshold,
                     ['-' if e is None else round(e, 3) for e in errors])
    return digit
