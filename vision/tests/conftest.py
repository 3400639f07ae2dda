"""Pytest fixtures for telemetry tests.

Digit fonts are synthesized from a 5x7 bitmap font so no capture files
are needed. Each glyph is cropped to its bounding box (as real templates
cut from captures are) and scaled up by an integer factor.
"""
import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

VISION_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(VISION_DIR))

from telemetry.digit_classifier import DigitTemplates
from telemetry.hud_layout import FRAME_HEIGHT, FRAME_WIDTH

FONT_5X7 = {
    0: ['.###.', '#...#', '#..##', '#.#.#', '##..#', '#...#', '.###.'],
    1: ['..#..', '.##..', '..#..', '..#..', '..#..', '..#..', '.###.'],
    2: ['.###.', '#...#', '....#', '...#.', '..#..', '.#...', '#####'],
    3: ['#####', '...#.', '..#..', '...#.', '....#', '#...#', '.###.'],
    4: ['...#.', '..##.', '.#.#.', '#..#.', '#####', '...#.', '...#.'],
    5: ['#####', '#....', '####.', '....#', '....#', '#...#', '.###.'],
    6: ['..##.', '.#...', '#....', '####.', '#...#', '#...#', '.###.'],
    7: ['#####', '....#', '...#.', '..#..', '.#...', '.#...', '.#...'],
    8: ['.###.', '#...#', '#...#', '.###.', '#...#', '#...#', '.###.'],
    9: ['.###.', '#...#', '#...#', '.####', '....#', '...#.', '.##..'],
}


def glyph(digit: int, scale: int = 2) -> np.ndarray:
    """Binary (0/255) bitmap of ``digit``, cropped tight and scaled up."""
    rows = FONT_5X7[digit]
    img = np.array([[255 if c == '#' else 0 for c in row] for row in rows],
                   dtype=np.uint8)
    cols = np.where(img.any(axis=0))[0]
    img = img[:, cols[0]:cols[-1] + 1]
    return np.kron(img, np.ones((scale, scale), dtype=np.uint8))


def font(scale: int = 2) -> DigitTemplates:
    return DigitTemplates([glyph(d, scale) for d in range(10)])


def draw_digit(image: np.ndarray, digit: int, x: int, y: int,
               scale: int = 2, color=(255, 255, 255)) -> tuple[int, int]:
    """Paint a digit with its top-left corner at (x, y); returns (w, h)."""
    g = glyph(digit, scale)
    h, w = g.shape
    area = image[y:y + h, x:x + w]
    area[g == 255] = color if image.ndim == 3 else 255
    return w, h


def blank_frame() -> np.ndarray:
    return np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), dtype=np.uint8)


def money_mask() -> np.ndarray:
    """Exclusion mask over the money counter, whose digits look like badges."""
    mask = np.zeros((FRAME_HEIGHT, FRAME_WIDTH), dtype=np.uint8)
    mask[330:370, 10:100] = 255
    return mask


def hud_frame(money_digits=(3, 0, 5), spell1=7, badge_at=(600, 200),
              badge_level=5) -> np.ndarray:
    """Synthetic HUD: money counter, first spell cooldown and one level badge."""
    frame = blank_frame()
    for i, d in enumerate(money_digits):
        draw_digit(frame, d, 20 + 12 * i, 343)
    if spell1 is not None:
        draw_digit(frame, spell1, 1151, 406, scale=4)
    if badge_at is not None:
        draw_digit(frame, badge_level, *badge_at)
    return frame


def write_templates(folder: Path, with_mask: bool = True) -> None:
    """Write the three synthetic digit fonts (and the mask) as .bmp files."""
    for d in range(10):
        cv2.imwrite(str(folder / f'{d}.bmp'), glyph(d, 4))
        cv2.imwrite(str(folder / f'm{d}.bmp'), glyph(d))
        cv2.imwrite(str(folder / f'l{d}.bmp'), glyph(d))
    if with_mask:
        cv2.imwrite(str(folder / 'mask.bmp'), money_mask())


@pytest.fixture(scope="session")
def level_font():
    """Level badge / money sized font: 14 px tall."""
    return font(2)


@pytest.fixture(scope="session")
def cooldown_font():
    """Cooldown timer sized font: 28 px tall."""
    return font(4)
