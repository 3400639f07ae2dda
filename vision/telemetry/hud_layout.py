"""Fixed HUD layout of the canonical 1280x720 frame.

All captures are resized to the canonical size first, so every position
below is in canonical pixels. Cooldown numbers are centered on round
ability icons; the readable band is a 1.6r x 0.8r rectangle around the
icon center.
"""

from .region_locator import Box

FRAME_WIDTH = 1280
FRAME_HEIGHT = 720

# Ability icon radii
SPELL_RADIUS = 52.0
SKILL_RADIUS = 40.0

# Ability icon centers (x, y)
SPELL_CENTERS = ((1161, 420), (1028, 497), (949, 630))
SKILL_CENTERS = ((643, 644), (738, 644), (837, 644), (1155, 279))

# Money counter above the shop button
MONEY_ROI = Box(18, 340, 64, 22)

# Virtual joystick: search rectangle and its resting axis point
JOYSTICK_ROI = Box(58, 411, 294, 309)
JOYSTICK_AXIS = (206, 559)


def cooldown_roi(center: tuple[int, int], radius: float) -> Box:
    """Rectangle holding the cooldown digits of an icon at ``center``."""
    cx, cy = center
    return Box(int(cx - radius * 0.8), int(cy - radius * 0.4),
               int(radius * 1.6), int(radius * 0.8))


SPELL_ROIS = tuple(cooldown_roi(c, SPELL_RADIUS) for c in SPELL_CENTERS)
SKILL_ROIS = tuple(cooldown_roi(c, SKILL_RADIUS) for c in SKILL_CENTERS)
