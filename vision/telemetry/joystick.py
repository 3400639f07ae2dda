"""Estimate the virtual joystick direction from its thumb knob.

The on-screen joystick is a ring with a round knob that follows the
player's thumb. The knob is found with a Hough circle search inside a
fixed rectangle; the angle is measured from the ring's resting axis
point, counter-clockwise from the positive x axis (screen y points down,
so it is flipped).
"""

import math

import cv2
import numpy as np

from .hud_layout import JOYSTICK_AXIS, JOYSTICK_ROI
from .region_locator import Box

# Hough circle search parameters for the knob
HOUGH_DP = 1
HOUGH_MIN_DIST = 100
HOUGH_CANNY_THRESHOLD = 50
HOUGH_ACCUMULATOR_THRESHOLD = 20
KNOB_MIN_RADIUS = 40
KNOB_MAX_RADIUS = 50


def angle_from_axis(center: tuple[float, float],
                    axis: tuple[float, float] = JOYSTICK_AXIS) -> float:
    """Angle in degrees of ``center`` as seen from ``axis``, in (-180, 180]."""
    return math.degrees(math.atan2(axis[1] - center[1], center[0] - axis[0]))


class JoystickEstimator:
    """Locate the joystick knob and keep knob-to-axis distance statistics.

    The recorded distances are a calibration aid: with a correct axis point
    the knob travels on a circle, so the spread of the distances should be
    small.

    Args:
        roi: Search rectangle in canonical frame coordinates.
        axis: Resting center of the joystick in canonical coordinates.
    """

    def __init__(self, roi: Box = JOYSTICK_ROI,
                 axis: tuple[int, int] = JOYSTICK_AXIS):
        self.roi = roi
        self.axis = axis
        self.distances: list[float] = []

    def find_knob(self, frame: np.ndarray) -> tuple[float, float, float] | None:
        """Return (x, y, radius) of the knob in frame coordinates, or None."""
        gray = cv2.cvtColor(self.roi.crop(frame), cv2.COLOR_BGR2GRAY)
        circles = cv2.HoughCircles(
            gray, cv2.HOUGH_GRADIENT, HOUGH_DP, HOUGH_MIN_DIST,
            param1=HOUGH_CANNY_THRESHOLD, param2=HOUGH_ACCUMULATOR_THRESHOLD,
            minRadius=KNOB_MIN_RADIUS, maxRadius=KNOB_MAX_RADIUS)
        if circles is None or len(circles[0]) == 0:
            return None
        x, y, r = circles[0][0]
        return self.roi.x + float(x), self.roi.y + float(y), float(r)

    def estimate(self, frame: np.ndarray) -> float | None:
        """Joystick angle in degrees, or None when no knob is visible."""
        knob = self.find_knob(frame)
        if knob is None:
            return None
        cx, cy, _ = knob
        self.distances.append(math.hypot(cx - self.axis[0], cy - self.axis[1]))
        return angle_from_axis((cx, cy), self.axis)

    def axis_statistics(self) -> tuple[float, float] | None:
        """(mean, sample standard deviation) of knob-to-axis distances.

        Returns None until at least two knobs have been seen.
        """
        if len(self.distances) < 2:
            return None
        values = np.asarray(self.distances, dtype=float)
        return float(values.mean()), float(values.std(ddof=1))
