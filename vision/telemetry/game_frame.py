"""Frame supply: canonical resizing and capture folder iteration.

Captures are still images named ``<anything>_<seconds>.<ext>``, e.g.
``match3_12.500.png`` for a frame taken 12.5 s into the recording. The
folder is processed in timestamp order: seconds are not zero padded, so
name order would put ``cap_10.0`` before ``cap_9.5``.
"""

import os
from typing import Iterator

import cv2
import numpy as np

from .hud_layout import FRAME_HEIGHT, FRAME_WIDTH

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp')


class FrameReadError(Exception):
    """A capture file exists but could not be decoded."""


def normalize_frame(frame: np.ndarray) -> np.ndarray:
    """Resize to the canonical 1280x720 if the frame is any other size."""
    if frame.shape[1] != FRAME_WIDTH or frame.shape[0] != FRAME_HEIGHT:
        frame = cv2.resize(frame, (FRAME_WIDTH, FRAME_HEIGHT),
                           interpolation=cv2.INTER_LINEAR)
    return frame


def parse_timestamp_ms(filename: str) -> int:
    """Timestamp in ms from the seconds between the last '_' and the last '.'.

    Raises:
        ValueError: if the name does not carry a numeric timestamp.
    """
    name = os.path.basename(filename)
    start = name.rfind('_')
    end = name.rfind('.')
    if start == -1 or end <= start + 1:
        raise ValueError(f'no timestamp in capture name {name!r}')
    return int(float(name[start + 1:end]) * 1000.0)


def list_captures(folder: str) -> list[str]:
    """Image file paths in ``folder``, ordered by capture timestamp.

    Raises:
        ValueError: if an image name carries no timestamp.
    """
    names = [n for n in os.listdir(folder) if n.lower().endswith(IMAGE_EXTENSIONS)]
    names.sort(key=lambda n: (parse_timestamp_ms(n), n))
    return [os.path.join(folder, n) for n in names]


def iter_frames(folder: str, start: int = 0,
                end: int | None = None) -> Iterator[tuple[int, str, np.ndarray]]:
    """Yield (timestamp_ms, path, canonical BGR frame) for captures[start:end].

    Raises:
        FrameReadError: when a capture cannot be decoded.
        ValueError: if an image name carries no timestamp.
    """
    for path in list_captures(folder)[start:end]:
        ts = parse_timestamp_ms(path)
        frame = cv2.imread(path, cv2.IMREAD_COLOR)
        if frame is None:
            raise FrameReadError(f'cannot read capture {path}')
        yield ts, path, normalize_frame(frame)
