"""Cut a digit template out of a reference capture.

Binarizes a rectangle of the capture, takes the largest connected region
and saves it, cropped to its bounding box, as ``<prefix><digit>.bmp``.
Prefixes: '' for cooldown digits, 'm' for money, 'l' for level badges.

Usage:
    python build_templates.py frame_12.500.png --roi 55,340,14,20 \
        --threshold 210 --digit 9 --prefix m --out samples
"""

import argparse
import os
import sys

import cv2
import numpy as np

from telemetry.game_frame import normalize_frame
from telemetry.region_locator import Box, binarize


def extract_template(frame: np.ndarray, roi: Box, threshold: int) -> np.ndarray | None:
    """Binary bitmap of the largest region inside ``roi``, or None if empty."""
    binary = binarize(roi.crop(frame), threshold)
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)
    if not contours:
        return None
    best = max(contours, key=lambda c: cv2.boundingRect(c)[2] * cv2.boundingRect(c)[3])
    return Box(*cv2.boundingRect(best)).crop(binary).copy()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Build a digit template')
    parser.add_argument('capture', help='Reference capture image')
    parser.add_argument('--roi', required=True, help='Region holding the digit: x,y,w,h')
    parser.add_argument('--threshold', type=int, default=210,
                        help='Binarization threshold')
    parser.add_argument('--digit', type=int, required=True, choices=range(10))
    parser.add_argument('--prefix', default='', choices=('', 'm', 'l'))
    parser.add_argument('--out', default='samples', help='Template directory')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    frame = cv2.imread(args.capture, cv2.IMREAD_COLOR)
    if frame is None:
        print(f'ERROR: cannot read {args.capture}', file=sys.stderr)
        return 1
    roi = Box(*[int(v) for v in args.roi.split(',')])
    template = extract_template(normalize_frame(frame), roi, args.threshold)
    if template is None:
        print(f'ERROR: no foreground inside {tuple(roi)}', file=sys.stderr)
        return 1

    os.makedirs(args.out, exist_ok=True)
    path = os.path.join(args.out, f'{args.prefix}{args.digit}.bmp')
    cv2.imwrite(path, template)
    print(f'  Created {path} ({template.shape[1]}x{template.shape[0]})')
    return 0


if __name__ == '__main__':
    sys.exit(main())
