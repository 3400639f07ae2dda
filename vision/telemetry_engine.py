"""Telemetry Engine: main entry point.

Reads a folder of gameplay captures (named ``<prefix>_<seconds>.<ext>``),
reads hero levels, cooldowns, money and joystick angle from every frame,
and writes the timeline as JSON lines (one FrameStatus per line).

Usage:
    python telemetry_engine.py /data/frames --templates samples \
        --start 141 --end 1002 --output timeline.jsonl

Args:
    folder: Capture folder (processed in timestamp order)
    --templates: Directory with {i}.bmp, m{i}.bmp, l{i}.bmp and mask.bmp
    --mask: Level badge exclusion mask (default: <templates>/mask.bmp)
    --config: JSON file overriding AnalyzerConfig fields
    --start/--end: Capture index range to process
    --output: Output path (default: stdout)
"""

import argparse
import json
import logging
import sys

from telemetry.analyzer import GameVideoAnalyzer, load_config
from telemetry.game_frame import FrameReadError, iter_frames

logger = logging.getLogger('telemetry_engine')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Telemetry Engine')
    parser.add_argument('folder', help='Folder of gameplay captures')
    parser.add_argument('--templates', default='samples',
                        help='Path to digit template directory')
    parser.add_argument('--mask', default=None,
                        help='Level badge exclusion mask image')
    parser.add_argument('--config', default=None,
                        help='JSON file with threshold overrides')
    parser.add_argument('--start', type=int, default=0,
                        help='Index of the first capture to process')
    parser.add_argument('--end', type=int, default=None,
                        help='Index one past the last capture to process')
    parser.add_argument('--output', default=None,
                        help='JSON lines output path (default: stdout)')
    parser.add_argument('--verbose', action='store_true',
                        help='Log every tracker decision')
    return parser.parse_args(argv)


def run(args) -> int:
    try:
        config = load_config(args.config)
        analyzer = GameVideoAnalyzer.from_template_dir(args.templates, args.mask, config)
        out = open(args.output, 'w') if args.output else sys.stdout
    except (OSError, ValueError) as e:
        logger.error('Setup failed: %s', e)
        return 1

    try:
        for ts, path, frame in iter_frames(args.folder, args.start, args.end):
            logger.debug('Reading %s', path)
            status = analyzer.process_frame(frame, ts)
            out.write(json.dumps(status.to_dict()) + '\n')
    except (FrameReadError, ValueError) as e:
        logger.error('%s', e)
        return 1
    finally:
        if out is not sys.stdout:
            out.close()

    stats = analyzer.joystick.axis_statistics()
    if stats is not None:
        logger.info('Joystick to axis length mean: %.2f, stdvar: %.2f', *stats)
    logger.info('Processed %d frames, %d live heroes',
                len(analyzer.timeline), len(analyzer.tracker))
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='[Telemetry] %(message)s', stream=sys.stderr)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
