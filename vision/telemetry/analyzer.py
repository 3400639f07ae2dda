"""Top-level per-frame telemetry aggregator.

Orchestrates the readers and the hero tracker to turn one canonical frame
into a FrameStatus, and keeps the timeline of all processed frames.

Frames must be fed in timestamp order: hero identities in frame n+1 are
resolved against the tracker state left by frame n.
"""

import json
import logging
import os
from dataclasses import dataclass, fields

import cv2
import numpy as np

from .digit_classifier import DigitTemplates
from .frame_status import FrameStatus
from .game_frame import normalize_frame
from .hero_tracker import (HeroTracker, PRUNE_INACTIVE_MS,
                           PRUNE_MIN_APPEARANCES)
from .hud_layout import MONEY_ROI, SKILL_ROIS, SPELL_ROIS
from .joystick import JoystickEstimator
from .level_reader import LEVEL_DIGIT_SIZE, read_level_icons
from .number_reader import read_number
from .region_locator import Box, SizeFilter, mask_polygons_from_image

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerConfig:
    """Tunable thresholds. Size filters are (h_min, h_max, w_min, w_max)."""
    cooldown_error_threshold: float = 0.3
    money_error_threshold: float = 0.99
    level_error_threshold: float = 0.3
    cooldown_binarize_threshold: int = 150
    money_binarize_threshold: int = 210
    level_binarize_threshold: int = 180
    cooldown_size_filter: SizeFilter | None = None     # relative mode
    money_size_filter: SizeFilter | None = SizeFilter(10, 16, 3, 11)
    level_size_filter: SizeFilter | None = LEVEL_DIGIT_SIZE
    prune_inactive_ms: int = PRUNE_INACTIVE_MS
    prune_min_appearances: int = PRUNE_MIN_APPEARANCES

    @classmethod
    def from_dict(cls, values: dict) -> 'AnalyzerConfig':
        """Build a config from plain values; size filters may be 4-lists or null.

        Raises:
            ValueError: on an unknown key or a malformed size filter.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f'unknown config key(s): {", ".join(sorted(unknown))}')
        kwargs = {}
        for key, value in values.items():
            if key.endswith('_size_filter') and value is not None:
                if len(value) != 4:
                    raise ValueError(f'{key} needs 4 bounds, got {value!r}')
                value = SizeFilter(*value)
            kwargs[key] = value
        return cls(**kwargs)


def load_config(path: str | None) -> AnalyzerConfig:
    """Read a JSON override file; None gives the defaults."""
    if path is None:
        return AnalyzerConfig()
    with open(path) as f:
        return AnalyzerConfig.from_dict(json.load(f))


class GameVideoAnalyzer:
    """Reads cooldowns, money, hero levels and joystick angle frame by frame.

    Args:
        cooldown_templates: Digit font of the ability cooldown timers.
        money_templates: Digit font of the money counter.
        level_templates: Digit font of the hero level badges.
        mask_polygons: Exclusion polygons for the level badge search.
        config: Thresholds; defaults when None.
    """

    def __init__(self, cooldown_templates: DigitTemplates,
                 money_templates: DigitTemplates,
                 level_templates: DigitTemplates,
                 mask_polygons: list[np.ndarray] | None = None,
                 config: AnalyzerConfig | None = None):
        self.cooldown_templates = cooldown_templates
        self.money_templates = money_templates
        self.level_templates = level_templates
        self.mask_polygons = mask_polygons or []
        self.config = config or AnalyzerConfig()
        self.tracker = HeroTracker()
        self.joystick = JoystickEstimator()
        self.timeline: list[FrameStatus] = []

    @classmethod
    def from_template_dir(cls, template_dir: str, mask_path: str | None = None,
                          config: AnalyzerConfig | None = None) -> 'GameVideoAnalyzer':
        """Load ``{i}.bmp``, ``m{i}.bmp``, ``l{i}.bmp`` and an optional mask.

        Without ``mask_path``, ``mask.bmp`` in ``template_dir`` is used when
        present.

        Raises:
            FileNotFoundError: if a template or an explicit mask is missing.
        """
        if mask_path is None:
            default_mask = os.path.join(template_dir, 'mask.bmp')
            mask_path = default_mask if os.path.exists(default_mask) else None
        polygons = None
        if mask_path is not None:
            mask = cv2.imread(mask_path, cv2.IMREAD_GRAYSCALE)
            if mask is None:
                raise FileNotFoundError(f'cannot load mask {mask_path}')
            polygons = mask_polygons_from_image(mask)
            logger.info('Loaded %d mask polygon(s) from %s', len(polygons), mask_path)
        return cls(DigitTemplates.load(template_dir, ''),
                   DigitTemplates.load(template_dir, 'm'),
                   DigitTemplates.load(template_dir, 'l'),
                   polygons, config)

    def process_frame(self, frame: np.ndarray, ts: int) -> FrameStatus:
        """Read one frame, update hero identities and append to the timeline.

        Raises:
            ValueError: if ``ts`` is earlier than the previous frame's.
        """
        if self.timeline and ts < self.timeline[-1].ts:
            raise ValueError(f'frame at {ts} ms arrived after {self.timeline[-1].ts} ms')

        cfg = self.config
        frame = normalize_frame(frame)
        status = FrameStatus(ts=ts)

        readings = read_level_icons(frame, cfg.level_binarize_threshold,
                                    self.level_templates, cfg.level_error_threshold,
                                    self.mask_polygons, cfg.level_size_filter)
        status.heroes = self.tracker.update(readings, ts)
        self.tracker.prune(ts, cfg.prune_inactive_ms, cfg.prune_min_appearances)

        status.money = read_number(MONEY_ROI.crop(frame), self.money_templates,
                                   cfg.money_error_threshold,
                                   cfg.money_binarize_threshold,
                                   cfg.money_size_filter)
        spells = [self._read_cooldown(frame, roi) for roi in SPELL_ROIS]
        skills = [self._read_cooldown(frame, roi) for roi in SKILL_ROIS]
        status.spell1_cd, status.spell2_cd, status.spell3_cd = spells
        (status.skill1_cd, status.skill2_cd,
         status.skill3_cd, status.skill4_cd) = skills

        status.joystick_angle = self.joystick.estimate(frame)

        self.timeline.append(status)
        logger.info('%d ms: money=%d spells=%s skills=%s heroes=%d angle=%s',
                    ts, status.money, spells, skills, len(status.heroes),
                    'none' if status.joystick_angle is None
                    else f'{status.joystick_angle:.1f}')
        return status

    def _read_cooldown(self, frame: np.ndarray, roi: Box) -> int:
        cfg = self.config
        return read_number(roi.crop(frame), self.cooldown_templates,
                           cfg.cooldown_error_threshold,
                           cfg.cooldown_binarize_threshold,
                           cfg.cooldown_size_filter)
