"""Unit tests for the digit template classifier.

Key nuances:
- Aspect gate: h/w ratio must be within 20% of the template's
- Regions are resampled to template size with nearest-neighbour
- Acceptance is strict: error < running minimum, initialised to the threshold
- Ties keep the lowest digit index
"""
import cv2
import numpy as np
import pytest

from conftest import glyph
from telemetry.digit_classifier import (DigitTemplates, classify,
                                        classify_with_errors, disagreement_rate)


# ── Template set ──────────────────────────────────────────────────────────────

class TestDigitTemplates:

    def test_requires_ten_bitmaps(self):
        with pytest.raises(ValueError):
            DigitTemplates([glyph(0)] * 9)

    def test_bitmaps_are_binarized(self):
        noisy = glyph(8).astype(np.int32)
        noisy[noisy == 255] = 200
        noisy[noisy == 0] = 40
        templates = DigitTemplates([noisy.astype(np.uint8)] * 10)
        assert set(np.unique(templates[0])) == {0, 255}

    def test_bitmaps_are_read_only(self, level_font):
        with pytest.raises(ValueError):
            level_font[3][0, 0] = 7

    def test_load_from_directory(self, tmp_path):
        for d in range(10):
            cv2.imwrite(str(tmp_path / f'l{d}.bmp'), glyph(d))
        templates = DigitTemplates.load(str(tmp_path), 'l')
        assert len(templates) == 10
        assert np.array_equal(templates[4], glyph(4))

    def test_load_missing_file_raises(self, tmp_path):
        for d in range(9):
            cv2.imwrite(str(tmp_path / f'{d}.bmp'), glyph(d))
        with pytest.raises(FileNotFoundError):
            DigitTemplates.load(str(tmp_path))


# ── Disagreement rate ─────────────────────────────────────────────────────────

class TestDisagreementRate:

    def test_identical_is_zero(self):
        g = glyph(5)
        assert disagreement_rate(g, g) == 0.0

    def test_inverse_is_one(self):
        g = glyph(5)
        assert disagreement_rate(g, 255 - g) == 1.0

    def test_counts_both_polarities(self):
        region = np.zeros((2, 2), dtype=np.uint8)
        template = np.zeros((2, 2), dtype=np.uint8)
        region[0, 0] = 255      # foreground vs background
        template[1, 1] = 255    # background vs foreground
        assert disagreement_rate(region, template) == 0.5


# ── Classification ────────────────────────────────────────────────────────────

class TestClassify:

    @pytest.mark.parametrize('digit', range(10))
    def test_self_match(self, level_font, digit):
        assert classify(glyph(digit), level_font, 0.3) == digit

    @pytest.mark.parametrize('digit', range(10))
    def test_self_match_after_resampling(self, level_font, digit):
        """A 2x larger rendering resamples back onto the template exactly."""
        assert classify(glyph(digit, scale=4), level_font, 0.3) == digit

    def test_deterministic(self, level_font):
        region = glyph(6).copy()
        region[3:5, 2:4] = 255 - region[3:5, 2:4]
        results = {classify(region, level_font, 0.3) for _ in range(5)}
        assert len(results) == 1

    def test_blank_region_rejected(self, level_font):
        """Sparsest 14x10 template ('7') still disagrees on 44/140 > 0.3 pixels."""
        blank = np.zeros((14, 10), dtype=np.uint8)
        assert classify(blank, level_font, 0.3) is None

    def test_solid_block_rejected(self, level_font):
        block = np.full((14, 10), 255, dtype=np.uint8)
        assert classify(block, level_font, 0.3) is None

    def test_threshold_is_strict(self, level_font):
        """An exact copy has zero error, which is not below a zero threshold."""
        assert classify(glyph(2), level_font, 0.0) is None

    def test_aspect_gate_skips_templates(self, level_font):
        """The narrow '1' is only ever compared against itself."""
        digit, errors = classify_with_errors(glyph(1), level_font, 0.3)
        assert digit == 1
        assert errors[1] == 0.0
        assert all(e is None for i, e in enumerate(errors) if i != 1)

    def test_wide_region_matches_nothing(self, level_font):
        wide = np.full((10, 40), 255, dtype=np.uint8)
        digit, errors = classify_with_errors(wide, level_font, 1.0)
        assert digit is None
        assert errors == [None] * 10

    def test_tie_goes_to_lowest_index(self):
        bitmaps = [glyph(d) for d in range(10)]
        bitmaps[5] = bitmaps[3]
        templates = DigitTemplates(bitmaps)
        assert classify(glyph(3), templates, 0.3) == 3

    def test_best_of_several_below_threshold(self, level_font):
        """With a loose threshold several digits qualify; the closest wins."""
        region = glyph(8).copy()
        region[2:4, 0:2] = 0     # knock out one cell of the left stroke
        digit, errors = classify_with_errors(region, level_font, 0.9)
        assert digit == 8
        assert errors[8] == min(e for e in errors if e is not None)
