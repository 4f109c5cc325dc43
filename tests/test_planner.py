"""Tests for variant planning."""

import pytest

from webp_variants.core.exceptions import CorruptInput
from webp_variants.core.planner import plan, scaled_height


class TestScaledHeight:
    """Tests for scaled_height."""

    def test_exact_ratio(self):
        """Test an exact downscale."""
        assert scaled_height(2000, 1500, 480) == 360

    def test_half_rounds_up(self):
        """Test that .5 rounds up."""
        # 3 * 1 / 2 = 1.5
        assert scaled_height(2, 3, 1) == 2

    def test_rounds_down_below_half(self):
        """Test that fractions below .5 round down."""
        # 1000 * 480 / 1500 = 320.0; 1001 * 480 / 1500 = 320.32
        assert scaled_height(1500, 1001, 480) == 320

    def test_minimum_height_is_one(self):
        """Test that very wide images keep at least one row."""
        assert scaled_height(10000, 1, 480) == 1


class TestPlan:
    """Tests for plan."""

    def test_wide_image_gets_full_ladder(self):
        """Test a 2000px image gets every breakpoint plus the original."""
        specs = plan(2000, 1500, [480, 960, 1440])

        assert [s.breakpoint for s in specs] == [480, 960, 1440, None]
        assert [(s.width, s.height) for s in specs] == [
            (480, 360),
            (960, 720),
            (1440, 1080),
            (2000, 1500),
        ]

    def test_narrow_image_gets_original_only(self):
        """Test an image narrower than every breakpoint gets one variant."""
        specs = plan(300, 200, [480, 960, 1440])

        assert len(specs) == 1
        assert specs[0].is_original
        assert (specs[0].width, specs[0].height) == (300, 200)

    def test_breakpoint_equal_to_width_is_skipped(self):
        """Test that a breakpoint equal to the width duplicates the original and is skipped."""
        specs = plan(960, 540, [480, 960, 1440])
        assert [s.breakpoint for s in specs] == [480, None]

    def test_unsorted_duplicate_breakpoints(self):
        """Test the ladder is sorted and de-duplicated."""
        specs = plan(1000, 1000, [960, 480, 480])
        assert [s.breakpoint for s in specs] == [480, 960, None]

    def test_never_upscales(self):
        """Test no variant is wider than the source."""
        for spec in plan(1200, 800, [480, 960, 1440, 4000]):
            assert spec.width <= 1200

    def test_suffix(self):
        """Test variant suffixes match the key naming."""
        specs = plan(1000, 500, [480])
        assert [s.suffix for s in specs] == ["-480", ""]

    @pytest.mark.parametrize("width,height", [(0, 100), (100, 0), (-1, 10)])
    def test_invalid_dimensions(self, width, height):
        """Test zero or negative dimensions are corrupt input."""
        with pytest.raises(CorruptInput):
            plan(width, height, [480])
