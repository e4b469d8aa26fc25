"""Tests for scale_dimensions and Scaler."""

import random

import pytest
from PIL import Image

from artwork.errors import ValidationError
from artwork.models import BoundBox, SMALL_BOUND, THUMBNAIL_BOUND
from artwork.scaler import Scaler, scale_dimensions


class TestScaleDimensions:
    """Tests for the aspect-preserving size computation."""

    def test_landscape_thumbnail(self):
        """Test 2000x1500 into 50x50."""
        assert scale_dimensions(2000, 1500, THUMBNAIL_BOUND) == (50, 37)

    def test_landscape_small(self):
        """Test 2000x1500 into 500x500."""
        assert scale_dimensions(2000, 1500, SMALL_BOUND) == (500, 375)

    def test_portrait(self):
        """Test tall source is bound by height."""
        assert scale_dimensions(612, 792, SMALL_BOUND) == (386, 500)

    def test_same_ratio_fills_bound(self):
        assert scale_dimensions(1000, 1000, SMALL_BOUND) == (500, 500)

    def test_upscales_small_sources(self):
        """Test sources smaller than the bound are scaled up to it."""
        assert scale_dimensions(20, 10, THUMBNAIL_BOUND) == (50, 25)

    def test_non_square_bound(self):
        assert scale_dimensions(300, 100, BoundBox(200, 100)) == (200, 66)
        assert scale_dimensions(100, 100, BoundBox(200, 100)) == (100, 100)

    def test_extreme_ratio_never_zero(self):
        assert scale_dimensions(10000, 1, THUMBNAIL_BOUND) == (50, 1)

    @pytest.mark.parametrize('width,height', [(0, 10), (10, 0), (-5, 10)])
    def test_invalid_source(self, width, height):
        with pytest.raises(ValidationError):
            scale_dimensions(width, height, THUMBNAIL_BOUND)

    def test_properties_hold_for_random_inputs(self):
        """Test one side matches the bound and the aspect ratio is kept."""
        rng = random.Random(1234)
        for _ in range(500):
            w, h = rng.randint(1, 5000), rng.randint(1, 5000)
            bound = BoundBox(rng.randint(1, 1000), rng.randint(1, 1000))
            out_w, out_h = scale_dimensions(w, h, bound)

            assert out_w == bound.width or out_h == bound.height
            assert out_w <= bound.width and out_h <= bound.height
            # Floor on the derived side loses less than one pixel
            if out_w == bound.width:
                assert abs(out_h * w - out_w * h) < w or out_h == 1
            else:
                assert abs(out_w * h - out_h * w) < h or out_w == 1


class TestScaler:
    """Tests for Scaler resampling."""

    def test_scale_returns_new_image(self):
        """Test scaling produces a new image of the computed size."""
        img = Image.new('RGB', (2000, 1500), color='blue')
        scaled = Scaler().scale(img, THUMBNAIL_BOUND)

        assert scaled.size == (50, 37)
        assert img.size == (2000, 1500)

    def test_uses_lanczos_by_default(self):
        assert Scaler().resample == Image.Resampling.LANCZOS

    def test_filtered_downscale_averages_pixels(self):
        """Test a fine checkerboard becomes grey rather than aliasing."""
        img = Image.new('L', (100, 100))
        img.putdata([255 if (x + y) % 2 else 0 for y in range(100) for x in range(100)])

        scaled = Scaler().scale(img, BoundBox(10, 10))
        values = list(scaled.getdata())

        assert all(64 < v < 192 for v in values)
