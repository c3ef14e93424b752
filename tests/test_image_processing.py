"""
Tests for frame preparation utilities.

Tests cover:
- Grayscale conversion from colour and other depths
- Brightness, contrast and gamma adjustments
- Silhouette thresholding
"""

import numpy as np

from slither.utils.image_processing import (
    apply_image_adjustments,
    threshold_frame,
    to_grayscale,
)


class TestToGrayscale:
    """Test suite for to_grayscale."""

    def test_gray_passthrough(self):
        img = np.random.randint(0, 256, (40, 60), dtype=np.uint8)
        assert to_grayscale(img) is img

    def test_bgr(self):
        img = np.zeros((40, 60, 3), dtype=np.uint8)
        img[:] = (255, 255, 255)
        gray = to_grayscale(img)
        assert gray.shape == (40, 60)
        assert gray.dtype == np.uint8
        assert gray.min() == 255

    def test_bgra(self):
        img = np.zeros((10, 10, 4), dtype=np.uint8)
        assert to_grayscale(img).shape == (10, 10)

    def test_float_frame_rescaled(self):
        img = np.linspace(0.0, 1.0, 100, dtype=np.float32).reshape(10, 10)
        gray = to_grayscale(img)
        assert gray.dtype == np.uint8
        assert gray.min() == 0
        assert gray.max() == 255


class TestApplyImageAdjustments:
    """Test suite for apply_image_adjustments function."""

    def test_no_adjustments(self):
        img = np.random.randint(0, 256, (100, 100), dtype=np.uint8)
        result = apply_image_adjustments(img, brightness=0, contrast=1.0, gamma=1.0)
        np.testing.assert_array_equal(result, img)

    def test_brightness_decrease(self):
        img = np.ones((50, 50), dtype=np.uint8) * 100
        result = apply_image_adjustments(img, brightness=-20, contrast=1.0, gamma=1.0)
        assert result.mean() < img.mean()

    def test_contrast_increase(self):
        img = np.linspace(50, 150, 100 * 100).astype(np.uint8).reshape(100, 100)
        result = apply_image_adjustments(img, brightness=0, contrast=1.5, gamma=1.0)
        assert result.std() > img.std()

    def test_gamma_brightens_midtones(self):
        img = np.ones((20, 20), dtype=np.uint8) * 100
        result = apply_image_adjustments(img, brightness=0, contrast=1.0, gamma=2.0)
        assert result.mean() > img.mean()


class TestThresholdFrame:
    """Test suite for threshold_frame."""

    def test_inverted_marks_dark_pixels(self):
        img = np.array([[10, 100, 101, 250]], dtype=np.uint8)
        mask = threshold_frame(img, 100, invert=True)
        assert mask.tolist() == [[255, 255, 0, 0]]

    def test_plain_marks_bright_pixels(self):
        img = np.array([[10, 100, 101, 250]], dtype=np.uint8)
        mask = threshold_frame(img, 100, invert=False)
        assert mask.tolist() == [[0, 0, 255, 255]]
