"""
Synthetic test images. Nothing is read from disk.
"""

import sys
from os.path import abspath, dirname

import numpy as np
from skimage.metrics import structural_similarity as compare_ssim
import pytest

sys.path.append(dirname(dirname(dirname(abspath(__file__)))))

from photofilter.image_utils import grayscale
from photofilter.pixel_image import PixelImage


def make_pixels(w, h, channels=3):
    """Colour gradients plus a few solid blocks, so that every filter has something to change."""
    (yy, xx) = np.mgrid[0:h, 0:w]
    b = (xx * 255 // max(w - 1, 1))
    g = (yy * 255 // max(h - 1, 1))
    r = ((xx + yy) * 255 // max(w + h - 2, 1))
    img = np.stack([b, g, r], axis=2).astype(np.uint8)
    img[h//4:h//2, w//4:w//2] = (20, 40, 220)      # red block
    img[h//2:3*h//4, w//2:3*w//4] = (200, 200, 200) # light gray block
    if channels == 4:
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        alpha[:h//2] = 128
        img = np.concatenate([img, alpha], axis=2)
    return img


@pytest.fixture
def test_image():
    """400x300 opaque test image"""
    return PixelImage(make_pixels(400, 300))


@pytest.fixture
def small_image():
    return PixelImage(make_pixels(64, 48))


@pytest.fixture
def bgra_image():
    return PixelImage(make_pixels(64, 48, channels=4))


@pytest.fixture
def make_image():
    """Factory for test images of any size."""
    def make(w, h, channels=3):
        return PixelImage(make_pixels(w, h, channels))
    return make


def structural_similarity(imageA, imageB):
    """Structural similarity of two PixelImages on a scale of 0 to 1.0.
    Images of different shapes are not similar at all.
    https://scikit-image.org/docs/stable/api/skimage.metrics.html#skimage.metrics.structural_similarity
    """
    if imageA.shape != imageB.shape:
        return 0
    grayA = grayscale(imageA.pixels)
    grayB = grayscale(imageB.pixels)
    win_size = min(7, *grayA.shape)
    if win_size % 2 == 0:
        win_size -= 1
    if win_size < 3:
        return 1.0 if np.array_equal(grayA, grayB) else 0
    return compare_ssim(grayA, grayB, win_size=win_size, data_range=255)


@pytest.fixture
def img_sim():
    return structural_similarity


@pytest.fixture
def max_abs_diff():
    """Largest per-channel difference between two images of the same shape."""
    def diff(imageA, imageB):
        assert imageA.shape == imageB.shape
        return int(np.max(np.abs(imageA.pixels.astype(np.int16) - imageB.pixels.astype(np.int16))))
    return diff
