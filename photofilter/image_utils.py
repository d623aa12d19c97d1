"""
Pixel helpers shared by the operations.
"""

import cv2
import numpy as np


def clamp_img(img):
    """Round and clamp values to [0, 255] and return uint8."""
    return np.clip(np.rint(img), 0, 255).astype(np.uint8)


def split_alpha(pixels):
    """Return (bgr, alpha); alpha is None for 3-channel images."""
    if pixels.shape[2] == 4:
        return (pixels[:, :, :3], pixels[:, :, 3:])
    return (pixels, None)


def merge_alpha(bgr, alpha):
    """Put back the alpha channel removed by split_alpha()"""
    if alpha is None:
        return bgr
    return np.concatenate([bgr, alpha], axis=2)


def grayscale(pixels):
    code = cv2.COLOR_BGRA2GRAY if pixels.shape[2] == 4 else cv2.COLOR_BGR2GRAY
    return cv2.cvtColor(pixels, code)
