"""This module provides the following:

PixelImage - Holds a single decoded image and the logic for working on it with OpenCV.
             The pixels are a read-only numpy array in OpenCV's BGR (or BGRA) order.

decode() - turn encoded bytes (JPEG, PNG, ...) into a PixelImage.

Images based on disk files are read through an LRU cache of the raw bytes, so
that the same file can be decoded repeatedly without going back to the disk.
"""
import os
import functools
import copy
import logging

import cv2
import numpy as np

from .constants import C

MAXSIZE_CACHE=128

P_PATH = 'path'
P_OP   = 'op'

logger = logging.getLogger(__name__)

class DecodeError(RuntimeError):
    """cv2 cannot decode the image bytes"""


@functools.lru_cache(maxsize=MAXSIZE_CACHE)
def _bytes_read(path, mtime_ns, size): # pylint: disable=unused-argument
    with open(path,"rb") as f:
        return f.read()

def bytes_read(path):
    """Returns the file, which is compressed as a JPEG or PNG.
    Cached; a file rewritten since it was cached is read again."""
    assert path is not None
    st = os.stat(path)
    return _bytes_read(os.fspath(path), st.st_mtime_ns, st.st_size)


def _freeze(img):
    img.flags.writeable = False
    return img


def decode(data):
    """Decode encoded image bytes into a PixelImage.
    Grayscale images are promoted to BGR; an alpha channel is kept.
    :raises DecodeError: if the bytes are not an image OpenCV can read.
    """
    if not data:
        raise DecodeError("no image data")
    img = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise DecodeError(f"cannot decode {len(data)} bytes")
    if img.dtype != np.uint8:
        # 16-bit PNG and TIFF
        img = (img // 257).astype(np.uint8)
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return PixelImage(img, copy_pixels=False)


class PixelImage:
    """Abstraction to hold an image.
    The pixels can't be written; operations return new PixelImages."""
    jpeg_quality = C.DEFAULT_JPEG_QUALITY

    def __init__(self, pixels, *, history=None, copy_pixels=True):
        """:param copy_pixels: if False, take ownership of the array rather than copying it.
        Only pass False for arrays nobody else can write, such as a kernel's output
        or a view of another PixelImage's pixels.
        """
        pixels = np.asarray(pixels)
        if pixels.dtype != np.uint8:
            raise ValueError(f"pixels must be uint8, not {pixels.dtype}")
        if pixels.ndim != 3 or pixels.shape[2] not in (3,4):
            raise ValueError(f"pixels must be (h, w, 3) or (h, w, 4), not {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError(f"image has no pixels: {pixels.shape}")
        if copy_pixels and not (pixels.base is None and not pixels.flags.writeable):
            # a read-only view can still be changed through its writable base
            pixels = np.array(pixels, order='C')
        elif not pixels.flags.c_contiguous:
            pixels = np.ascontiguousarray(pixels)
        if pixels.flags.writeable:
            pixels = _freeze(pixels)
        self._pixels = pixels
        self.history = history if history is not None else []

    @classmethod
    def from_file(cls, path):
        """Read and decode an image file. Raises FileNotFoundError or DecodeError."""
        img = decode(bytes_read(path))
        img.history = [[P_PATH, os.fspath(path)]]
        return img

    def __eq__(self, b):
        if not isinstance(b, PixelImage):
            return NotImplemented
        return self._pixels.shape == b._pixels.shape and np.array_equal(self._pixels, b._pixels)

    def __hash__(self):
        return hash((self._pixels.shape, self._pixels.tobytes()))

    def __repr__(self):
        return f"<PixelImage {self.width}x{self.height}x{self.channels} history={self.history}>"

    @property
    def pixels(self):
        """return the numpy array of the image. It is not writable."""
        return self._pixels

    @property
    def size(self):
        """(width, height) in pixels"""
        return (self._pixels.shape[1], self._pixels.shape[0])

    @property
    def width(self):
        return self._pixels.shape[1]

    @property
    def height(self):
        return self._pixels.shape[0]

    @property
    def channels(self):
        return self._pixels.shape[2]

    @property
    def has_alpha(self):
        return self.channels == 4

    @property
    def shape(self):
        """Returns shape. note: shape[0] = height, shape[1]=width, shape[2]==depth"""
        return tuple(self._pixels.shape)

    def writable_copy(self):
        """Returns a copy of the pixels into which we can write"""
        return self._pixels.copy()

    def derive(self, pixels, step):
        """Return a new PixelImage made from this one, recording `step` in the history."""
        history = copy.copy(self.history)
        history.append(step)
        return PixelImage(pixels, history=history, copy_pixels=False)

    def encode(self, ext='.jpg', quality=None):
        """Returns the image compressed. JPEG drops the alpha channel.
        :raises ValueError: if OpenCV has no encoder for `ext`.
        """
        params = []
        pixels = self._pixels
        if ext.lower() in ('.jpg', '.jpeg'):
            params = [cv2.IMWRITE_JPEG_QUALITY, quality or self.jpeg_quality]
            if self.has_alpha:
                pixels = cv2.cvtColor(pixels, cv2.COLOR_BGRA2BGR)
        try:
            (ok, buf) = cv2.imencode(ext, pixels, params)
        except cv2.error as e:
            raise ValueError(f"cannot encode image as {ext}: {e}") from e
        if not ok:
            raise ValueError(f"cannot encode image as {ext}")
        return buf.tobytes()

    def save(self, path, quality=None):
        """Write the image to a file; the format comes from the extension.
        Nothing is written if the image cannot be encoded."""
        ext = os.path.splitext(os.fspath(path))[1] or '.jpg'
        logger.debug("save path=%s self=%s", path, self)
        data = self.encode(ext, quality=quality)
        with open(path, "wb") as f:
            f.write(data)
