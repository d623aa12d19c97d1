"""
Operation implementation and the elementary image transforms.

An Operation is a kind plus a read-only mapping of parameters. The pixel work
is done by kernels, plain functions registered per kind with @kernel. A kind
with no registered kernel can still be described, but fails when executed.
"""

import math
import logging
import numbers
from enum import Enum
from types import MappingProxyType

import cv2
import numpy as np

from .constants import C
from .image_utils import clamp_img, split_alpha, merge_alpha, grayscale
from .pixel_image import PixelImage, P_OP

logger = logging.getLogger(__name__)

class OperationError(RuntimeError):
    """An operation could not be constructed or executed"""


class OperationKind(Enum):
    IDENTITY   = 'identity'
    SEPIA      = 'sepia'
    INVERT     = 'invert'
    VIGNETTE   = 'vignette'
    ZOOM_BLUR  = 'zoom_blur'
    CROP       = 'crop'
    HUE_ROTATE = 'hue_rotate'
    POSTERIZE  = 'posterize'
    NOIR       = 'noir'


## Parameter checking. Each checker returns the normalized value or raises ValueError.

REQUIRED = object()

def _number(v):
    if isinstance(v, bool) or not isinstance(v, numbers.Real) or not math.isfinite(v):
        raise ValueError(f"{v!r} is not a finite number")
    return float(v)

def _unit(v):
    v = _number(v)
    if not 0.0 <= v <= 1.0:
        raise ValueError(f"{v} is not in 0..1")
    return v

def _positive(v):
    v = _number(v)
    if v <= 0:
        raise ValueError(f"{v} is not positive")
    return v

def _non_negative(v):
    v = _number(v)
    if v < 0:
        raise ValueError(f"{v} is negative")
    return v

def _levels(v):
    if isinstance(v, bool) or not isinstance(v, numbers.Integral) or not 2 <= v <= 255:
        raise ValueError(f"{v!r} is not an integer in 2..255")
    return int(v)

def _vector(n):
    def check(v):
        try:
            values = tuple(v)
        except TypeError as e:
            raise ValueError(f"{v!r} is not a vector") from e
        if len(values) != n:
            raise ValueError(f"{v!r} does not have {n} components")
        return tuple(_number(x) for x in values)
    return check

def _rect(v):
    (x, y, w, h) = _vector(4)(v)
    if w <= 0 or h <= 0:
        raise ValueError(f"rectangle {v!r} is empty")
    return (x, y, w, h)

def _optional(check):
    return lambda v: None if v is None else check(v)


# kind -> {param name: (default, checker)}
PARAMETER_SCHEMA = {
    OperationKind.IDENTITY:   {},
    OperationKind.SEPIA:      {'intensity': (C.SEPIA_INTENSITY, _unit)},
    OperationKind.INVERT:     {},
    OperationKind.VIGNETTE:   {'intensity': (C.VIGNETTE_INTENSITY, _unit),
                               'radius':    (C.VIGNETTE_RADIUS, _positive)},
    OperationKind.ZOOM_BLUR:  {'amount':    (C.ZOOM_BLUR_AMOUNT, _non_negative),
                               'center':    (None, _optional(_vector(2)))},
    OperationKind.CROP:       {'rect':      (REQUIRED, _rect)},
    OperationKind.HUE_ROTATE: {'angle':     (REQUIRED, _number)},
    OperationKind.POSTERIZE:  {'levels':    (C.POSTERIZE_LEVELS, _levels)},
    OperationKind.NOIR:       {},
}


KERNELS = {}

def kernel(kind):
    """Register the function as the pixel implementation of `kind`."""
    def register(func):
        KERNELS[kind] = func
        return func
    return register

def available_kinds():
    return [kind for kind in OperationKind if kind in KERNELS]


class Operation:
    """A single elementary transform with its parameters. Immutable."""
    __slots__ = ('_kind', '_params')

    def __init__(self, kind, **params):
        try:
            kind = OperationKind(kind)
        except ValueError as e:
            raise OperationError(f"unknown operation kind {kind!r}") from e
        schema = PARAMETER_SCHEMA[kind]
        unknown = set(params) - set(schema)
        if unknown:
            raise OperationError(f"{kind.value}: unknown parameters {sorted(unknown)}")
        checked = {}
        for (name, (default, check)) in schema.items():
            value = params.get(name, default)
            if value is REQUIRED:
                raise OperationError(f"{kind.value}: missing parameter '{name}'")
            try:
                checked[name] = check(value)
            except ValueError as e:
                raise OperationError(f"{kind.value}: bad parameter {name}={value!r}: {e}") from e
        object.__setattr__(self, '_kind', kind)
        object.__setattr__(self, '_params', MappingProxyType(checked))

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def kind(self):
        return self._kind

    @property
    def params(self):
        return self._params

    def __eq__(self, b):
        if not isinstance(b, Operation):
            return NotImplemented
        return self._kind == b._kind and dict(self._params) == dict(b._params)

    def __hash__(self):
        return hash((self._kind, tuple(sorted(self._params.items()))))

    def __repr__(self):
        args = "".join(f" {k}={v}" for (k, v) in self._params.items())
        return f"<Operation {self._kind.value}{args}>"

    def execute(self, image:PixelImage):
        """Run the transform on `image` and return a new PixelImage.
        :raises OperationError: if there is no kernel for the kind, or the parameters don't fit the image.
        """
        if self._kind == OperationKind.IDENTITY:
            return image
        try:
            func = KERNELS[self._kind]
        except KeyError as e:
            raise OperationError(f"{self._kind.value}: not available on this platform") from e
        logger.debug("execute %s on %s", self, image)
        try:
            out = func(image.pixels, **self._params)
        except (cv2.error, ValueError) as e: # pylint: disable=catching-non-exception
            raise OperationError(f"{self._kind.value} failed: {e}") from e
        return image.derive(out, [P_OP, self._kind.value, dict(self._params)])


## Kernels. Each receives read-only pixels (BGR or BGRA, uint8) and returns new pixels.

# BGR in, BGR out. The rows are the classic RGB sepia matrix reversed for OpenCV channel order.
SEPIA_MATRIX = np.array([[0.131, 0.534, 0.272],
                         [0.168, 0.686, 0.349],
                         [0.189, 0.769, 0.393]], dtype=np.float32)

@kernel(OperationKind.SEPIA)
def sepia(pixels, *, intensity):
    (bgr, alpha) = split_alpha(pixels)
    src  = bgr.astype(np.float32)
    tone = cv2.transform(src, SEPIA_MATRIX)
    out  = (1.0 - intensity) * src + intensity * tone
    return merge_alpha(clamp_img(out), alpha)


@kernel(OperationKind.INVERT)
def invert(pixels):
    (bgr, alpha) = split_alpha(pixels)
    return merge_alpha(255 - bgr, alpha)


@kernel(OperationKind.VIGNETTE)
def vignette(pixels, *, intensity, radius):
    """Darken radially from the center. The corners are darkened by `intensity`
    when radius is 1; a larger radius pushes the falloff outwards."""
    (h, w) = pixels.shape[:2]
    (yy, xx) = np.ogrid[0:h, 0:w]
    dx = (xx - (w - 1) / 2.0) / (w / 2.0)
    dy = (yy - (h - 1) / 2.0) / (h / 2.0)
    d  = np.sqrt(dx * dx + dy * dy) / math.sqrt(2)
    falloff = np.clip(d / radius, 0.0, 1.0) ** 2
    mask = (1.0 - intensity * falloff).astype(np.float32)
    (bgr, alpha) = split_alpha(pixels)
    out = bgr.astype(np.float32) * mask[:, :, np.newaxis]
    return merge_alpha(clamp_img(out), alpha)


@kernel(OperationKind.HUE_ROTATE)
def hue_rotate(pixels, *, angle):
    (bgr, alpha) = split_alpha(pixels)
    # float32 HSV keeps hue in degrees, [0, 360)
    hsv = cv2.cvtColor(bgr.astype(np.float32) / 255.0, cv2.COLOR_BGR2HSV)
    hsv[:, :, 0] = np.mod(hsv[:, :, 0] + angle, 360.0)
    out = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR) * 255.0
    return merge_alpha(clamp_img(out), alpha)


@kernel(OperationKind.POSTERIZE)
def posterize(pixels, *, levels):
    steps = np.arange(256) * levels // 256
    lut = clamp_img(steps * 255.0 / (levels - 1))
    (bgr, alpha) = split_alpha(pixels)
    return merge_alpha(lut[bgr], alpha)


NOIR_CONTRAST = 0.8

def noir_curve():
    """Lookup table blending the identity with a smoothstep S-curve."""
    x = np.arange(256) / 255.0
    s = x * x * (3.0 - 2.0 * x)
    return clamp_img(((1.0 - NOIR_CONTRAST) * x + NOIR_CONTRAST * s) * 255.0)

@kernel(OperationKind.NOIR)
def noir(pixels):
    (_, alpha) = split_alpha(pixels)
    gray = noir_curve()[grayscale(pixels)]
    return merge_alpha(np.repeat(gray[:, :, np.newaxis], 3, axis=2), alpha)


@kernel(OperationKind.ZOOM_BLUR)
def zoom_blur(pixels, *, amount, center):
    """Average copies of the image scaled progressively about `center`.
    The largest copy is enlarged by `amount` pixels at the far edge."""
    (h, w) = pixels.shape[:2]
    if center is None:
        center = ((w - 1) / 2.0, (h - 1) / 2.0)
    samples = max(1, int(math.ceil(amount))) + 1
    max_scale = 1.0 + amount / (max(w, h) / 2.0)
    acc = np.zeros(pixels.shape, dtype=np.float32)
    for i in range(samples):
        scale = 1.0 + (max_scale - 1.0) * i / (samples - 1)
        m = cv2.getRotationMatrix2D(center, 0, scale)
        acc += cv2.warpAffine(pixels, m, (w, h), flags=cv2.INTER_LINEAR,
                              borderMode=cv2.BORDER_REFLECT).astype(np.float32)
    return clamp_img(acc / samples)


def _round(v):
    return int(math.floor(v + 0.5))

@kernel(OperationKind.CROP)
def crop(pixels, *, rect):
    (h, w) = pixels.shape[:2]
    (x, y, cw, ch) = (_round(v) for v in rect)
    if cw <= 0 or ch <= 0 or x < 0 or y < 0 or x + cw > w or y + ch > h:
        raise ValueError(f"rectangle {rect} is outside of {w}x{h} image")
    return pixels[y:y+ch, x:x+cw]
