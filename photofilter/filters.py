"""
The user-selectable filters.

A FilterDefinition is a FilterKind plus an optional fixed parameter (the hue
angle, or an intensity). build_graph() turns it into a FilterGraph for a given
image size; the kinds are dispatched in one place, build_operations().
"""

import logging
from enum import Enum

from .constants import C
from .graph import FilterGraph, GraphBuildError
from .operation import Operation, OperationKind, OperationError
from .pixel_image import PixelImage

logger = logging.getLogger(__name__)

class FilterKind(Enum):
    NONE       = 'none'
    SEPIA      = 'sepia'
    INVERT     = 'invert'
    VIGNETTE   = 'vignette'
    ZOOM_BLUR  = 'zoom_blur'
    HUE_ROTATE = 'hue_rotate'
    NOIR       = 'noir'
    POSTERIZE  = 'posterize'


TITLES = {
    FilterKind.NONE:       "No Filter",
    FilterKind.SEPIA:      "Sepia",
    FilterKind.INVERT:     "Invert Colours",
    FilterKind.VIGNETTE:   "Vignette",
    FilterKind.ZOOM_BLUR:  "Zoom Blur",
    FilterKind.HUE_ROTATE: "{angle}º Hue Shift",
    FilterKind.NOIR:       "Film Noir",
    FilterKind.POSTERIZE:  "Poster Effect",
}

# Kinds whose fixed parameter can be chosen, and its default
PARAMETER_DEFAULTS = {
    FilterKind.SEPIA:      C.SEPIA_INTENSITY,
    FilterKind.VIGNETTE:   C.VIGNETTE_INTENSITY,
    FilterKind.HUE_ROTATE: None,
}


def zoom_crop_rect(size, margin=C.ZOOM_BLUR_CROP):
    """The rectangle that trims `margin` of the original width and height from each side."""
    (w, h) = size
    return (margin * w, margin * h, w - 2 * margin * w, h - 2 * margin * h)


def build_operations(kind, parameter, size):
    """Return the list of operations that implement filter `kind` for an image of `size`."""
    match kind:
        case FilterKind.NONE:
            raise GraphBuildError("the None filter has no graph")
        case FilterKind.SEPIA:
            return [Operation(OperationKind.SEPIA, intensity=parameter)]
        case FilterKind.INVERT:
            return [Operation(OperationKind.INVERT)]
        case FilterKind.VIGNETTE:
            return [Operation(OperationKind.VIGNETTE, intensity=parameter)]
        case FilterKind.ZOOM_BLUR:
            # zoom blur smears the edges, so trim them off. The crop is computed from the original size.
            return [Operation(OperationKind.ZOOM_BLUR, amount=C.ZOOM_BLUR_AMOUNT),
                    Operation(OperationKind.CROP, rect=zoom_crop_rect(size))]
        case FilterKind.HUE_ROTATE:
            return [Operation(OperationKind.HUE_ROTATE, angle=parameter)]
        case FilterKind.NOIR:
            return [Operation(OperationKind.NOIR)]
        case FilterKind.POSTERIZE:
            return [Operation(OperationKind.POSTERIZE)]
    raise GraphBuildError(f"unknown filter kind {kind!r}")


class FilterDefinition:
    """One named filter. Immutable."""
    __slots__ = ('_kind', '_parameter')

    def __init__(self, kind, parameter=None):
        kind = FilterKind(kind)
        if parameter is None:
            parameter = PARAMETER_DEFAULTS.get(kind)
        elif kind not in PARAMETER_DEFAULTS:
            raise ValueError(f"filter {kind.value} takes no parameter")
        if kind == FilterKind.HUE_ROTATE and parameter is None:
            raise ValueError("hue_rotate needs an angle")
        object.__setattr__(self, '_kind', kind)
        object.__setattr__(self, '_parameter', parameter)

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def kind(self):
        return self._kind

    @property
    def parameter(self):
        return self._parameter

    @property
    def identifier(self):
        """Stable key for selecting or persisting a filter choice."""
        if self._kind == FilterKind.HUE_ROTATE:
            return f"{self._kind.value}_{self._parameter:g}"
        return self._kind.value

    @property
    def title(self):
        """User interface title for humans to read"""
        if self._kind == FilterKind.HUE_ROTATE:
            return TITLES[self._kind].format(angle=f"{self._parameter:g}")
        return TITLES[self._kind]

    def __eq__(self, b):
        if not isinstance(b, FilterDefinition):
            return NotImplemented
        return self._kind == b._kind and self._parameter == b._parameter

    def __hash__(self):
        return hash((self._kind, self._parameter))

    def __repr__(self):
        if self._parameter is None:
            return f"<FilterDefinition {self._kind.value}>"
        return f"<FilterDefinition {self._kind.value} {self._parameter}>"

    def build_graph(self, size):
        """Build the FilterGraph for an image of size (width, height).
        :raises GraphBuildError: if there is no graph (the None filter) or the operations can't be made.
        """
        (w, h) = size
        if w <= 0 or h <= 0:
            raise GraphBuildError(f"{self.identifier}: bad image size {size}")
        try:
            return FilterGraph(*build_operations(self._kind, self._parameter, size))
        except OperationError as e:
            raise GraphBuildError(f"{self.identifier}: {e}") from e

    def apply(self, image:PixelImage):
        """Apply the filter to an image. Returns the filtered image, or None if the filter failed.
        The None filter returns `image` itself."""
        if self._kind == FilterKind.NONE:
            return image
        try:
            graph = self.build_graph(image.size)
        except GraphBuildError as e:
            logger.warning("FilterDefinition %s - couldn't create filter graph: %s", self.identifier, e)
            return None
        return graph.apply(image)
