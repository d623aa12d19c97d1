"""
FilterCatalog: the fixed, ordered list of filters offered to the user.

Catalogs are made explicitly with default_catalog() or extended_catalog() and
passed to whatever needs them. The order is the presentation order.
"""

from .constants import C
from .filters import FilterDefinition, FilterKind


class FilterCatalog:
    """Read-only ordered collection of FilterDefinitions with unique identifiers."""
    __slots__ = ('_filters', '_by_identifier')

    def __init__(self, filters):
        filters = tuple(filters)
        by_identifier = {}
        for f in filters:
            if not isinstance(f, FilterDefinition):
                raise TypeError(f"{f!r} is not a FilterDefinition")
            if f.identifier in by_identifier:
                raise ValueError(f"duplicate filter identifier {f.identifier}")
            by_identifier[f.identifier] = f
        self._filters = filters
        self._by_identifier = by_identifier

    def __len__(self):
        return len(self._filters)

    def __iter__(self):
        return iter(self._filters)

    def __getitem__(self, i):
        return self._filters[i]

    def __contains__(self, f):
        return f in self._filters

    def __repr__(self):
        return f"<FilterCatalog {self.identifiers()}>"

    def identifiers(self):
        return [f.identifier for f in self._filters]

    def get(self, identifier):
        """Return the filter with `identifier`. Raises KeyError."""
        try:
            return self._by_identifier[identifier]
        except KeyError:
            raise KeyError(f"no filter '{identifier}' in catalog; choose from {self.identifiers()}") from None

    def entries(self):
        """(identifier, title, apply) for each filter, in order. Used to populate a chooser."""
        return [(f.identifier, f.title, f.apply) for f in self._filters]


def default_catalog():
    return FilterCatalog([
        FilterDefinition(FilterKind.NONE),
        FilterDefinition(FilterKind.SEPIA, C.SEPIA_INTENSITY),
        FilterDefinition(FilterKind.INVERT),
        FilterDefinition(FilterKind.VIGNETTE, C.VIGNETTE_INTENSITY),
        FilterDefinition(FilterKind.ZOOM_BLUR),
    ])


def extended_catalog(hue_angles=C.HUE_ANGLES):
    """The default filters followed by a hue shift for each angle, noir and posterize."""
    return FilterCatalog(list(default_catalog())
                         + [FilterDefinition(FilterKind.HUE_ROTATE, angle) for angle in hue_angles]
                         + [FilterDefinition(FilterKind.NOIR),
                            FilterDefinition(FilterKind.POSTERIZE)])
