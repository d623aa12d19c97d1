"""
FilterGraph: a linear chain of Operations.
"""

import logging

from .operation import Operation, OperationError
from .pixel_image import PixelImage

logger = logging.getLogger(__name__)

class GraphBuildError(RuntimeError):
    """A filter graph could not be built"""


def validate_operation(op):
    if not isinstance(op, Operation):
        raise GraphBuildError(f"{op!r} is not an Operation")


class FilterGraph:
    """Linear filter graph. Stage 0 receives the input image; stage i receives the output of stage i-1.
    Graphs are immutable."""
    __slots__ = ('_operations',)

    def __init__(self, *operations):
        if not operations:
            raise GraphBuildError("a filter graph needs at least one operation")
        for op in operations:
            validate_operation(op)
        self._operations = tuple(operations)

    @property
    def operations(self):
        return self._operations

    @property
    def input_operation(self):
        return self._operations[0]

    @property
    def output_operation(self):
        """The last stage (may be the input stage)"""
        return self._operations[-1]

    def __len__(self):
        return len(self._operations)

    def __iter__(self):
        return iter(self._operations)

    def __eq__(self, b):
        if not isinstance(b, FilterGraph):
            return NotImplemented
        return self._operations == b._operations

    def __hash__(self):
        return hash(self._operations)

    def __repr__(self):
        return f"<FilterGraph {' -> '.join(op.kind.value for op in self._operations)}>"

    def run(self, image:PixelImage):
        """Run the image through every stage in order.
        :raises OperationError: from the first stage that fails, naming the stage.
        """
        for (i, op) in enumerate(self._operations):
            logger.debug("stage %d: %s", i, op)
            try:
                image = op.execute(image)
            except OperationError as e:
                raise OperationError(f"stage {i} ({op.kind.value} {dict(op.params)}): {e}") from e
        return image

    def apply(self, image:PixelImage):
        """Apply the chain to an image. Returns the output image, or None if any stage failed."""
        try:
            return self.run(image)
        except OperationError as e:
            logger.warning("FilterGraph failure at %s", e)
            return None
