"""
The capture dialog: after a filter has been applied, ask for a caption and a
rating, or let the user cancel.
"""

import logging

from .constants import C

logger = logging.getLogger(__name__)

class CaptureResult:
    """What the user entered in the capture dialog."""
    __slots__ = ('caption', 'rating')

    def __init__(self, caption, rating):
        self.caption = caption
        self.rating = rating

    def __eq__(self, b):
        if not isinstance(b, CaptureResult):
            return NotImplemented
        return (self.caption, self.rating) == (b.caption, b.rating)

    def __hash__(self):
        return hash((self.caption, self.rating))

    def __repr__(self):
        return f"<CaptureResult caption={self.caption!r} rating={self.rating}>"


class _Cancelled:
    def __repr__(self):
        return "CANCELLED"

    def __bool__(self):
        return False

CANCELLED = _Cancelled()


def parse_rating(text):
    """Return the rating in `text`, or None if it is not an integer from 0 to 5. Empty means 0."""
    text = text.strip()
    if not text:
        return 0
    try:
        rating = int(text)
    except ValueError:
        return None
    return rating if 0 <= rating <= C.MAX_RATING else None


def prompt_capture(input_fn=input, title="Save your artwork"):
    """Ask for a caption and a rating, then confirm.
    Returns a CaptureResult, or CANCELLED if the user declined (or input ended)."""
    try:
        print(title)
        caption = input_fn("Add a caption: ").strip()
        while True:
            rating = parse_rating(input_fn(f"Rating (0-{C.MAX_RATING}): "))
            if rating is not None:
                break
            print(f"Please enter a whole number from 0 to {C.MAX_RATING}.")
        answer = input_fn("Save? [y/N] ").strip().lower()
    except EOFError:
        logger.info("capture dialog closed")
        return CANCELLED
    if answer not in ('y', 'yes'):
        return CANCELLED
    return CaptureResult(caption, rating)
