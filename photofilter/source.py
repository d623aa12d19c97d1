"""
This module provides the following functions:

fetch_candidate_images(endpoint) - Retrieve the list of images offered for filtering
ImageStream(root) - A generator of PixelImages from a file or a directory tree

"""

import os
import sys
import mimetypes
import logging

import requests

from .constants import C
from .pixel_image import PixelImage, DecodeError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://MeteC.github.io/Filterit/server/api/listImages.json"

class CatalogFetchError(RuntimeError):
    """The candidate image list could not be retrieved or parsed"""


class ImageDescriptor:
    """An image offered by the catalog endpoint."""
    __slots__ = ('id', 'thumb_url', 'url', 'title', 'author', 'updated')

    def __init__(self, *, id, thumb_url, url, title=None, author=None, updated): # pylint: disable=redefined-builtin
        self.id = id
        self.thumb_url = thumb_url
        self.url = url
        self.title = title
        self.author = author
        self.updated = updated

    def __eq__(self, b):
        if not isinstance(b, ImageDescriptor):
            return NotImplemented
        return all(getattr(self, k) == getattr(b, k) for k in self.__slots__)

    def __hash__(self):
        return hash((self.id, self.url))

    def __repr__(self):
        return f"<ImageDescriptor {self.id} {self.title!r} by {self.author!r}>"

    @classmethod
    def fromDict(cls, d):
        try:
            return cls(id=int(d['id']),
                       thumb_url=str(d['thumb_url']),
                       url=str(d['url']),
                       title=d.get('title'),
                       author=d.get('author'),
                       updated=str(d['updated']))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CatalogFetchError(f"bad image entry {d!r}: {e}") from e


def parse_image_list(payload):
    """Parse the {"images": [...]} JSON document."""
    try:
        images = payload['images']
    except (KeyError, TypeError) as e:
        raise CatalogFetchError("response has no 'images' list") from e
    if not isinstance(images, list):
        raise CatalogFetchError("'images' is not a list")
    return [ImageDescriptor.fromDict(d) for d in images]


def fetch_candidate_images(endpoint=DEFAULT_ENDPOINT, *, caller=None, timeout=C.DEFAULT_GET_TIMEOUT):
    """GET the endpoint and return a list of ImageDescriptors.
    :param caller: a function with the signature of requests.get; inject one for tests.
    :raises CatalogFetchError:
    """
    caller = caller or requests.get
    logger.debug("fetching %s", endpoint)
    try:
        r = caller(endpoint, timeout=timeout)
        r.raise_for_status()
        payload = r.json()
    except requests.RequestException as e:
        raise CatalogFetchError(f"cannot fetch {endpoint}: {e}") from e
    except ValueError as e:
        raise CatalogFetchError(f"{endpoint} did not return JSON: {e}") from e
    images = parse_image_list(payload)
    logger.info("%s: %d images", endpoint, len(images))
    return images


def is_image_file(path):
    if os.path.splitext(path)[1].lower() in C.IMAGE_EXTENSIONS:
        return True
    mtype = mimetypes.guess_type(path)[0]
    return mtype is not None and mtype.split("/")[0] == 'image'


def ImageStream(root):
    """Generator for a series of PixelImage objects from a file or a directory.
    Returns images in sort order within each directory; unreadable images are logged and skipped."""
    if not os.path.isdir(root):
        yield PixelImage.from_file(root)
        return
    for (dirpath, dirnames, filenames) in os.walk(root):
        dirnames.sort()                                  # makes the directories recurse in sort order
        for fname in sorted(filenames):
            path = os.path.join(dirpath, fname)
            if not is_image_file(path) or os.path.getsize(path)==0:
                continue
            try:
                yield PixelImage.from_file(path)
            except DecodeError as e:
                logger.warning("Not an image file '%s': %s", path, e)
                continue
            except FileNotFoundError as e:
                print(f"Cannot read '{path}': {e}",file=sys.stderr)
                continue
