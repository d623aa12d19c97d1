"""
Storage layer for finished artworks.

An ArtworkLibrary is a directory. Each artwork is two files named by its record id:
the image as a JPEG, and a JSON sidecar holding the caption, rating and timestamp.
Writers on the same directory are serialised with a lock file.
"""

import os
import json
import uuid
import functools
import logging
from datetime import datetime
from os.path import join

from filelock import FileLock

from .constants import C
from .pixel_image import PixelImage

logger = logging.getLogger(__name__)

LOCK_NAME = '.library.lock'

@functools.lru_cache(maxsize=4)
def mkdirs(path):
    logger.debug("mkdirs %s",path)
    os.makedirs(path, exist_ok = True)


class ArtworkRecord:
    """A stored artwork. The image itself stays on disk until load_image() is called."""
    RECORD_VERSION = 1
    __slots__ = ('record_id', 'caption', 'created', 'rating', 'image_name')

    def __init__(self, *, record_id, caption, created, rating, image_name):
        self.record_id  = record_id
        self.caption    = caption
        self.created    = created
        self.rating     = rating
        self.image_name = image_name

    def __eq__(self, b):
        if not isinstance(b, ArtworkRecord):
            return NotImplemented
        return all(getattr(self, k) == getattr(b, k) for k in self.__slots__)

    def __hash__(self):
        return hash(self.record_id)

    def __repr__(self):
        return f"<ArtworkRecord {self.record_id} caption={self.caption!r} rating={self.rating} created={self.created}>"

    def dict(self):
        return {'version': self.RECORD_VERSION,
                'record_id': self.record_id,
                'caption': self.caption,
                'created': self.created.isoformat(),
                'rating': self.rating,
                'image_name': self.image_name}

    @property
    def json(self):
        return json.dumps(self.dict())

    @classmethod
    def fromJSON(cls, s):
        kwargs = json.loads(s)
        if kwargs.get('version') != cls.RECORD_VERSION:
            raise ValueError(f"Cannot load ArtworkRecord JSON version {kwargs.get('version')}")
        del kwargs['version']
        kwargs['created'] = datetime.fromisoformat(kwargs['created'])
        return cls(**kwargs)


def validate_rating(rating):
    if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= C.MAX_RATING:
        raise ValueError(f"rating must be an integer from 0 to {C.MAX_RATING}, not {rating!r}")


class ArtworkLibrary:
    """Create, list and delete artworks stored under `root`."""
    def __init__(self, root, *, jpeg_quality=C.DEFAULT_JPEG_QUALITY):
        self.root = os.fspath(root)
        self.jpeg_quality = jpeg_quality
        mkdirs(self.root)
        self.lock = FileLock(join(self.root, LOCK_NAME))

    def __repr__(self):
        return f"<ArtworkLibrary {self.root}>"

    def _json_path(self, record_id):
        return join(self.root, record_id + '.json')

    def save(self, image:PixelImage, caption, created=None, rating=0):
        """Store a new artwork and return its record.
        :raises ValueError: if the rating is not 0..5
        """
        validate_rating(rating)
        if created is None:
            created = datetime.now()
        record_id = uuid.uuid4().hex
        record = ArtworkRecord(record_id=record_id, caption=caption or '', created=created,
                               rating=rating, image_name=record_id + '.jpg')
        with self.lock:
            image.save(join(self.root, record.image_name), quality=self.jpeg_quality)
            # the sidecar is written last; a record without one is not listed
            with open(self._json_path(record_id), "w") as fd:
                fd.write(record.json)
        logger.info("saved %s", record)
        return record

    def list_all(self, order_by_timestamp=True):
        """Return all the records. Oldest first if order_by_timestamp, otherwise by record id."""
        records = []
        for fname in sorted(os.listdir(self.root)):
            if not fname.endswith('.json'):
                continue
            with open(join(self.root, fname), "r") as fd:
                try:
                    records.append(ArtworkRecord.fromJSON(fd.read()))
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning("skipping unreadable record %s: %s", fname, e)
        if order_by_timestamp:
            records.sort(key=lambda r: (r.created, r.record_id))
        return records

    def get(self, record_id):
        """Return the record with `record_id`. Raises KeyError."""
        try:
            with open(self._json_path(record_id), "r") as fd:
                return ArtworkRecord.fromJSON(fd.read())
        except FileNotFoundError:
            raise KeyError(record_id) from None

    def remove(self, record:ArtworkRecord):
        """Delete the record and its image.
        :raises KeyError: if the record is not in the library.
        """
        with self.lock:
            json_path = self._json_path(record.record_id)
            if not os.path.exists(json_path):
                logger.warning("Can't remove %s - not stored in %s", record, self.root)
                raise KeyError(record.record_id)
            os.unlink(json_path)
            try:
                os.unlink(join(self.root, record.image_name))
            except FileNotFoundError:
                logger.warning("image for %s was already gone", record)
        logger.info("removed %s", record)

    def load_image(self, record:ArtworkRecord):
        return PixelImage.from_file(join(self.root, record.image_name))
