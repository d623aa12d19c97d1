"""
Tests for the artwork library
"""

import sys
import os
from datetime import datetime, timedelta
from os.path import abspath, dirname

import pytest

sys.path.append(dirname(dirname(dirname(abspath(__file__)))))

from photofilter.storage import ArtworkLibrary, ArtworkRecord


def test_record_json():
    r = ArtworkRecord(record_id='abc', caption='pup', created=datetime(2024, 4, 1, 10, 54, 4),
                      rating=3, image_name='abc.jpg')
    r2 = ArtworkRecord.fromJSON(r.json)
    assert r == r2
    assert r2.dict()['version'] == 1


def test_create_and_list(tmp_path, test_image):
    library = ArtworkLibrary(tmp_path / 'library')
    assert library.list_all() == []
    now = datetime.now()
    later = now + timedelta(seconds=100)

    a2 = library.save(test_image, caption="2", created=later, rating=2)
    assert len(library.list_all()) == 1
    a1 = library.save(test_image, caption="1", created=now, rating=1)
    fetch = library.list_all(order_by_timestamp=True)
    assert [r.caption for r in fetch] == ["1", "2"]
    assert fetch[0] == a1
    assert fetch[1] == a2
    assert fetch[0].created == now
    assert fetch[0].rating == 1
    assert set(r.record_id for r in library.list_all(order_by_timestamp=False)) == {a1.record_id, a2.record_id}

    # JPEG is lossy, so compare sizes
    assert library.load_image(a1).size == test_image.size
    assert library.get(a1.record_id) == a1


def test_remove(tmp_path, small_image):
    library = ArtworkLibrary(tmp_path)
    a = library.save(small_image, caption="1", rating=5)
    assert len(library.list_all()) == 1
    library.remove(a)
    assert library.list_all() == []
    assert not os.path.exists(tmp_path / a.image_name)
    with pytest.raises(KeyError):
        library.remove(a)
    with pytest.raises(KeyError):
        library.get(a.record_id)


def test_bad_rating(tmp_path, small_image):
    library = ArtworkLibrary(tmp_path)
    for rating in [-1, 6, 2.5, True]:
        with pytest.raises(ValueError):
            library.save(small_image, caption="x", rating=rating)
    assert library.list_all() == []


def test_unreadable_record_skipped(tmp_path, small_image):
    library = ArtworkLibrary(tmp_path)
    library.save(small_image, caption="ok", rating=0)
    with open(tmp_path / 'junk.json', 'w') as f:
        f.write('{"version": 99}')
    assert [r.caption for r in library.list_all()] == ["ok"]
