"""
Tests for the command line
"""

import sys
from os.path import abspath, dirname

import pytest

sys.path.append(dirname(dirname(dirname(abspath(__file__)))))

from photofilter import cli
from photofilter.pixel_image import PixelImage
from photofilter.storage import ArtworkLibrary


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yml'
    path.write_text("catalog:\n"
                    "  extended: true\n"
                    "library:\n"
                    f"  root: {tmp_path}/library\n")
    return str(path)


def test_filters(config_file, capsys):
    assert cli.main(['--config', config_file, 'filters']) == 0
    out = capsys.readouterr().out
    assert "Zoom Blur" in out
    assert "90º Hue Shift" in out


def test_apply(tmp_path, config_file, test_image):
    src = str(tmp_path / 'in.png')
    dst = str(tmp_path / 'out.png')
    test_image.save(src)
    assert cli.main(['--config', config_file, 'apply', 'zoom_blur', src, dst]) == 0
    assert PixelImage.from_file(dst).size == (320, 240)
    dst2 = str(tmp_path / 'same.png')
    assert cli.main(['--config', config_file, 'apply', 'none', src, dst2]) == 0
    assert PixelImage.from_file(dst2) == test_image


def test_apply_errors(tmp_path, config_file, capsys):
    bad = tmp_path / 'bad.png'
    bad.write_bytes(b'nope')
    assert cli.main(['--config', config_file, 'apply', 'sepia', str(bad), str(tmp_path / 'o.png')]) == 1
    assert cli.main(['--config', config_file, 'apply', 'swirl', str(bad), str(tmp_path / 'o.png')]) == 2
    assert "swirl" in capsys.readouterr().err


def test_apply_and_save(tmp_path, config_file, small_image, capsys):
    src = str(tmp_path / 'in.png')
    small_image.save(src)
    assert cli.main(['--config', config_file, 'apply', 'sepia', src, str(tmp_path / 'out.jpg'),
                     '--save', '--caption', 'my pup', '--rating', '4']) == 0
    records = ArtworkLibrary(tmp_path / 'library').list_all()
    assert [(r.caption, r.rating) for r in records] == [('my pup', 4)]

    capsys.readouterr()
    assert cli.main(['--config', config_file, 'library']) == 0
    assert 'my pup' in capsys.readouterr().out
    assert cli.main(['--config', config_file, 'library', '--remove', records[0].record_id]) == 0
    assert ArtworkLibrary(tmp_path / 'library').list_all() == []
    assert cli.main(['--config', config_file, 'library', '--remove', records[0].record_id]) == 1


def test_bad_rating(config_file):
    with pytest.raises(SystemExit):
        cli.main(['--config', config_file, 'apply', 'sepia', 'a.png', 'b.png', '--save', '--rating', '9'])


def test_apply_unknown_format(tmp_path, config_file, small_image, capsys):
    src = str(tmp_path / 'in.png')
    small_image.save(src)
    dst = tmp_path / 'out.xyz'
    assert cli.main(['--config', config_file, 'apply', 'invert', src, str(dst)]) == 1
    assert "out.xyz" in capsys.readouterr().err
    assert not dst.exists()


def test_apply_directory(tmp_path, config_file, make_image):
    src = tmp_path / 'in'
    (src / 'sub').mkdir(parents=True)
    a = make_image(40, 30)
    a.save(str(src / 'a.png'))
    make_image(20, 10).save(str(src / 'sub' / 'b.png'))
    (src / 'notes.txt').write_text("not an image")
    dst = tmp_path / 'out'
    assert cli.main(['--config', config_file, 'apply', 'invert', str(src), str(dst)]) == 0
    assert PixelImage.from_file(str(dst / 'a.png')) == PixelImage(255 - a.pixels)
    assert PixelImage.from_file(str(dst / 'sub' / 'b.png')).size == (20, 10)
    assert not (dst / 'notes.txt').exists()
    assert cli.main(['--config', config_file, 'apply', 'invert', str(src), str(dst), '--save']) == 2
