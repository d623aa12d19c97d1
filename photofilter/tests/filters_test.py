"""
Tests for the filter definitions
"""

import sys
import logging
from os.path import abspath, dirname

import numpy as np
import pytest

sys.path.append(dirname(dirname(dirname(abspath(__file__)))))

from photofilter.filters import FilterDefinition, FilterKind, zoom_crop_rect
from photofilter.graph import GraphBuildError
from photofilter.operation import OperationKind, KERNELS


def test_titles_and_identifiers():
    assert FilterDefinition(FilterKind.NONE).title == "No Filter"
    assert FilterDefinition(FilterKind.INVERT).title == "Invert Colours"
    assert FilterDefinition(FilterKind.ZOOM_BLUR).identifier == 'zoom_blur'
    hue = FilterDefinition(FilterKind.HUE_ROTATE, 90)
    assert hue.title == "90º Hue Shift"
    assert hue.identifier == 'hue_rotate_90'
    assert FilterDefinition(FilterKind.HUE_ROTATE, 22.5).title == "22.5º Hue Shift"


def test_parameters():
    assert FilterDefinition(FilterKind.SEPIA).parameter == 0.5
    assert FilterDefinition(FilterKind.VIGNETTE).parameter == 0.9
    assert FilterDefinition('sepia', 0.5) == FilterDefinition(FilterKind.SEPIA)
    with pytest.raises(ValueError):
        FilterDefinition(FilterKind.HUE_ROTATE)
    with pytest.raises(ValueError):
        FilterDefinition(FilterKind.INVERT, 3)
    with pytest.raises(AttributeError):
        FilterDefinition(FilterKind.SEPIA).parameter = 1.0


def test_none_filter(test_image):
    none = FilterDefinition(FilterKind.NONE)
    with pytest.raises(GraphBuildError):
        none.build_graph(test_image.size)
    out = none.apply(test_image)
    assert out is test_image
    assert out.pixels.tobytes() == test_image.pixels.tobytes()


def test_single_stage_graphs():
    for (kind, op_kind) in [(FilterKind.SEPIA, OperationKind.SEPIA),
                            (FilterKind.INVERT, OperationKind.INVERT),
                            (FilterKind.VIGNETTE, OperationKind.VIGNETTE),
                            (FilterKind.NOIR, OperationKind.NOIR),
                            (FilterKind.POSTERIZE, OperationKind.POSTERIZE)]:
        g = FilterDefinition(kind).build_graph((10, 10))
        assert [op.kind for op in g] == [op_kind]
    g = FilterDefinition(FilterKind.SEPIA).build_graph((10, 10))
    assert g.input_operation.params['intensity'] == 0.5
    g = FilterDefinition(FilterKind.HUE_ROTATE, 45).build_graph((10, 10))
    assert g.input_operation.params['angle'] == 45


def test_zoom_blur_graph():
    g = FilterDefinition(FilterKind.ZOOM_BLUR).build_graph((400, 300))
    assert [op.kind for op in g] == [OperationKind.ZOOM_BLUR, OperationKind.CROP]
    assert g.input_operation.params['amount'] == 20
    assert g.output_operation.params['rect'] == pytest.approx((40, 30, 320, 240))


def test_zoom_crop_scales_with_size():
    f = FilterDefinition(FilterKind.ZOOM_BLUR)
    for (w, h) in [(400, 300), (200, 100), (1024, 768), (33, 17)]:
        rect = f.build_graph((w, h)).output_operation.params['rect']
        assert rect == pytest.approx((0.1 * w, 0.1 * h, 0.8 * w, 0.8 * h))
        assert rect == pytest.approx(zoom_crop_rect((w, h)))


def test_zoom_blur_output_size(test_image):
    out = FilterDefinition(FilterKind.ZOOM_BLUR).apply(test_image)
    assert out.size == (320, 240)


def test_bad_size():
    with pytest.raises(GraphBuildError):
        FilterDefinition(FilterKind.SEPIA).build_graph((0, 10))


def test_bad_parameter_gives_no_image(small_image, caplog):
    f = FilterDefinition(FilterKind.SEPIA, 7.0)
    with pytest.raises(GraphBuildError):
        f.build_graph(small_image.size)
    with caplog.at_level(logging.WARNING):
        assert f.apply(small_image) is None
    assert "couldn't create filter graph" in caplog.text


def test_unavailable_primitive(monkeypatch, small_image):
    monkeypatch.delitem(KERNELS, OperationKind.VIGNETTE)
    assert FilterDefinition(FilterKind.VIGNETTE).apply(small_image) is None
    # other filters still work
    assert FilterDefinition(FilterKind.INVERT).apply(small_image) is not None


def test_hue_rotate_filter(small_image):
    out = FilterDefinition(FilterKind.HUE_ROTATE, 180).apply(small_image)
    assert out.shape == small_image.shape
    assert not np.array_equal(out.pixels, small_image.pixels)
