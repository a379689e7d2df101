import pytest

from fractal_renderer.parsing import parse_complex, parse_geometry, parse_pair, validate_corners


def test_parse_pair():
    assert parse_pair("", ",", int) is None
    assert parse_pair("10,", ",", int) is None
    assert parse_pair(",10", ",", int) is None
    assert parse_pair("10,20", "f", int) is None
    assert parse_pair("10,20", ",", int) == (10, 20)
    assert parse_pair("10,20xy", ",", int) is None
    assert parse_pair("0.5x", "x") is None
    assert parse_pair("0.5x1.5", "x") == (0.5, 1.5)


def test_parse_pair_splits_at_first_separator():
    assert parse_pair("1,2,3", ",", int) is None
    assert parse_pair("-1.5,-2", ",") == (-1.5, -2.0)


def test_parse_complex():
    assert parse_complex("1.25,-0.0625") == complex(1.25, -0.0625)
    assert parse_complex(",-0.0625") is None
    assert parse_complex("1.25") is None


def test_parse_geometry():
    bounds, ul, lr = parse_geometry("1000x750", "-1.20,0.35", "-1,0.20")
    assert bounds == (1000, 750)
    assert ul == complex(-1.2, 0.35)
    assert lr == complex(-1.0, 0.2)


@pytest.mark.parametrize("pixels, ul, lr, message", [
    ("1000by750", "-1,1", "1,-1", "image dimensions"),
    ("0x750", "-1,1", "1,-1", "positive"),
    ("10x10", "-1;1", "1,-1", "upper left"),
    ("10x10", "-1,1", "1", "lower right"),
    ("10x10", "1,1", "-1,-1", "right of"),
    ("10x10", "-1,-1", "1,1", "below"),
])
def test_parse_geometry_errors(pixels, ul, lr, message):
    with pytest.raises(ValueError, match=message):
        parse_geometry(pixels, ul, lr)


def test_validate_corners_rejects_degenerate_view():
    with pytest.raises(ValueError):
        validate_corners(complex(0, 1), complex(0, -1))
    validate_corners(complex(-1, 1), complex(1, -1))
