import numpy as np
import pytest

from fractal_renderer import renderer as renderer_module
from fractal_renderer.buffer import MAX_LIMIT, ResultBuffer
from fractal_renderer.compute import FractalVariant, evaluate_point, pixel_to_point
from fractal_renderer.errors import PreconditionViolation, RenderError, WorkerFault
from fractal_renderer.renderer import FractalRenderer, plan_bands, render

VIEWS = [
    (FractalVariant.MANDELBROT, complex(-2.0, 1.2), complex(1.0, -1.2), 0j),
    (FractalVariant.JULIA, complex(-1.5, 1.0), complex(1.5, -1.0), complex(-0.8, 0.156)),
    (FractalVariant.NEWTON, complex(-2.0, 2.0), complex(2.0, -2.0), 1 + 0j),
]

def _render(bounds, ul, lr, variant, seed, limit, workers):
    buffer = ResultBuffer.for_bounds(bounds)
    render(buffer, bounds, ul, lr, variant, seed, limit, workers=workers)
    return buffer

# ---------------------------------------------------------------------------
# Band planning
# ---------------------------------------------------------------------------

def test_plan_bands_splits_rows_evenly():
    bands = plan_bands((4, 10), complex(-1, 1), complex(1, -1), 4)

    assert [b.index for b in bands] == [0, 1, 2, 3]
    assert [b.top for b in bands] == [0, 3, 6, 9]
    assert [b.rows for b in bands] == [3, 3, 3, 1]
    assert [(b.start, b.stop) for b in bands] == [(0, 12), (12, 24), (24, 36), (36, 40)]

def test_plan_bands_covers_buffer_without_overlap():
    for height in range(1, 30):
        for workers in (1, 2, 3, 5, 8, 64):
            bands = plan_bands((7, height), complex(-1, 1), complex(1, -1), workers)
            assert len(bands) <= workers
            assert bands[0].start == 0
            assert bands[-1].stop == 7 * height
            for prev, nxt in zip(bands, bands[1:]):
                assert prev.stop == nxt.start
                assert prev.top + prev.rows == nxt.top

def test_plan_bands_fewer_rows_than_workers():
    bands = plan_bands((5, 3), complex(-1, 1), complex(1, -1), 8)
    assert len(bands) == 3
    assert all(b.rows == 1 for b in bands)

def test_plan_bands_corners_use_global_geometry():
    bounds = (8, 6)
    ul, lr = complex(-2.0, 1.5), complex(1.0, -1.5)
    bands = plan_bands(bounds, ul, lr, 3)

    assert bands[0].upper_left == ul
    assert bands[-1].lower_right.real == pytest.approx(lr.real)
    assert bands[-1].lower_right.imag == pytest.approx(lr.imag)
    for band in bands:
        assert band.upper_left == pixel_to_point(bounds, (0, band.top), ul, lr)
    for prev, nxt in zip(bands, bands[1:]):
        assert prev.lower_right.imag == pytest.approx(nxt.upper_left.imag)

# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("variant, ul, lr, seed", VIEWS)
@pytest.mark.parametrize("workers", [2, 5])
def test_banded_render_matches_single_band(variant, ul, lr, seed, workers):
    bounds = (23, 17)
    single = _render(bounds, ul, lr, variant, seed, 60, workers=1)
    banded = _render(bounds, ul, lr, variant, seed, 60, workers=workers)

    np.testing.assert_array_equal(banded.escape, single.escape)
    np.testing.assert_array_equal(banded.value, single.value)

def test_render_matches_pointwise_evaluation():
    bounds = (9, 7)
    ul, lr = complex(-2.0, 1.2), complex(1.0, -1.2)
    buffer = _render(bounds, ul, lr, FractalVariant.MANDELBROT, 0j, 80, workers=3)

    for row in range(bounds[1]):
        for column in range(bounds[0]):
            point = pixel_to_point(bounds, (column, row), ul, lr)
            expected = evaluate_point(FractalVariant.MANDELBROT, point, 0j, 80)
            result = buffer[row * bounds[0] + column]
            assert result.escape == expected.escape
            assert result.value == pytest.approx(expected.value)

def test_render_is_idempotent():
    args = ((31, 11), complex(-1.5, 1.0), complex(1.5, -1.0), FractalVariant.JULIA,
            complex(-0.8, 0.156), 100)
    first = _render(*args, workers=4)
    second = _render(*args, workers=4)

    np.testing.assert_array_equal(first.escape, second.escape)
    np.testing.assert_array_equal(first.value, second.value)

def test_render_more_workers_than_rows():
    bounds = (16, 3)
    ul, lr = complex(-2.0, 1.2), complex(1.0, -1.2)
    wide = _render(bounds, ul, lr, FractalVariant.MANDELBROT, 0j, 50, workers=32)
    single = _render(bounds, ul, lr, FractalVariant.MANDELBROT, 0j, 50, workers=1)
    np.testing.assert_array_equal(wide.escape, single.escape)

def test_render_default_workers(monkeypatch):
    monkeypatch.setattr(renderer_module, "default_workers", lambda: 3)
    calls = []
    real_plan = renderer_module.plan_bands

    def spy(bounds, upper_left, lower_right, workers):
        calls.append(workers)
        return real_plan(bounds, upper_left, lower_right, workers)

    monkeypatch.setattr(renderer_module, "plan_bands", spy)
    buffer = ResultBuffer.for_bounds((4, 4))
    render(buffer, (4, 4), complex(-2, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j, 10)
    assert calls == [3]

def test_render_interior_is_zero_escape():
    # the main cardioid contains the whole square around -0.25
    bounds = (5, 5)
    buffer = _render(bounds, complex(-0.3, 0.05), complex(-0.2, -0.05),
                     FractalVariant.MANDELBROT, 0j, 200, workers=2)
    assert not buffer.escape.any()

# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("length", [0, 11, 13, 24])
def test_render_rejects_wrong_buffer_length(length):
    buffer = ResultBuffer(length)
    with pytest.raises(PreconditionViolation):
        render(buffer, (4, 3), complex(-1, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j, 10)
    assert not buffer.escape.any()

@pytest.mark.parametrize("bounds", [(0, 3), (3, 0), (-2, -2)])
def test_render_rejects_non_positive_bounds(bounds):
    with pytest.raises(PreconditionViolation):
        render(ResultBuffer(0), bounds, complex(-1, 1), complex(1, -1),
               FractalVariant.MANDELBROT, 0j, 10)

def test_render_rejects_bad_limit_and_workers():
    buffer = ResultBuffer(4)
    with pytest.raises(PreconditionViolation):
        render(buffer, (2, 2), complex(-1, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j, -1)
    with pytest.raises(PreconditionViolation):
        render(buffer, (2, 2), complex(-1, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j, 10,
               workers=0)

def test_render_rejects_unknown_variant():
    buffer = ResultBuffer(4)
    with pytest.raises(PreconditionViolation, match="variant"):
        render(buffer, (2, 2), complex(-1, 1), complex(1, -1), 7, 0j, 10, workers=1)
    assert not buffer.escape.any()

def test_render_rejects_limit_beyond_escape_range():
    buffer = ResultBuffer(4)
    with pytest.raises(PreconditionViolation, match="limit"):
        render(buffer, (2, 2), complex(-1, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j,
               MAX_LIMIT + 1, workers=1)
    with pytest.raises(PreconditionViolation, match="limit"):
        render(buffer, (2, 2), complex(-1, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j,
               2 ** 32 + 10, workers=1)

def test_render_accepts_largest_limit():
    # 3+0j escapes on the first step, so the largest limit is cheap to run
    buffer = _render((1, 1), complex(3, 0), complex(4, -1), FractalVariant.MANDELBROT, 0j,
                     MAX_LIMIT, workers=1)
    expected = evaluate_point(FractalVariant.MANDELBROT, complex(3, 0), 0j, MAX_LIMIT)
    assert expected.escape == MAX_LIMIT
    assert buffer[0].escape == expected.escape

def test_precondition_violation_is_a_value_error():
    assert issubclass(PreconditionViolation, ValueError)
    assert issubclass(PreconditionViolation, RenderError)

def test_worker_fault_fails_the_render(monkeypatch):
    real_render_band = renderer_module.render_band

    def flaky(escape, value, bounds, top, *args):
        if top > 0:
            raise FloatingPointError("boom")
        real_render_band(escape, value, bounds, top, *args)

    monkeypatch.setattr(renderer_module, "render_band", flaky)
    buffer = ResultBuffer.for_bounds((4, 8))
    with pytest.raises(WorkerFault) as excinfo:
        render(buffer, (4, 8), complex(-2, 1), complex(1, -1), FractalVariant.MANDELBROT, 0j, 10,
               workers=4)

    fault = excinfo.value
    assert isinstance(fault, RenderError)
    assert fault.band.index == 1
    assert fault.band.top == 2
    assert isinstance(fault.__cause__, FloatingPointError)

# ---------------------------------------------------------------------------
# FractalRenderer
# ---------------------------------------------------------------------------

def test_fractal_renderer_render_allocates_buffer():
    fr = FractalRenderer(12, 8, complex(-2.0, 1.2), complex(1.0, -1.2), limit=40, workers=2)
    result = fr.render()

    assert len(result) == 96
    expected = _render((12, 8), complex(-2.0, 1.2), complex(1.0, -1.2),
                       FractalVariant.MANDELBROT, 0j, 40, workers=1)
    np.testing.assert_array_equal(result.escape, expected.escape)

def test_fractal_renderer_accepts_variant_names():
    fr = FractalRenderer(4, 4, variant="julia", seed=complex(-0.8, 0.156))
    assert fr.variant is FractalVariant.JULIA
    assert fr.bounds == (4, 4)

def test_fractal_renderer_colorize():
    fr = FractalRenderer(6, 4, limit=30, workers=2)
    result = fr.render()
    pixels = fr.colorize(result, "escape")
    assert pixels.dtype == np.uint8
    assert pixels.shape == (24,)
    with pytest.raises(KeyError):
        fr.colorize(result, "sepia")
