import numpy as np
import pytest

from compressor import Compressor
from render import FrameSampler, fill_color, outline_color, render_leaves

RED = (255, 0, 0)


def test_fill_color_rounds_half_up_and_clips():
    assert fill_color([0.5, 1.49, 254.5], np.uint8).tolist() == [1, 1, 255]
    assert fill_color([-3.0, 300.0, 7.0], np.uint8).tolist() == [0, 255, 7]


def test_fill_color_scales_float_rasters():
    assert fill_color([0.0, 0.5, 1.0], np.float64).tolist() == [0, 128, 255]


def test_outline_color_pads_alpha():
    assert outline_color(RED, 3) == RED
    assert outline_color(RED, 4) == (255, 0, 0, 255)


def test_render_root_is_mean(quadrants):
    out = render_leaves(Compressor(quadrants).tree)
    assert out.dtype == np.uint8
    assert out.shape == quadrants.shape
    assert (out == out[0, 0]).all()


def test_render_does_not_touch_the_tree(quadrants):
    c = Compressor(quadrants)
    c.run(1)
    before = c.tree.to_records()
    render_leaves(c.tree, outline=RED)
    assert c.tree.to_records() == before


def test_outline_on_4x4_split_once_paints_every_border():
    im = np.zeros((4, 4, 3), dtype=np.uint8)
    im[:2, 2:] = 200
    c = Compressor(im)
    c.run(1)
    out = c.render(outline=RED)
    # every pixel of a 2x2 leaf lies on its border
    assert (out == RED).all()


def test_outline_keeps_interior_fill(quadrants):
    c = Compressor(quadrants)
    c.run(1)
    out = c.render(outline=RED)

    border = np.zeros((8, 8), dtype=bool)
    for r in c.leaves():
        border[r.y0, r.x0:r.x1] = True
        border[r.y1 - 1, r.x0:r.x1] = True
        border[r.y0:r.y1, r.x0] = True
        border[r.y0:r.y1, r.x1 - 1] = True

    assert (out[border] == RED).all()
    assert (out[~border] == quadrants[~border]).all()
    assert (out[1:3, 1:3] == (10, 20, 30)).all()
    assert (out[5:7, 5:7] == (10, 10, 200)).all()


def test_outline_on_strips_and_pixels():
    im = np.arange(3 * 1 * 3, dtype=np.uint8).reshape(1, 3, 3)
    c = Compressor(im)
    c.run(10)
    assert (c.render(outline=RED) == RED).all()


def test_sampler_cadence_with_final_frame(noisy):
    sampler = FrameSampler(5)
    Compressor(noisy).run(12, sampler=sampler)
    assert sampler.iterations == [0, 5, 10, 12]
    assert len(sampler) == 4
    assert all(f.shape == noisy.shape for f in sampler.frames)


def test_sampler_no_duplicate_when_on_cadence(noisy):
    sampler = FrameSampler(4)
    Compressor(noisy).run(12, sampler=sampler)
    assert sampler.iterations == [0, 4, 8, 12]


def test_sampler_zero_iterations(noisy):
    sampler = FrameSampler(3)
    Compressor(noisy).run(0, sampler=sampler)
    assert sampler.iterations == [0]


def test_sampler_stops_with_early_termination(four_colors):
    sampler = FrameSampler(2)
    Compressor(four_colors).run(9, sampler=sampler)
    assert sampler.iterations == [0, 1]
    assert (sampler.frames[-1] == four_colors).all()


def test_sampling_does_not_change_result(noisy):
    plain, sampled = Compressor(noisy), Compressor(noisy)
    plain.run(20)
    sampled.run(20, sampler=FrameSampler(1, outline=RED))
    assert plain.tree.to_records() == sampled.tree.to_records()
    assert (plain.render() == sampled.render()).all()


def test_frames_are_snapshots(noisy):
    sampler = FrameSampler(1)
    Compressor(noisy).run(3, sampler=sampler)
    assert not (sampler.frames[0] == sampler.frames[3]).all()


@pytest.mark.parametrize("interval", [0, -2])
def test_sampler_rejects_non_positive_interval(interval):
    with pytest.raises(ValueError):
        FrameSampler(interval)
