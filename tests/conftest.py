# tests/conftest.py

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def noisy():
    """Deterministic 13x9 RGB raster with odd sides."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(9, 13, 3), dtype=np.uint8)


@pytest.fixture
def four_colors():
    return np.array([
        [[255, 0, 0], [0, 255, 0]],
        [[0, 0, 255], [255, 255, 255]],
    ], dtype=np.uint8)


@pytest.fixture
def quadrants():
    """8x8 image made of four flat 4x4 quadrants."""
    im = np.zeros((8, 8, 3), dtype=np.uint8)
    im[:4, :4] = (10, 20, 30)
    im[:4, 4:] = (200, 10, 10)
    im[4:, :4] = (10, 200, 10)
    im[4:, 4:] = (10, 10, 200)
    return im


@pytest.fixture
def image_file(tmp_path, noisy):
    path = tmp_path / "input.png"
    Image.fromarray(noisy).save(path)
    return path
