"""
prefix_sums.py - summed-area tables for O(1) rectangle statistics

Two (H+1, W+1, C) grids are kept: the cumulative per-channel sum and the
cumulative per-channel sum of squares. Row 0 and column 0 are zero so any
rectangle [x0, x1) x [y0, y1) is four lookups away.
"""

import numpy as np


def _integral(values):
    h, w, c = values.shape
    out = np.zeros((h + 1, w + 1, c), dtype=values.dtype)
    out[1:, 1:] = values.cumsum(axis=0).cumsum(axis=1)
    out.flags.writeable = False
    return out


def _box(grid, x0, y0, x1, y1):
    return grid[y1, x1] - grid[y0, x1] - grid[y1, x0] + grid[y0, x0]


def _squared_error(count, sums, squares):
    # python ints keep sum**2 exact for large integer rasters
    sse = sum(q - s * s / count for q, s in zip(squares.tolist(), sums.tolist()))
    return max(0.0, float(sse))


class PrefixSumTable:
    """Built once from an (H, W) or (H, W, C) raster, read-only afterwards.

    Integer rasters accumulate in int64 so queries match direct summation
    exactly; float rasters accumulate in float64.
    """

    def __init__(self, raster):
        raster = np.asarray(raster)
        if raster.ndim == 2:
            raster = raster[..., np.newaxis]
        if raster.ndim != 3 or raster.shape[0] == 0 or raster.shape[1] == 0:
            raise ValueError(f"Unsupported raster shape {raster.shape}")

        acc = np.int64 if raster.dtype.kind in "uib" else np.float64
        values = raster.astype(acc)

        self.height, self.width, self.channels = values.shape
        self.dtype = raster.dtype
        self.sums = _integral(values)
        self.square_sums = _integral(values * values)

    @property
    def shape(self):
        return self.height, self.width, self.channels

    def contains(self, x0, y0, x1, y1) -> bool:
        return 0 <= x0 < x1 <= self.width and 0 <= y0 < y1 <= self.height

    def query(self, x0, y0, x1, y1):
        """Return (pixel_count, sum[C], sum_of_squares[C]) for [x0,x1) x [y0,y1)."""
        if not self.contains(x0, y0, x1, y1):
            raise IndexError(
                f"Rectangle ({x0}, {y0}, {x1}, {y1}) is empty or outside "
                f"{self.width}x{self.height}"
            )
        count = (x1 - x0) * (y1 - y0)
        return (count,
                _box(self.sums, x0, y0, x1, y1),
                _box(self.square_sums, x0, y0, x1, y1))

    def squared_error(self, x0, y0, x1, y1) -> float:
        """Sum of squared deviations from the mean, over all pixels and channels."""
        return _squared_error(*self.query(x0, y0, x1, y1))

    def mean_and_variance(self, x0, y0, x1, y1):
        """Return (mean[C], variance[C], score) for a rectangle.

        variance is the population variance per channel. score is the
        region's total squared error, i.e. pixel_count * sum(variance); the
        refinement order is decided by it.
        """
        count, sums, squares = self.query(x0, y0, x1, y1)
        mean = sums / count
        variance = np.maximum(squares / count - mean * mean, 0.0)
        return mean, variance, _squared_error(count, sums, squares)
