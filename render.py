"""
render.py - paint the current leaf set back into a raster

Leaves are filled with their mean colour first; outlines, when asked for,
are drawn afterwards so no fill can cover a border.
"""

import cv2
import numpy as np

# ---------------- SETTINGS ----------------
OUTLINE_WIDTH = 1
OPAQUE = 255


def fill_color(mean, dtype):
    """Round half up and clip a mean colour to uint8.

    Float rasters are taken to be in [0, 1], like skimage.img_as_float.
    """
    c = np.asarray(mean, dtype=np.float64)
    if np.dtype(dtype).kind == "f":
        c = c * 255
    return np.clip(np.floor(c + 0.5), 0, 255).astype(np.uint8)


def outline_color(rgb, channels):
    col = [int(v) for v in rgb][:channels]
    col += [OPAQUE] * (channels - len(col))
    return tuple(col)


def render_leaves(tree, outline=None):
    """Return an (H, W, C) uint8 raster of the tree's leaves."""
    table = tree.table
    out = np.empty((table.height, table.width, table.channels), dtype=np.uint8)

    leaves = tree.leaf_regions()
    for r in leaves:
        out[r.y0:r.y1, r.x0:r.x1] = fill_color(r.mean, table.dtype)

    if outline is not None:
        col = outline_color(outline, table.channels)
        for r in leaves:
            # cv2 corners are inclusive
            cv2.rectangle(out, (r.x0, r.y0), (r.x1 - 1, r.y1 - 1), col, OUTLINE_WIDTH)
    return out


class FrameSampler:
    """Collects renders for an animation while a Compressor runs.

    Frames are taken at iteration 0, every `interval`-th iteration, and at
    the last completed iteration if the cadence missed it.
    """

    def __init__(self, interval, outline=None):
        if int(interval) <= 0:
            raise ValueError(f"Sampling interval must be positive, got {interval}")
        self.interval = int(interval)
        self.outline = outline
        self.frames = []
        self.iterations = []

    def __len__(self):
        return len(self.frames)

    def capture(self, iteration, tree):
        self.frames.append(render_leaves(tree, outline=self.outline))
        self.iterations.append(iteration)

    def observe(self, iteration, tree):
        if iteration % self.interval == 0:
            self.capture(iteration, tree)

    def finish(self, iteration, tree):
        if not self.iterations or self.iterations[-1] != iteration:
            self.capture(iteration, tree)
