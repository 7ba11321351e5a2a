"""
image_io.py - reading and writing rasters

Decoding goes through skimage.io, still images are written with Pillow and
animations with Pillow's GIF writer. Every write lands in a temp file first
and is renamed into place, so a failed encode leaves nothing behind.
"""

import os
import string
import tempfile

import cv2
import numpy as np
import skimage.io as io
import skimage.color as color
from skimage.util import img_as_ubyte
from PIL import Image

# ---------------- SETTINGS ----------------
DEFAULT_SUFFIX = "-comprs"
FALLBACK_EXT = ".png"
GIF_FRAME_DELAY_MS = 100
GIF_LOOP = 0

# ---------------- helpers ----------------

def rgb_to_hex(col):
    return '%02X%02X%02X' % tuple(int(c) for c in col[:3])


def hex_to_rgb(s):
    """'FF0000' or '#ff0000' -> (255, 0, 0)."""
    h = s.strip()
    if h.startswith("#"):
        h = h[1:]
    if len(h) != 6:
        raise ValueError(f"Hex colour must be 6 characters long, got {s!r}")
    if not all(c in string.hexdigits for c in h):
        raise ValueError(f"Invalid hex colour {s!r}")
    return tuple(int(h[i:i + 2], 16) for i in (0, 2, 4))


def image_format(path):
    """Pillow format name for a file extension, or ValueError."""
    ext = os.path.splitext(path)[1].lower()
    fmt = Image.registered_extensions().get(ext)
    if fmt is None or fmt not in Image.SAVE:
        raise ValueError(f"Unsupported output format {ext or '(none)'!r} for {path}")
    return fmt


def default_output_path(input_path, animated=False):
    """<stem>-comprs.<ext> next to the input, .gif for animations."""
    stem, ext = os.path.splitext(input_path)
    if animated:
        ext = ".gif"
    elif not ext:
        ext = FALLBACK_EXT
    return f"{stem}{DEFAULT_SUFFIX}{ext}"


def _atomic_save(path, save):
    dir_name = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=dir_name, prefix=".quadcompress_", suffix=".tmp")
    os.close(fd)
    try:
        save(tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

# --------------- decode ----------------

def load_raster(path):
    """Load an image as (H, W, 3) uint8, or (H, W, 4) when it has alpha."""
    im = io.imread(os.fspath(path))
    if im.ndim == 4:  # animated input: first frame only
        im = im[0]

    if im.ndim == 2:
        im = color.gray2rgb(im)
    elif im.ndim == 3 and im.shape[-1] == 2:  # grey + alpha
        im = np.dstack([color.gray2rgb(im[..., 0]), im[..., 1]])
    elif im.ndim == 3 and im.shape[-1] >= 3:
        im = im[..., :4]
    else:
        raise ValueError(f"Unsupported image shape {im.shape} for {path}")

    if im.shape[0] == 0 or im.shape[1] == 0:
        raise ValueError(f"Empty image {path}")
    return np.ascontiguousarray(img_as_ubyte(im))


def downscale(raster, factor):
    """Shrink by `factor` in (0, 1] with area averaging; never below 1x1."""
    if not 0 < factor <= 1:
        raise ValueError(f"Scale factor must be in (0, 1], got {factor}")
    if factor == 1:
        return raster
    h, w = raster.shape[:2]
    size = (max(1, int(round(w * factor))), max(1, int(round(h * factor))))
    out = cv2.resize(raster, size, interpolation=cv2.INTER_AREA)
    if out.ndim == 2:  # cv2 drops a trailing single channel
        out = out[..., np.newaxis]
    return out

# --------------- encode ----------------

def save_raster(raster, path):
    fmt = image_format(path)
    arr = np.asarray(raster, dtype=np.uint8)
    if arr.ndim == 3 and arr.shape[-1] == 1:
        arr = arr[..., 0]
    img = Image.fromarray(arr)
    if img.mode == "RGBA" and fmt in ("JPEG", "BMP"):
        img = img.convert("RGB")
    _atomic_save(path, lambda p: img.save(p, format=fmt))


def save_animation(frames, path, delay_ms=GIF_FRAME_DELAY_MS):
    """Write the frames in order as a looping GIF, `delay_ms` per frame."""
    if not frames:
        raise ValueError("No frames to encode")
    if delay_ms <= 0:
        raise ValueError(f"Frame delay must be positive, got {delay_ms}")
    images = [Image.fromarray(np.asarray(f, dtype=np.uint8)) for f in frames]
    _atomic_save(path, lambda p: images[0].save(
        p, format="GIF", save_all=True, append_images=images[1:],
        duration=int(delay_ms), loop=GIF_LOOP))
