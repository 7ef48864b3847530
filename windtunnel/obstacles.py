"""
Obstacle Masks

Builds the boolean solid masks injected into the solver. Masks are
(ny, nx) arrays with True marking solid sites; flat masks of length
nx * ny are accepted in row-major order (index = y * nx + x).

Image obstacles follow the wind tunnel convention: the image is scaled so
its longest side spans the grid, converted to grayscale, and every pixel
darker than the contrast threshold becomes solid.
"""

import logging
import math

import numpy as np
from matplotlib import image as mpimg
from scipy import ndimage

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 100
MAX_GRID_SIZE = 200


def mask_size_matches(mask, nx, ny):
    """Return True if ``mask`` holds exactly nx * ny entries."""
    return np.size(mask) == nx * ny


def as_mask(mask, nx, ny):
    """
    Copy a flat or 2D mask into a boolean (ny, nx) array.

    Raises
    ------
    ValueError
        If the mask does not hold nx * ny entries
    """
    if not mask_size_matches(mask, nx, ny):
        raise ValueError(
            f"mask has {np.size(mask)} entries, expected {nx * ny} ({nx}x{ny})"
        )
    return np.array(mask, dtype=bool).reshape(ny, nx)


def grayscale(image):
    """
    Grayscale intensity on a 0-255 scale.

    The mean of the R, G and B channels; alpha is ignored. Integer images
    are taken as 0-255; float images are taken as 0-1, the convention of
    matplotlib's PNG reader, and rescaled.

    Parameters
    ----------
    image : ndarray
        Image of shape (h, w), (h, w, 3) or (h, w, 4)

    Returns
    -------
    gray : ndarray
        Intensity, shape (h, w), float64
    """
    img = np.asarray(image)
    scale = 255.0 if np.issubdtype(img.dtype, np.floating) else 1.0
    img = img.astype(np.float64) * scale

    if img.ndim == 2:
        return img
    return img[..., :3].mean(axis=-1)


def mask_from_image(image, threshold=DEFAULT_THRESHOLD):
    """
    Threshold an image into an obstacle mask. Dark pixels are solid.

    Parameters
    ----------
    image : ndarray
        Image, already sized to the grid
    threshold : float
        Contrast threshold on the 0-255 scale

    Returns
    -------
    mask : ndarray
        Boolean mask, True where grayscale < threshold
    """
    return grayscale(image) < threshold


def grid_shape_for_image(img_width, img_height, max_size=MAX_GRID_SIZE):
    """
    Grid dimensions for an image of the given size.

    The longest side gets ``max_size`` cells, the other follows the aspect
    ratio. Both are bumped to the next even number.

    Returns
    -------
    nx, ny : int
        Grid width and height
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if img_width <= 0 or img_height <= 0:
        raise ValueError(f"invalid image size {img_width}x{img_height}")

    # Halves round up
    if img_width > img_height:
        nx = max_size
        ny = math.floor(max_size * img_height / img_width + 0.5)
    else:
        ny = max_size
        nx = math.floor(max_size * img_width / img_height + 0.5)

    nx = max(int(nx), 1)
    ny = max(int(ny), 1)
    if nx % 2 != 0:
        nx += 1
    if ny % 2 != 0:
        ny += 1
    return nx, ny


def resample_image(image, nx, ny):
    """
    Bilinearly resample an image to nx by ny pixels.

    Channels (if any) are preserved.
    """
    img = np.asarray(image, dtype=np.float64)
    h, w = img.shape[:2]
    zoom = (ny / h, nx / w) + (1.0,) * (img.ndim - 2)
    out = ndimage.zoom(img, zoom, order=1, mode="nearest", grid_mode=True)

    # zoom rounds the output size; force the exact grid
    return out[:ny, :nx]


def load_obstacle_mask(path, threshold=DEFAULT_THRESHOLD, max_size=MAX_GRID_SIZE):
    """
    Read an image file and convert it to an obstacle mask.

    Parameters
    ----------
    path : str
        Image file readable by matplotlib (PNG natively)
    threshold : float
        Contrast threshold on the 0-255 scale
    max_size : int
        Cells along the longest side

    Returns
    -------
    mask : ndarray
        Boolean mask, shape (ny, nx)
    """
    img = mpimg.imread(path)
    if not np.issubdtype(img.dtype, np.floating):
        img = img / 255.0

    h, w = img.shape[:2]
    nx, ny = grid_shape_for_image(w, h, max_size)
    mask = mask_from_image(resample_image(img, nx, ny), threshold)

    logger.info("Loaded obstacle image %s: %dx%d grid, %d solid cells",
                path, nx, ny, int(mask.sum()))
    return mask


def create_cylinder_mask(nx, ny, cx, cy, radius):
    """
    Create a solid mask for a circular cylinder.

    Parameters
    ----------
    nx, ny : int
        Grid dimensions
    cx, cy : float
        Cylinder center coordinates
    radius : float
        Cylinder radius

    Returns
    -------
    mask : ndarray
        Boolean mask (True for solid), shape (ny, nx)
    """
    X, Y = np.meshgrid(np.arange(nx), np.arange(ny))
    return (X - cx) ** 2 + (Y - cy) ** 2 <= radius ** 2


def create_rectangle_mask(nx, ny, x0, y0, x1, y1, hollow=False):
    """
    Create a solid mask for the axis-aligned block [x0, x1] x [y0, y1].

    With ``hollow=True`` only the one-cell-thick outline is solid.
    """
    mask = np.zeros((ny, nx), dtype=bool)
    mask[y0:y1 + 1, x0:x1 + 1] = True
    if hollow:
        mask[y0 + 1:y1, x0 + 1:x1] = False
    return mask
