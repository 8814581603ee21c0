"""Conversion of any bitmap image into a grid usable by `PGMImage`."""

from enum import Enum
from pathlib import Path

import numpy as np
from skimage import io
from skimage.util import img_as_ubyte

from .pgm import write_pgm

# Luminosity according to human color perception
LUMINOSITY_WEIGHTS = (0.3, 0.59, 0.11)


class Anchor(Enum):
    """Part of the source image kept when cropping."""

    CENTER = 0
    NORTH = 1
    SOUTH = 2
    WEST = 3
    NORTH_WEST = 4
    SOUTH_WEST = 5
    EAST = 6
    NORTH_EAST = 7
    SOUTH_EAST = 8


def closest_power_of_two(n):
    """Return the greatest power of two not greater than n."""

    if n < 1:
        raise ValueError(f"n must be positive, but {n} given.")
    return 1 << (int(n).bit_length() - 1)


def crop_origin(width, height, side, anchor):
    """Find the top-left corner of the cropped square.

    Parameters
    ----------
    width, height : int, int
        Size of the source image.

    side : int
        Side of the cropped square.

    anchor : Anchor
        Part of the source image to keep.

    Returns
    -------
    x, y : int, int
        Column and line of the top-left corner in the source image.

    """

    anchor = Anchor(anchor)
    center_x = (width - side) // 2
    center_y = (height - side) // 2
    right = width - side
    bottom = height - side

    origins = {
        Anchor.CENTER: (center_x, center_y),
        Anchor.NORTH: (center_x, 0),
        Anchor.SOUTH: (center_x, bottom),
        Anchor.WEST: (0, center_y),
        Anchor.NORTH_WEST: (0, 0),
        Anchor.SOUTH_WEST: (0, bottom),
        Anchor.EAST: (right, center_y),
        Anchor.NORTH_EAST: (right, 0),
        Anchor.SOUTH_EAST: (right, bottom),
    }

    return origins[anchor]


def luminosity(image):
    """Convert an image to 8-bit luminosity.

    Parameters
    ----------
    image : np.array
        Gray, gray with alpha, RGB or RGBA image.

    Returns
    -------
    gray : np.array
        Integer intensities in 0..255.

    """

    image = img_as_ubyte(image)

    if image.ndim == 2:
        return image.astype(np.int64)

    if image.ndim == 3 and image.shape[-1] in (1, 2):
        return image[..., 0].astype(np.int64)

    if image.ndim == 3 and image.shape[-1] in (3, 4):
        rgb = image[..., :3].astype(np.double)
        gray = rgb @ np.array(LUMINOSITY_WEIGHTS)
        return np.floor(gray + 0.5).astype(np.int64)

    raise ValueError(f"Invalid shape of the image: `{image.shape}`")


def image_to_grid(image, anchor=Anchor.NORTH_WEST):
    """Crop an image to a power of two square of luminosity.

    Parameters
    ----------
    image : np.array
        Source image.

    anchor : Anchor, optional (default=Anchor.NORTH_WEST)
        Part of the source image to keep.

    Returns
    -------
    grid : np.array
        Square matrix of intensities.

    """

    gray = luminosity(image)
    height, width = gray.shape
    side = closest_power_of_two(min(width, height))
    x, y = crop_origin(width, height, side, anchor)

    return gray[y : y + side, x : x + side]


def convert_to_pgm(image_path, anchor=Anchor.NORTH_WEST, overwrite=False):
    """Convert a bitmap file to a plain PGM file next to it.

    Parameters
    ----------
    image_path : str or Path
        Source image, any format scikit-image reads.

    anchor : Anchor, optional (default=Anchor.NORTH_WEST)
        Part of the source image to keep.

    overwrite : bool, optional (default=False)
        Replace the PGM file if it exists.

    Returns
    -------
    pgm_path : Path
        Written PGM file.

    """

    image_path = Path(image_path)
    grid = image_to_grid(io.imread(image_path), anchor)

    return write_pgm(
        image_path.with_suffix(".pgm"), grid, int(grid.max()), overwrite=overwrite
    )
