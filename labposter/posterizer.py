"""Nearest-palette remapping of image pixels."""
import logging

import numpy as np

from labposter.color_space import lab_distances, rgb_array_to_lab
from labposter.types import ImageArray, InvalidInputError, LabArray, Palette

logger = logging.getLogger(__name__)


def _check_palette(palette: Palette, centroids: LabArray):
    palette = np.asarray(palette, dtype=np.uint8).reshape(-1, 3)
    centroids = np.asarray(centroids, dtype=np.float64).reshape(-1, 3)
    if len(palette) == 0:
        raise InvalidInputError("Palette is empty")
    if len(palette) != len(centroids):
        raise InvalidInputError(
            f"Palette has {len(palette)} colors but {len(centroids)} centroids were given"
        )
    return palette, centroids


def nearest_centroids(points_lab: LabArray, centroids: LabArray) -> np.ndarray:
    """Index of the closest centroid for each Lab point (linear scan, lowest index on ties)."""
    if len(points_lab) == 0:
        return np.zeros(0, dtype=np.intp)
    return np.argmin(lab_distances(points_lab, centroids), axis=1)


def remap(
    pixels_lab: LabArray,
    palette: Palette,
    centroids: LabArray,
    width: int,
    height: int
) -> ImageArray:
    """
    Paint the sampled pixels with their nearest palette color.

    Output pixel ``p`` receives the color for sample ``p`` with alpha 255.
    Samples are consumed in order, so when the image was subsampled only the
    leading ``len(pixels_lab)`` output pixels are filled; the rest stay fully
    transparent. Use :func:`remap_full` to color every pixel.

    Args:
        pixels_lab: (N, 3) Lab values of the sampled pixels, in sample order
        palette: (K, 3) uint8 RGB colors, one per centroid
        centroids: (K, 3) Lab centroids used for the nearest search
        width: Output width
        height: Output height

    Returns:
        (height, width, 4) uint8 RGBA buffer
    """
    palette, centroids = _check_palette(palette, centroids)
    total = width * height
    output = np.zeros((total, 4), dtype=np.uint8)

    points = np.asarray(pixels_lab, dtype=np.float64).reshape(-1, 3)[:total]
    nearest = nearest_centroids(points, centroids)
    output[:len(points), :3] = palette[nearest]
    output[:len(points), 3] = 255

    if len(points) < total:
        logger.debug(f"Remap left {total - len(points)} trailing pixels transparent")

    return output.reshape(height, width, 4)


def remap_full(pixels: ImageArray, palette: Palette, centroids: LabArray) -> ImageArray:
    """
    Map every pixel independently to its nearest palette color.

    Args:
        pixels: (H, W, 3) or (H, W, 4) uint8 buffer
        palette: (K, 3) uint8 RGB colors, one per centroid
        centroids: (K, 3) Lab centroids

    Returns:
        (H, W, 4) uint8 RGBA buffer, fully opaque
    """
    palette, centroids = _check_palette(palette, centroids)
    height, width = pixels.shape[:2]
    flat = pixels.reshape(-1, pixels.shape[-1])[:, :3]

    # Convert each distinct color once
    unique_colors, inverse = np.unique(flat, axis=0, return_inverse=True)
    nearest = nearest_centroids(rgb_array_to_lab(unique_colors), centroids)

    output = np.empty((flat.shape[0], 4), dtype=np.uint8)
    output[:, :3] = palette[nearest[inverse.reshape(-1)]]
    output[:, 3] = 255
    return output.reshape(height, width, 4)
