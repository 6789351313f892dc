"""sRGB <-> CIE-Lab conversion and perceptual distance."""
import colorsys
import warnings
from typing import Sequence, Tuple

import numpy as np
from scipy.spatial.distance import cdist
from skimage import color

from labposter.types import InvalidInputError, LabArray


def rgb_array_to_lab(rgb: np.ndarray) -> LabArray:
    """
    Convert an array of sRGB colors to CIE-Lab (D65, 2 degree observer).

    Args:
        rgb: (N, 3) array with 8-bit channel values in [0, 255]

    Returns:
        (N, 3) float64 array of (L, a, b)
    """
    rgb = np.asarray(rgb)
    if rgb.ndim != 2 or rgb.shape[1] != 3:
        raise InvalidInputError(f"Expected (N, 3) RGB array, got shape {rgb.shape}")
    if rgb.shape[0] == 0:
        return np.zeros((0, 3), dtype=np.float64)

    srgb = np.clip(rgb.astype(np.float64), 0, 255) / 255.0
    lab = color.rgb2lab(srgb.reshape(-1, 1, 3)).reshape(-1, 3)
    return lab.astype(np.float64)


def lab_array_to_rgb(lab: np.ndarray) -> np.ndarray:
    """
    Convert an array of Lab colors back to 8-bit sRGB.

    Out-of-gamut colors are clamped to [0, 255] and rounded; the loss is
    intentional.

    Args:
        lab: (N, 3) array of (L, a, b)

    Returns:
        (N, 3) uint8 array
    """
    lab = np.asarray(lab, dtype=np.float64)
    if lab.ndim != 2 or lab.shape[1] != 3:
        raise InvalidInputError(f"Expected (N, 3) Lab array, got shape {lab.shape}")
    if lab.shape[0] == 0:
        return np.zeros((0, 3), dtype=np.uint8)

    with warnings.catch_warnings():
        # skimage warns when it clips negative Z; clipping is expected here
        warnings.simplefilter("ignore", UserWarning)
        srgb = color.lab2rgb(lab.reshape(-1, 1, 3)).reshape(-1, 3)

    return np.clip(np.rint(srgb * 255.0), 0, 255).astype(np.uint8)


def rgb_to_lab(r: int, g: int, b: int) -> np.ndarray:
    """Convert a single 8-bit sRGB color to a Lab triple."""
    for name, channel in (("r", r), ("g", g), ("b", b)):
        if not 0 <= channel <= 255:
            raise InvalidInputError(f"Channel {name} out of range [0, 255]: {channel}")
    return rgb_array_to_lab(np.array([[r, g, b]]))[0]


def lab_to_rgb(L: float, a: float, b: float) -> Tuple[int, int, int]:
    """Convert a single Lab triple to a clamped, rounded sRGB tuple."""
    rgb = lab_array_to_rgb(np.array([[L, a, b]]))[0]
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def lab_distance(c1: Sequence[float], c2: Sequence[float]) -> float:
    """Euclidean distance between two Lab colors."""
    diff = np.asarray(c1, dtype=np.float64) - np.asarray(c2, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def lab_distances(points: LabArray, centroids: LabArray) -> np.ndarray:
    """
    Pairwise Lab distances.

    Args:
        points: (N, 3) Lab array
        centroids: (K, 3) Lab array

    Returns:
        (N, K) matrix of Euclidean distances
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    centroids = np.asarray(centroids, dtype=np.float64).reshape(-1, 3)
    return cdist(points, centroids, metric="euclidean")


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """
    Convert 8-bit RGB to HSL.

    Returns:
        (hue in degrees [0, 360), saturation [0, 1], lightness [0, 1])
    """
    h, l, s = colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)
    return (h * 360.0) % 360.0, s, l


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """Convert HSL (hue in degrees) back to a rounded 8-bit RGB tuple."""
    r, g, b = colorsys.hls_to_rgb(
        (h % 360.0) / 360.0,
        float(np.clip(l, 0.0, 1.0)),
        float(np.clip(s, 0.0, 1.0)),
    )
    return tuple(int(np.clip(round(c * 255.0), 0, 255)) for c in (r, g, b))
