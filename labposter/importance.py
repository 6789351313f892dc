"""Sample selection and per-sample importance weights for clustering."""
import logging
from typing import Sequence, Tuple

import numpy as np

from labposter.color_space import lab_distance
from labposter.types import ImageArray, InvalidInputError, LabArray

logger = logging.getLogger(__name__)

NEIGHBOR_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))

# Average neighbor contrast is divided by this before being added to the base weight
CONTRAST_SCALE = 25.0

# Chroma at which the chroma heuristic adds a full extra unit of weight
CHROMA_SCALE = 64.0
MIDTONE_BONUS = 0.5


def sample_stride(detail_level: int) -> int:
    """
    Sampling stride for a detail level.

    Higher detail levels sample more densely: stride = max(1, 1000 // detail_level).
    """
    if detail_level < 1:
        raise InvalidInputError(f"detail_level must be >= 1, got {detail_level}")
    return max(1, 1000 // int(detail_level))


def sample_pixels(pixels: ImageArray, stride: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Take every ``stride``-th pixel in row-major order.

    Args:
        pixels: (H, W, 3) or (H, W, 4) uint8 buffer
        stride: Distance between consecutive samples in flat pixel index

    Returns:
        Tuple of (rgb_samples, flat_indices)
        - rgb_samples: (N, 3) uint8 array
        - flat_indices: (N,) index of each sample in the flattened image
    """
    if stride < 1:
        raise InvalidInputError(f"stride must be >= 1, got {stride}")
    flat = pixels.reshape(-1, pixels.shape[-1])[:, :3]
    indices = np.arange(0, flat.shape[0], stride)
    return flat[indices], indices


def compute_weight(
    pixel_lab: Sequence[float],
    samples_lab: LabArray,
    width: int,
    height: int,
    x: int,
    y: int
) -> float:
    """
    Contrast-based importance weight of one pixel.

    Starts at 1 and adds the mean Lab distance to the in-bounds 4-neighbors
    divided by 25. A neighbor counts only if its flat index ``ny * width + nx``
    falls inside the sample array. Pixels without valid neighbors weigh 1.

    Args:
        pixel_lab: Lab color of the pixel
        samples_lab: (N, 3) Lab samples indexed by flat position
        width: Image width
        height: Image height
        x: Pixel column
        y: Pixel row

    Returns:
        Weight >= 1
    """
    total = 0.0
    valid = 0
    for dx, dy in NEIGHBOR_OFFSETS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            neighbor_index = ny * width + nx
            if neighbor_index < len(samples_lab):
                total += lab_distance(pixel_lab, samples_lab[neighbor_index])
                valid += 1

    if valid == 0:
        return 1.0
    return 1.0 + (total / valid) / CONTRAST_SCALE


def contrast_weights(samples_lab: LabArray, width: int, height: int, stride: int = 1) -> np.ndarray:
    """
    Vectorized :func:`compute_weight` for every sample.

    Sample ``j`` is located at source pixel ``j * stride``.

    Returns:
        (N,) float64 array of weights >= 1
    """
    samples_lab = np.asarray(samples_lab, dtype=np.float64)
    n = len(samples_lab)
    if n == 0:
        return np.zeros(0, dtype=np.float64)

    positions = np.arange(n, dtype=np.int64) * stride
    xs = positions % width
    ys = positions // width

    total = np.zeros(n, dtype=np.float64)
    valid = np.zeros(n, dtype=np.int64)

    for dx, dy in NEIGHBOR_OFFSETS:
        nx = xs + dx
        ny = ys + dy
        neighbor_index = ny * width + nx
        mask = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height) & (neighbor_index < n)
        if not np.any(mask):
            continue
        diff = samples_lab[mask] - samples_lab[neighbor_index[mask]]
        total[mask] += np.sqrt(np.sum(diff * diff, axis=1))
        valid[mask] += 1

    weights = np.ones(n, dtype=np.float64)
    has_neighbors = valid > 0
    weights[has_neighbors] += (total[has_neighbors] / valid[has_neighbors]) / CONTRAST_SCALE
    logger.debug(f"Contrast weights: {n} samples, mean {weights.mean():.3f}, max {weights.max():.3f}")
    return weights


def chroma_weight(L: float, a: float, b: float) -> float:
    """
    Saturation/lightness importance weight.

    Saturated colors and mid-tones weigh more than greys and extremes,
    so small vivid areas are not swallowed by large neutral ones.
    """
    chroma = float(np.hypot(a, b))
    midtone = max(0.0, 1.0 - abs(L - 50.0) / 50.0)
    return 1.0 + chroma / CHROMA_SCALE + MIDTONE_BONUS * midtone


def chroma_weights(samples_lab: LabArray) -> np.ndarray:
    """Vectorized :func:`chroma_weight`."""
    samples_lab = np.asarray(samples_lab, dtype=np.float64).reshape(-1, 3)
    chroma = np.hypot(samples_lab[:, 1], samples_lab[:, 2])
    midtone = np.clip(1.0 - np.abs(samples_lab[:, 0] - 50.0) / 50.0, 0.0, 1.0)
    return 1.0 + chroma / CHROMA_SCALE + MIDTONE_BONUS * midtone
