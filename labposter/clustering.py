"""Weighted K-means clustering in Lab space."""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from sklearn.cluster import kmeans_plusplus

from labposter.color_space import lab_distances
from labposter.types import InvalidInputError, LabArray

logger = logging.getLogger(__name__)


@dataclass
class ClusterResult:
    """Centroids and sample assignment from :func:`kmeans_lab`."""
    centroids: LabArray     # (k, 3)
    assignment: np.ndarray  # (N,) cluster index per sample
    iterations: int
    converged: bool


def _validate(samples: np.ndarray, weights: np.ndarray, k: int, max_iterations: int) -> None:
    if samples.ndim != 2 or samples.shape[1] != 3:
        raise InvalidInputError(f"Samples must be an (N, 3) Lab array, got shape {samples.shape}")
    if samples.shape[0] == 0:
        raise InvalidInputError("Cannot cluster an empty sample set")
    if not np.all(np.isfinite(samples)):
        raise InvalidInputError("Samples contain NaN or infinite values")
    if weights.shape != (samples.shape[0],):
        raise InvalidInputError(
            f"Expected {samples.shape[0]} weights, got array of shape {weights.shape}"
        )
    if not np.all(np.isfinite(weights)) or np.any(weights <= 0):
        raise InvalidInputError("Weights must be finite and > 0")
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidInputError(f"k must be an integer, got {k!r}")
    if k <= 0:
        raise InvalidInputError(f"k must be >= 1, got {k}")
    if k > samples.shape[0]:
        raise InvalidInputError(f"k ({k}) exceeds the number of samples ({samples.shape[0]})")
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise InvalidInputError(f"max_iterations must be an integer, got {max_iterations!r}")
    if max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be >= 1, got {max_iterations}")


def seed_centroids(
    samples: LabArray,
    weights: np.ndarray,
    k: int,
    random_state: int = 42
) -> LabArray:
    """
    Pick k initial centroids with weighted k-means++.

    Seeding is deterministic for a given ``random_state``.
    """
    centers, _ = kmeans_plusplus(
        samples,
        n_clusters=k,
        sample_weight=weights,
        random_state=random_state
    )
    return np.asarray(centers, dtype=np.float64)


def assign_clusters(samples: LabArray, centroids: LabArray) -> np.ndarray:
    """Index of the nearest centroid for each sample; ties go to the lowest index."""
    return np.argmin(lab_distances(samples, centroids), axis=1)


def update_centroids(
    samples: LabArray,
    weights: np.ndarray,
    assignment: np.ndarray,
    previous: LabArray
) -> LabArray:
    """
    Weighted mean of the samples assigned to each cluster.

    A cluster with no samples keeps its previous position.
    """
    k = previous.shape[0]
    weight_sums = np.bincount(assignment, weights=weights, minlength=k)
    centroids = previous.copy()
    occupied = weight_sums > 0
    for channel in range(3):
        sums = np.bincount(assignment, weights=weights * samples[:, channel], minlength=k)
        centroids[occupied, channel] = sums[occupied] / weight_sums[occupied]
    return centroids


def kmeans_lab(
    samples: LabArray,
    weights: np.ndarray,
    k: int,
    max_iterations: int = 20,
    init: Optional[LabArray] = None,
    random_state: int = 42
) -> ClusterResult:
    """
    Weighted Lloyd's K-means over Lab points.

    Each iteration assigns every sample to its nearest centroid and then moves
    each centroid to the weighted mean of its samples. Iteration stops early
    once an assignment pass reproduces the previous assignment.

    Args:
        samples: (N, 3) Lab points
        weights: (N,) positive sample weights
        k: Number of clusters, 1 <= k <= N
        max_iterations: Upper bound on assignment passes
        init: Optional (k, 3) starting centroids; weighted k-means++ otherwise
        random_state: Seed for k-means++

    Returns:
        ClusterResult with exactly k centroids and one assignment per sample

    Raises:
        InvalidInputError: On empty samples, bad weights, or k outside [1, N]
    """
    samples = np.asarray(samples, dtype=np.float64)
    weights = np.asarray(weights, dtype=np.float64)
    _validate(samples, weights, k, max_iterations)

    if init is None:
        centroids = seed_centroids(samples, weights, k, random_state)
    else:
        centroids = np.array(init, dtype=np.float64)
        if centroids.shape != (k, 3):
            raise InvalidInputError(f"init must have shape ({k}, 3), got {centroids.shape}")
        if not np.all(np.isfinite(centroids)):
            raise InvalidInputError("init contains NaN or infinite values")

    assignment = None
    converged = False
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        new_assignment = assign_clusters(samples, centroids)
        if assignment is not None and np.array_equal(new_assignment, assignment):
            converged = True
            break
        assignment = new_assignment
        centroids = update_centroids(samples, weights, assignment, centroids)

    empty = k - len(np.unique(assignment))
    logger.debug(
        f"K-means: k={k}, n={len(samples)}, iterations={iterations}, "
        f"converged={converged}, empty clusters={empty}"
    )

    return ClusterResult(
        centroids=centroids,
        assignment=assignment,
        iterations=iterations,
        converged=converged
    )
