"""Posterization pipeline: sample, weight, cluster, stylize, remap."""
from pathlib import Path
from typing import Optional, Union
import time
import logging

import numpy as np

from labposter.clustering import kmeans_lab
from labposter.color_space import lab_array_to_rgb, rgb_array_to_lab
from labposter.importance import chroma_weights, contrast_weights, sample_pixels, sample_stride
from labposter.palette_export import save_palette_code, save_palette_image
from labposter.posterizer import remap, remap_full
from labposter.raster_ingest import ingest, ingest_from_array, save_image
from labposter.stylist import apply_color_harmony, stylize, validate_settings
from labposter.types import (
    InvalidInputError,
    PosterizeConfig,
    PosterizeResult,
    Weighting,
)

logger = logging.getLogger(__name__)


def process_image(pixels: np.ndarray, config: Optional[PosterizeConfig] = None) -> PosterizeResult:
    """
    Posterize an in-memory image.

    All inputs are validated before any clustering work starts.

    Args:
        pixels: (H, W, 4) RGBA or (H, W, 3) RGB buffer
        config: Run configuration (defaults if None)

    Returns:
        PosterizeResult with the final palette and RGBA output buffer

    Raises:
        InvalidInputError: If the image is missing or a setting is unusable
    """
    if pixels is None:
        raise InvalidInputError("No image loaded")
    config = config or PosterizeConfig()
    validate_settings(config.modifications)
    image = ingest_from_array(pixels)
    height, width = image.shape[:2]

    # Step 1: strided sampling
    stride = sample_stride(config.detail_level)
    samples_rgb, _ = sample_pixels(image, stride)
    if config.n_colors > len(samples_rgb):
        raise InvalidInputError(
            f"Requested {config.n_colors} colors but only {len(samples_rgb)} pixels were sampled "
            f"(stride {stride}); raise the detail level or lower the color count"
        )
    logger.info(f"Sampled {len(samples_rgb)} of {width * height} pixels (stride {stride})")

    # Step 2: Lab conversion and importance weights
    samples_lab = rgb_array_to_lab(samples_rgb)
    if config.weighting is Weighting.CHROMA:
        weights = chroma_weights(samples_lab)
    else:
        weights = contrast_weights(samples_lab, width, height, stride)

    # Step 3: clustering
    clusters = kmeans_lab(
        samples_lab,
        weights,
        config.n_colors,
        config.max_iterations,
        random_state=config.random_state
    )
    logger.info(
        f"Clustered into {config.n_colors} colors in {clusters.iterations} iterations"
        f"{'' if clusters.converged else ' (iteration limit reached)'}"
    )

    # Step 4: palette styling
    centroids = stylize(clusters.centroids, config.modifications)
    palette = apply_color_harmony(lab_array_to_rgb(centroids), config.harmony)

    # Step 5: remap
    if config.full_coverage:
        output = remap_full(image, palette, centroids)
    else:
        output = remap(samples_lab, palette, centroids, width, height)

    return PosterizeResult(
        palette=palette,
        pixels=output,
        centroids=centroids,
        raw_centroids=clusters.centroids,
        assignment=clusters.assignment,
        sample_count=len(samples_lab),
        stride=stride,
        iterations=clusters.iterations,
        converged=clusters.converged,
        width=width,
        height=height
    )


class PosterizePipeline:
    """File-based posterization with optional palette exports."""

    def __init__(self, config: Optional[PosterizeConfig] = None):
        """
        Initialize pipeline.

        Args:
            config: Configuration (uses defaults if None)
        """
        self.config = config or PosterizeConfig()

    def process(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        palette_image_path: Optional[Union[str, Path]] = None,
        palette_code_path: Optional[Union[str, Path]] = None
    ) -> PosterizeResult:
        """
        Posterize an image file.

        Args:
            input_path: Path to input image
            output_path: Output PNG path (default: <input>_poster.png)
            palette_image_path: Optional path for a palette swatch PNG
            palette_code_path: Optional path for CSS/SCSS/JSON palette code

        Returns:
            PosterizeResult
        """
        start_time = time.time()
        input_path = Path(input_path)
        if output_path is None:
            output_path = input_path.with_name(f"{input_path.stem}_poster.png")

        pixels = ingest(input_path)
        logger.info(f"Loaded {input_path} ({pixels.shape[1]}x{pixels.shape[0]})")

        result = process_image(pixels, self.config)

        save_image(result.pixels, output_path)
        logger.info(f"Saved posterized image to {output_path}")

        if palette_image_path is not None:
            save_palette_image(result.palette, palette_image_path)
            logger.info(f"Saved palette image to {palette_image_path}")

        if palette_code_path is not None:
            save_palette_code(result.palette, palette_code_path)
            logger.info(f"Saved palette code to {palette_code_path}")

        logger.info(f"Done in {time.time() - start_time:.2f}s")
        return result
