"""Lab-space palette extraction and posterization."""
from labposter.types import (
    HarmonyMode,
    ModificationSettings,
    PosterizeConfig,
    PosterizeResult,
    Weighting,
    PosterizationError,
    InvalidInputError,
    ImageLoadError,
)
from labposter.pipeline import PosterizePipeline, process_image

__version__ = "0.1.0"

__all__ = [
    "HarmonyMode",
    "ModificationSettings",
    "PosterizeConfig",
    "PosterizeResult",
    "Weighting",
    "PosterizationError",
    "InvalidInputError",
    "ImageLoadError",
    "PosterizePipeline",
    "process_image",
]
