"""Core types for the posterization pipeline."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union
import numpy as np

# Type aliases
ImageArray = np.ndarray  # (H, W, 4) uint8 RGBA
LabArray = np.ndarray    # (N, 3) float64
Palette = np.ndarray     # (K, 3) uint8


class PosterizationError(Exception):
    """Base exception for posterization errors."""
    pass


class InvalidInputError(PosterizationError, ValueError):
    """Raised when the caller supplies an unusable image or setting."""
    pass


class ImageLoadError(PosterizationError):
    """Raised when an image file cannot be decoded."""
    pass


class HarmonyMode(Enum):
    """Hue redistribution policy for the final palette."""
    NONE = "none"
    MONOCHROME = "monochrome"
    COMPLEMENTARY = "complementary"
    ANALOGOUS = "analogous"
    TRIADIC = "triadic"

    @classmethod
    def parse(cls, value: Union[str, "HarmonyMode", None]) -> "HarmonyMode":
        """Coerce a user supplied name into a HarmonyMode."""
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.NONE
        if not isinstance(value, str):
            raise InvalidInputError(f"Harmony mode must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise InvalidInputError(f"Unknown harmony mode {value!r} (expected one of: {choices})")


class Weighting(Enum):
    """Importance heuristic used to weight clustering samples."""
    CONTRAST = "contrast"
    CHROMA = "chroma"


@dataclass
class ModificationSettings:
    """Palette modifications; a field left as None skips that transform."""
    character: Optional[str] = None
    value: Optional[float] = None

    def __post_init__(self):
        if self.character is not None:
            if not isinstance(self.character, str) or not self.character.strip():
                raise InvalidInputError(f"Invalid character tag: {self.character!r}")
            self.character = self.character.strip().lower()
        if self.value is not None:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float, np.number)):
                raise InvalidInputError(f"Value shift must be numeric, got {self.value!r}")
            if not np.isfinite(self.value) or abs(self.value) > 100:
                raise InvalidInputError(f"Value shift must lie in [-100, 100], got {self.value}")
            # A zero shift is a no-op, same as leaving it unset
            if self.value == 0:
                self.value = None


@dataclass
class PosterizeConfig:
    """Configuration for a single posterization run."""
    # Palette size (k)
    n_colors: int = 8

    # Sampling density; stride = max(1, 1000 // detail_level)
    detail_level: int = 100

    # Clustering
    max_iterations: int = 20
    weighting: Weighting = Weighting.CONTRAST
    random_state: int = 42

    # Palette post-processing
    modifications: ModificationSettings = field(default_factory=ModificationSettings)
    harmony: HarmonyMode = HarmonyMode.NONE

    # Map every pixel instead of only the sampled prefix
    full_coverage: bool = False

    def __post_init__(self):
        """Validate settings and coerce string options."""
        if isinstance(self.n_colors, bool) or not isinstance(self.n_colors, (int, np.integer)):
            raise InvalidInputError(f"n_colors must be an integer, got {self.n_colors!r}")
        if self.n_colors < 1:
            raise InvalidInputError(f"n_colors must be >= 1, got {self.n_colors}")
        if isinstance(self.detail_level, bool) or not isinstance(self.detail_level, (int, np.integer)):
            raise InvalidInputError(f"detail_level must be an integer, got {self.detail_level!r}")
        if self.detail_level < 1:
            raise InvalidInputError(f"detail_level must be >= 1, got {self.detail_level}")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, (int, np.integer)):
            raise InvalidInputError(f"max_iterations must be an integer, got {self.max_iterations!r}")
        if self.max_iterations < 1:
            raise InvalidInputError(f"max_iterations must be >= 1, got {self.max_iterations}")

        if isinstance(self.weighting, str):
            try:
                self.weighting = Weighting(self.weighting.strip().lower())
            except ValueError:
                raise InvalidInputError(f"Unknown weighting {self.weighting!r}")
        self.harmony = HarmonyMode.parse(self.harmony)
        if self.modifications is None:
            self.modifications = ModificationSettings()


@dataclass
class PosterizeResult:
    """Output of one posterization run."""
    palette: Palette          # final RGB palette, cluster order
    pixels: ImageArray        # posterized RGBA buffer
    centroids: LabArray       # stylized centroids used for remapping
    raw_centroids: LabArray   # centroids straight out of k-means
    assignment: np.ndarray    # sample -> cluster index
    sample_count: int
    stride: int
    iterations: int
    converged: bool
    width: int
    height: int
