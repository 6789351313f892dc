"""Palette post-processing: character styles, value shift, color harmony.

Character and value transforms operate on Lab centroids. Harmony operates on
the RGB palette through HSL, since hue is not linear in Lab.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import numpy as np

from labposter.color_space import hsl_to_rgb, rgb_to_hsl
from labposter.types import (
    HarmonyMode,
    InvalidInputError,
    LabArray,
    ModificationSettings,
    Palette,
)

logger = logging.getLogger(__name__)

# Hue half-width allowed by the analogous harmony
ANALOGOUS_SPREAD = 30.0

# Below this HSL saturation a color is treated as grey and keeps its hue
ACHROMATIC_SATURATION = 1e-3


@dataclass(frozen=True)
class CharacterStyle:
    """Lab adjustments for one named palette character."""
    chroma_scale: float = 1.0
    lightness_scale: float = 1.0
    lightness_target: Optional[float] = None
    lightness_pull: float = 0.0
    a_shift: float = 0.0
    b_shift: float = 0.0


CHARACTERS: Dict[str, CharacterStyle] = {
    "vibrant": CharacterStyle(chroma_scale=1.35),
    "muted": CharacterStyle(chroma_scale=0.6),
    "pastel": CharacterStyle(chroma_scale=0.55, lightness_target=88.0, lightness_pull=0.5),
    "dark": CharacterStyle(chroma_scale=0.9, lightness_scale=0.7),
    "warm": CharacterStyle(a_shift=6.0, b_shift=12.0),
    "cool": CharacterStyle(a_shift=-4.0, b_shift=-12.0),
}


def _as_lab(centroids: LabArray) -> np.ndarray:
    lab = np.array(centroids, dtype=np.float64)
    if lab.ndim != 2 or lab.shape[1] != 3:
        raise InvalidInputError(f"Expected (K, 3) Lab centroids, got shape {lab.shape}")
    return lab


def modify_palette(centroids: LabArray, character: str) -> LabArray:
    """
    Apply a named character style to Lab centroids.

    Args:
        centroids: (K, 3) Lab centroids
        character: One of the keys of ``CHARACTERS``

    Returns:
        New (K, 3) Lab array; the input is left untouched

    Raises:
        InvalidInputError: If the character is unknown
    """
    style = CHARACTERS.get(str(character).strip().lower())
    if style is None:
        choices = ", ".join(sorted(CHARACTERS))
        raise InvalidInputError(f"Unknown character {character!r} (expected one of: {choices})")

    lab = _as_lab(centroids)
    lab[:, 1:] *= style.chroma_scale
    lab[:, 1] += style.a_shift
    lab[:, 2] += style.b_shift
    lab[:, 0] *= style.lightness_scale
    if style.lightness_target is not None:
        lab[:, 0] += (style.lightness_target - lab[:, 0]) * style.lightness_pull
    lab[:, 0] = np.clip(lab[:, 0], 0.0, 100.0)
    return lab


def adjust_value(centroids: LabArray, delta: float) -> LabArray:
    """Shift every centroid's L channel by ``delta``, clamped to [0, 100]."""
    if not np.isfinite(delta):
        raise InvalidInputError(f"Value delta must be finite, got {delta}")
    lab = _as_lab(centroids)
    lab[:, 0] = np.clip(lab[:, 0] + delta, 0.0, 100.0)
    return lab


def validate_settings(settings: Optional[ModificationSettings]) -> None:
    """Reject an unknown character tag before any work is done."""
    if settings is not None and settings.character and settings.character not in CHARACTERS:
        choices = ", ".join(sorted(CHARACTERS))
        raise InvalidInputError(f"Unknown character {settings.character!r} (expected one of: {choices})")


def stylize(centroids: LabArray, settings: Optional[ModificationSettings]) -> LabArray:
    """Apply the configured character, then the configured value shift."""
    lab = _as_lab(centroids)
    if settings is None:
        return lab
    if settings.character:
        logger.info(f"Applying character '{settings.character}'")
        lab = modify_palette(lab, settings.character)
    if settings.value:
        logger.info(f"Shifting value by {settings.value:+g}")
        lab = adjust_value(lab, settings.value)
    return lab


def _hue_delta(hue: float, anchor: float) -> float:
    """Signed angular difference hue - anchor in (-180, 180]."""
    delta = (hue - anchor) % 360.0
    return delta - 360.0 if delta > 180.0 else delta


def _snap(hue: float, targets: List[float]) -> float:
    """Nearest target hue; the first target wins ties."""
    return min(targets, key=lambda t: abs(_hue_delta(hue, t)))


def _anchor_index(hsl: List[tuple]) -> Optional[int]:
    """Index of the most saturated color, or None for an all-grey palette."""
    best = max(range(len(hsl)), key=lambda i: hsl[i][1])
    if hsl[best][1] < ACHROMATIC_SATURATION:
        return None
    return best


def _spread_targets(
    hsl: List[tuple],
    chromatic: List[int],
    anchor_index: int,
    targets: List[float]
) -> Dict[int, float]:
    """
    Assign a target hue to every chromatic color.

    Colors snap to their nearest target. If that leaves a target unused and
    there are enough colors to cover all of them, the colors are redistributed
    so every target is used:

    - two targets: the half of the colors farthest from the anchor move to
      the opposite hue
    - three targets: colors in hue order from the anchor take the targets
      in turn
    """
    anchor = hsl[anchor_index][0]
    snapped = {i: _snap(hsl[i][0], targets) for i in chromatic}
    if len(set(snapped.values())) == len(targets) or len(chromatic) < len(targets):
        return snapped

    if len(targets) == 2:
        by_distance = sorted(chromatic, key=lambda i: (abs(_hue_delta(hsl[i][0], anchor)), i != anchor_index, i))
        far = set(by_distance[len(by_distance) - len(by_distance) // 2:])
        return {i: targets[1] if i in far else targets[0] for i in chromatic}

    # The anchor color leads so it keeps its own hue
    by_hue = sorted(
        chromatic,
        key=lambda i: ((hsl[i][0] - anchor) % 360.0, i != anchor_index, i)
    )
    return {i: targets[n % len(targets)] for n, i in enumerate(by_hue)}


def apply_color_harmony(palette: Palette, mode: Union[HarmonyMode, str, None]) -> Palette:
    """
    Redistribute palette hues according to a harmony rule.

    The anchor hue is taken from the most saturated color. Saturation and
    lightness of each color are kept; grey colors are left unchanged.

    - monochrome: every hue becomes the anchor hue
    - complementary: hues split between the anchor and its opposite
    - analogous: hues are clamped to within 30 degrees of the anchor
    - triadic: hues split between the anchor, +120 and +240 degrees
    - none: palette returned unchanged

    Complementary and triadic use every target hue whenever the palette
    has at least that many chromatic colors.

    Args:
        palette: (K, 3) uint8 RGB palette
        mode: HarmonyMode or its name

    Returns:
        New (K, 3) uint8 palette
    """
    mode = HarmonyMode.parse(mode)
    palette = np.array(palette, dtype=np.uint8).reshape(-1, 3)
    if mode is HarmonyMode.NONE or len(palette) == 0:
        return palette

    hsl = [rgb_to_hsl(int(r), int(g), int(b)) for r, g, b in palette]
    anchor_index = _anchor_index(hsl)
    if anchor_index is None:
        return palette
    anchor = hsl[anchor_index][0]
    chromatic = [i for i, (_, sat, _) in enumerate(hsl) if sat >= ACHROMATIC_SATURATION]

    if mode is HarmonyMode.COMPLEMENTARY:
        targets = [anchor, (anchor + 180.0) % 360.0]
    elif mode is HarmonyMode.TRIADIC:
        targets = [anchor, (anchor + 120.0) % 360.0, (anchor + 240.0) % 360.0]
    else:
        targets = [anchor]

    if mode is HarmonyMode.ANALOGOUS:
        new_hues = {
            i: anchor + float(np.clip(_hue_delta(hsl[i][0], anchor), -ANALOGOUS_SPREAD, ANALOGOUS_SPREAD))
            for i in chromatic
        }
    else:
        new_hues = _spread_targets(hsl, chromatic, anchor_index, targets)

    result = palette.copy()
    for i, new_hue in new_hues.items():
        _, sat, light = hsl[i]
        result[i] = hsl_to_rgb(new_hue, sat, light)

    logger.info(f"Applied {mode.value} harmony around hue {anchor:.1f}")
    return result
