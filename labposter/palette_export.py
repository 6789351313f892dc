"""Palette serialization: swatch image, CSS, SCSS and JSON."""
import json
from pathlib import Path
from typing import List, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from labposter.color_space import rgb_to_hsl
from labposter.types import InvalidInputError, Palette

SWATCH_SIZE = 100
PADDING = 20
TEXT_HEIGHT = 50
LINE_HEIGHT = 15


def _colors(palette: Palette) -> List[tuple]:
    palette = np.asarray(palette)
    if palette.ndim != 2 or palette.shape[1] != 3:
        raise InvalidInputError(f"Expected (K, 3) palette, got shape {palette.shape}")
    return [tuple(int(round(float(c))) for c in row) for row in palette]


def format_color(rgb) -> str:
    """
    Format an 8-bit RGB color as a lowercase hex string.

    Args:
        rgb: Sequence of three values in [0, 255]

    Returns:
        Hex color string, e.g. "#ff8000"
    """
    r, g, b = [int(min(255, max(0, round(float(c))))) for c in rgb]
    return f"#{r:02x}{g:02x}{b:02x}"


def color_name(index: int) -> str:
    """Export name of the palette entry at ``index`` (1-based in the output)."""
    return f"color-{index + 1}"


def palette_to_css(palette: Palette) -> str:
    """CSS custom-property block under :root."""
    lines = ["/* CSS Variables */", ":root {"]
    for i, rgb in enumerate(_colors(palette)):
        lines.append(f"  --{color_name(i)}: {format_color(rgb)};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def palette_to_scss(palette: Palette) -> str:
    """SCSS variable declarations."""
    lines = ["// SCSS Variables"]
    for i, rgb in enumerate(_colors(palette)):
        lines.append(f"${color_name(i)}: {format_color(rgb)};")
    return "\n".join(lines) + "\n"


def palette_to_json(palette: Palette) -> str:
    """JSON document ``{"palette": [{"name", "hex", "rgb"}, ...]}``."""
    entries = [
        {"name": color_name(i), "hex": format_color(rgb), "rgb": list(rgb)}
        for i, rgb in enumerate(_colors(palette))
    ]
    return json.dumps({"palette": entries}, indent=2)


def palette_code(palette: Palette) -> str:
    """CSS, SCSS and JSON blocks combined into one text document."""
    return (
        "/* Palette Code Export */\n\n"
        + palette_to_css(palette) + "\n\n"
        + palette_to_scss(palette) + "\n\n"
        + palette_to_json(palette)
    )


def swatch_labels(rgb) -> List[str]:
    """Hex, RGB and HSL caption lines for one swatch."""
    r, g, b = rgb
    h, s, l = rgb_to_hsl(r, g, b)
    return [
        format_color(rgb),
        f"RGB: {r}, {g}, {b}",
        f"HSL: {round(h) % 360}°, {round(s * 100)}%, {round(l * 100)}%",
    ]


def render_palette_image(palette: Palette) -> Image.Image:
    """
    Draw the palette as a row of outlined swatches with captions.

    Each swatch is 100px square with 20px padding and a 50px text band
    showing hex, RGB and HSL values.
    """
    colors = _colors(palette)
    if not colors:
        raise InvalidInputError("Cannot render an empty palette")

    width = len(colors) * (SWATCH_SIZE + PADDING) + PADDING
    height = SWATCH_SIZE + PADDING * 2 + TEXT_HEIGHT
    img = Image.new('RGB', (width, height), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    for i, rgb in enumerate(colors):
        x = PADDING + i * (SWATCH_SIZE + PADDING)
        y = PADDING
        draw.rectangle(
            [x, y, x + SWATCH_SIZE - 1, y + SWATCH_SIZE - 1],
            fill=rgb,
            outline=(0, 0, 0),
            width=1
        )

        center = x + SWATCH_SIZE / 2
        for line, text in enumerate(swatch_labels(rgb)):
            text_width = draw.textlength(text, font=font)
            draw.text(
                (center - text_width / 2, y + SWATCH_SIZE + 5 + line * LINE_HEIGHT),
                text,
                fill=(0, 0, 0),
                font=font
            )

    return img


def save_palette_image(palette: Palette, path: Union[str, Path]) -> Path:
    """Render the swatch sheet and save it as PNG."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render_palette_image(palette).save(path, format='PNG')
    return path


def save_palette_code(palette: Palette, path: Union[str, Path]) -> Path:
    """Write the combined CSS/SCSS/JSON text export."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(palette_code(palette), encoding='utf-8')
    return path
