"""Raster image loading into RGBA pixel buffers."""
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image
from PIL import ImageOps

from labposter.types import ImageArray, ImageLoadError, InvalidInputError


def ingest(path: Union[str, Path]) -> ImageArray:
    """
    Load an image file as an RGBA buffer.

    Args:
        path: Path to image file

    Returns:
        (H, W, 4) uint8 array

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            img = img.convert('RGBA')
            return np.array(img, dtype=np.uint8)
    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e


def ingest_from_array(image: np.ndarray) -> ImageArray:
    """
    Normalize an in-memory image to an RGBA uint8 buffer.

    Args:
        image: (H, W), (H, W, 3) or (H, W, 4) array; floats are read as [0, 1]

    Returns:
        (H, W, 4) uint8 array
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise InvalidInputError(f"Expected 2D or 3D array, got {image.ndim}D")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidInputError("Image has no pixels")

    if np.issubdtype(image.dtype, np.floating):
        if not np.all(np.isfinite(image)):
            raise InvalidInputError("Image contains NaN or infinite values")
        image = np.rint(np.clip(image, 0.0, 1.0) * 255.0)
    elif image.dtype != np.uint8:
        if image.min() < 0 or image.max() > 255:
            raise InvalidInputError("Integer image values must lie in [0, 255]")

    image = image.astype(np.uint8)

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=-1)
    elif image.shape[2] != 4:
        raise InvalidInputError(f"Expected 3 or 4 channels, got {image.shape[2]}")

    return image


def save_image(pixels: ImageArray, path: Union[str, Path]) -> Path:
    """Write an RGBA buffer to disk; the format follows the file extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    if path.suffix.lower() in ('.jpg', '.jpeg'):
        # JPEG has no alpha channel
        img = img.convert('RGB')
    img.save(path)
    return path
