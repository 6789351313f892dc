"""Pytest configuration and fixtures."""
import numpy as np
import pytest


@pytest.fixture
def solid_red():
    """2x2 RGBA image, every pixel pure red."""
    image = np.zeros((2, 2, 4), dtype=np.uint8)
    image[..., 0] = 255
    image[..., 3] = 255
    return image


@pytest.fixture
def black_white():
    """1x2 RGBA image: one black pixel, one white pixel."""
    return np.array([[[0, 0, 0, 255], [255, 255, 255, 255]]], dtype=np.uint8)


@pytest.fixture
def quadrants():
    """8x8 RGB image with four saturated color quadrants."""
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    image[:4, :4] = [255, 0, 0]      # Red
    image[:4, 4:] = [255, 128, 0]    # Orange
    image[4:, :4] = [0, 128, 255]    # Azure
    image[4:, 4:] = [60, 60, 200]    # Slate blue
    return image
