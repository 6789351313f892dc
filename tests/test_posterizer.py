"""Tests for nearest-palette remapping."""
import numpy as np
import pytest

from labposter.color_space import rgb_array_to_lab
from labposter.posterizer import nearest_centroids, remap, remap_full
from labposter.types import InvalidInputError

# Centroids for black and white, painted with distinguishable stand-in colors
CENTROIDS = rgb_array_to_lab(np.array([[0, 0, 0], [255, 255, 255]]))
PALETTE = np.array([[10, 20, 30], [240, 230, 220]], dtype=np.uint8)


class TestNearest:
    """Test nearest centroid lookup."""

    def test_nearest(self):
        """Test dark and light points pick the matching centroid."""
        points = rgb_array_to_lab(np.array([[20, 20, 20], [230, 230, 230], [100, 100, 100]]))
        np.testing.assert_array_equal(nearest_centroids(points, CENTROIDS), [0, 1, 0])

    def test_empty(self):
        """Test no points gives no indices."""
        assert nearest_centroids(np.zeros((0, 3)), CENTROIDS).shape == (0,)


class TestRemap:
    """Test sampled-prefix remapping."""

    def test_all_pixels_sampled(self):
        """Test every pixel is painted when every pixel was sampled."""
        lab = rgb_array_to_lab(np.array([[0, 0, 0], [255, 255, 255], [250, 250, 250], [5, 5, 5]]))

        output = remap(lab, PALETTE, CENTROIDS, 2, 2)

        assert output.shape == (2, 2, 4)
        assert output.dtype == np.uint8
        np.testing.assert_array_equal(output[..., 3], 255)
        np.testing.assert_array_equal(output[0, 0, :3], PALETTE[0])
        np.testing.assert_array_equal(output[0, 1, :3], PALETTE[1])
        np.testing.assert_array_equal(output[1, 0, :3], PALETTE[1])
        np.testing.assert_array_equal(output[1, 1, :3], PALETTE[0])

    def test_unsampled_tail_is_transparent(self):
        """Test pixels past the sample count stay blank with alpha 0."""
        lab = rgb_array_to_lab(np.array([[255, 255, 255], [0, 0, 0]]))

        output = remap(lab, PALETTE, CENTROIDS, 3, 2).reshape(-1, 4)

        np.testing.assert_array_equal(output[:2, 3], [255, 255])
        np.testing.assert_array_equal(output[0, :3], PALETTE[1])
        np.testing.assert_array_equal(output[1, :3], PALETTE[0])
        np.testing.assert_array_equal(output[2:], 0)

    def test_palette_centroid_mismatch(self):
        """Test palette and centroids must pair up."""
        with pytest.raises(InvalidInputError):
            remap(CENTROIDS, PALETTE[:1], CENTROIDS, 1, 2)


class TestRemapFull:
    """Test per-pixel remapping."""

    def test_every_pixel_opaque(self):
        """Test every pixel maps to its own nearest color."""
        image = np.array([
            [[0, 0, 0, 255], [200, 200, 200, 0]],
            [[30, 30, 30, 128], [255, 255, 255, 255]],
        ], dtype=np.uint8)

        output = remap_full(image, PALETTE, CENTROIDS)

        assert output.shape == (2, 2, 4)
        np.testing.assert_array_equal(output[..., 3], 255)
        np.testing.assert_array_equal(output[0, 0, :3], PALETTE[0])
        np.testing.assert_array_equal(output[0, 1, :3], PALETTE[1])
        np.testing.assert_array_equal(output[1, 0, :3], PALETTE[0])
        np.testing.assert_array_equal(output[1, 1, :3], PALETTE[1])

    def test_rgb_input(self):
        """Test three channel input is accepted."""
        image = np.zeros((3, 1, 3), dtype=np.uint8)
        output = remap_full(image, PALETTE, CENTROIDS)
        assert output.shape == (3, 1, 4)
        np.testing.assert_array_equal(output[..., :3], np.tile(PALETTE[0], (3, 1, 1)))
