"""End-to-end tests for the posterization pipeline."""
import numpy as np
import pytest
from PIL import Image

from labposter.color_space import rgb_to_hsl
from labposter.pipeline import PosterizePipeline, process_image
from labposter.types import (
    HarmonyMode,
    InvalidInputError,
    ModificationSettings,
    PosterizeConfig,
    Weighting,
)


def hue_gap(h1, h2):
    d = abs(h1 - h2) % 360.0
    return min(d, 360.0 - d)


class TestProcessImage:
    """Test process_image end to end."""

    def test_solid_red_single_color(self, solid_red):
        """Test a solid red image collapses to one red palette entry."""
        config = PosterizeConfig(n_colors=1, detail_level=1000)

        result = process_image(solid_red, config)

        assert result.palette.shape == (1, 3)
        assert np.all(np.abs(result.palette[0].astype(int) - [255, 0, 0]) <= 1)
        assert result.pixels.shape == (2, 2, 4)
        np.testing.assert_array_equal(result.pixels[..., :3], np.tile(result.palette[0], (2, 2, 1)))
        np.testing.assert_array_equal(result.pixels[..., 3], 255)

    def test_black_and_white(self, black_white):
        """Test two clearly separated colors each map to their own centroid."""
        config = PosterizeConfig(n_colors=2, detail_level=1000)

        result = process_image(black_white, config)

        assert result.palette.shape == (2, 3)
        assert result.centroids.shape == (2, 3)
        lightness = sorted(result.centroids[:, 0])
        assert lightness[0] == pytest.approx(0.0, abs=1.0)
        assert lightness[1] == pytest.approx(100.0, abs=1.0)

        black_px = result.pixels[0, 0]
        white_px = result.pixels[0, 1]
        assert np.all(black_px[:3] <= 2)
        assert np.all(white_px[:3] >= 253)
        assert black_px[3] == 255 and white_px[3] == 255

    def test_sampled_prefix_leaves_tail_transparent(self, solid_red):
        """Test a coarse stride only paints the sampled prefix."""
        config = PosterizeConfig(n_colors=1, detail_level=100)

        result = process_image(solid_red, config)

        assert result.stride == 10
        assert result.sample_count == 1
        alpha = result.pixels.reshape(-1, 4)[:, 3]
        np.testing.assert_array_equal(alpha, [255, 0, 0, 0])

    def test_full_coverage(self, solid_red):
        """Test full coverage paints every pixel regardless of stride."""
        config = PosterizeConfig(n_colors=1, detail_level=100, full_coverage=True)

        result = process_image(solid_red, config)

        np.testing.assert_array_equal(result.pixels[..., 3], 255)
        np.testing.assert_array_equal(result.pixels[..., :3], np.tile(result.palette[0], (2, 2, 1)))

    def test_output_uses_palette_colors(self, quadrants):
        """Test every painted pixel is a palette color."""
        config = PosterizeConfig(n_colors=4, detail_level=1000)

        result = process_image(quadrants, config)

        assert result.sample_count == 64
        assert len(result.assignment) == 64
        palette = {tuple(c) for c in result.palette.tolist()}
        painted = {tuple(c) for c in result.pixels[..., :3].reshape(-1, 3).tolist()}
        assert painted <= palette
        assert len(palette) == 4

    def test_complementary_harmony(self, quadrants):
        """Test harmony is applied to the final palette."""
        config = PosterizeConfig(n_colors=4, detail_level=1000, harmony="complementary")

        result = process_image(quadrants, config)

        assert config.harmony is HarmonyMode.COMPLEMENTARY
        palette_hues = [rgb_to_hsl(*c)[0] for c in result.palette.tolist()]
        anchor = palette_hues[0]
        for hue in palette_hues:
            assert min(hue_gap(hue, anchor), hue_gap(hue, anchor + 180.0)) <= 10.0

    def test_value_shift(self, quadrants):
        """Test the value delta is applied to the clustered centroids."""
        config = PosterizeConfig(
            n_colors=4,
            detail_level=1000,
            modifications=ModificationSettings(value=10)
        )

        result = process_image(quadrants, config)

        expected = np.clip(result.raw_centroids[:, 0] + 10, 0, 100)
        np.testing.assert_allclose(result.centroids[:, 0], expected)

    def test_chroma_weighting(self, quadrants):
        """Test the chroma heuristic runs through the pipeline."""
        config = PosterizeConfig(n_colors=2, detail_level=1000, weighting="chroma")
        assert config.weighting is Weighting.CHROMA

        result = process_image(quadrants, config)

        assert result.palette.shape == (2, 3)

    def test_no_image(self):
        """Test a missing image fails fast."""
        with pytest.raises(InvalidInputError, match="No image"):
            process_image(None)

    def test_unknown_character_fails_fast(self, solid_red):
        """Test an unknown character is rejected before clustering."""
        config = PosterizeConfig(n_colors=1, modifications=ModificationSettings(character="sparkly"))
        with pytest.raises(InvalidInputError, match="Unknown character"):
            process_image(solid_red, config)

    def test_too_many_colors(self, solid_red):
        """Test k larger than the sample count is rejected."""
        with pytest.raises(InvalidInputError, match="only 1 pixels"):
            process_image(solid_red, PosterizeConfig(n_colors=2, detail_level=100))


class TestConfigValidation:
    """Test PosterizeConfig validation."""

    def test_bad_colors(self):
        with pytest.raises(InvalidInputError):
            PosterizeConfig(n_colors=0)

    def test_bad_detail(self):
        with pytest.raises(InvalidInputError):
            PosterizeConfig(detail_level=0)

    def test_bad_iterations(self):
        with pytest.raises(InvalidInputError, match="max_iterations"):
            PosterizeConfig(max_iterations=0)
        with pytest.raises(InvalidInputError, match="must be an integer"):
            PosterizeConfig(max_iterations=2.5)
        with pytest.raises(InvalidInputError, match="must be an integer"):
            PosterizeConfig(max_iterations=True)

    def test_fractional_iterations_rejected_before_clustering(self, solid_red):
        config = PosterizeConfig(n_colors=1, detail_level=1000)
        config.max_iterations = 2.5
        with pytest.raises(InvalidInputError, match="must be an integer"):
            process_image(solid_red, config)

    def test_bad_harmony(self):
        with pytest.raises(InvalidInputError):
            PosterizeConfig(harmony="split")

    def test_bad_weighting(self):
        with pytest.raises(InvalidInputError):
            PosterizeConfig(weighting="entropy")

    def test_bad_value(self):
        with pytest.raises(InvalidInputError):
            ModificationSettings(value=250)
        with pytest.raises(InvalidInputError):
            ModificationSettings(value="bright")

    def test_zero_value_is_skipped(self):
        assert ModificationSettings(value=0).value is None


class TestPosterizePipeline:
    """Test the file based pipeline."""

    def test_process_writes_outputs(self, quadrants, tmp_path):
        """Test image, palette swatches and palette code are written."""
        input_path = tmp_path / "quadrants.png"
        Image.fromarray(quadrants).save(input_path)
        output_path = tmp_path / "out" / "poster.png"

        pipeline = PosterizePipeline(PosterizeConfig(n_colors=4, detail_level=1000))
        result = pipeline.process(
            input_path,
            output_path,
            palette_image_path=tmp_path / "palette.png",
            palette_code_path=tmp_path / "palette.txt"
        )

        assert output_path.exists()
        with Image.open(output_path) as img:
            assert img.size == (8, 8)
            assert img.mode == "RGBA"
        assert (tmp_path / "palette.png").exists()
        code = (tmp_path / "palette.txt").read_text(encoding="utf-8")
        assert code.count("--color-") == len(result.palette)

    def test_default_output_path(self, solid_red, tmp_path):
        """Test the default output lands beside the input."""
        input_path = tmp_path / "red.png"
        Image.fromarray(solid_red).save(input_path)

        PosterizePipeline(PosterizeConfig(n_colors=1, detail_level=1000)).process(input_path)

        assert (tmp_path / "red_poster.png").exists()
