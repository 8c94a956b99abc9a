from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from mlcore.core import ImageLoader, PixelMatrix
from mlcore.core.exceptions import (
    DimensionMismatchError,
    ImageProcessingError,
    InvalidArgumentError,
    UnsupportedFormatError,
)


class TestImageLoaderConfiguration:
    """Test loader construction"""

    def test_defaults(self):
        """Test default loader takes dimensions from files"""
        loader = ImageLoader()
        assert loader.width == 0
        assert loader.height == 0
        assert loader.channels == 0
        assert loader.max_concurrent_loads >= 1

    @pytest.mark.parametrize("kwargs", [
        {"width": -1},
        {"height": -5},
        {"channels": 5},
        {"channels": -1},
        {"max_concurrent_loads": 0},
    ])
    def test_invalid_configuration(self, kwargs):
        """Test bad configuration values are rejected"""
        with pytest.raises(InvalidArgumentError):
            ImageLoader(**kwargs)

    @pytest.mark.parametrize("path,expected", [
        ("photo.JPG", True),
        ("photo.jpeg", True),
        ("scan.Png", True),
        ("frame.ppm", True),
        ("doc.txt", False),
        ("archive.png.zip", False),
        ("no_extension", False),
    ])
    def test_is_supported_format(self, path, expected):
        """Test extension checks through the loader"""
        assert ImageLoader.is_supported_format(path) is expected


class TestImageLoaderSingle:
    """Test single image loading"""

    def test_load_png_success(self, image_loader, pixel_matrix, sample_png):
        """Test a PNG lands in one column with metadata"""
        path, pixels = sample_png

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.data.shape == (4 * 3 * 3, 1)
        assert pixel_matrix.data.dtype == np.uint8
        assert (pixel_matrix.width, pixel_matrix.height, pixel_matrix.channels) == (4, 3, 3)
        np.testing.assert_array_equal(pixel_matrix.image(0), pixels)

    def test_packing_is_row_major_interleaved(self, image_loader, pixel_matrix, sample_png):
        """Test byte (row, col, channel) sits at (row * width + col) * channels + channel"""
        path, pixels = sample_png
        image_loader.load(path, pixel_matrix)

        column = pixel_matrix.data[:, 0]
        width, channels = 4, 3
        assert column[(2 * width + 1) * channels + 2] == pixels[2, 1, 2]
        assert column[(0 * width + 3) * channels + 0] == pixels[0, 3, 0]

    def test_flip_vertical_reverses_rows(self, image_loader, pixel_matrix, sample_png):
        """Test flipped load equals the rows in reverse order"""
        path, pixels = sample_png

        assert image_loader.load(path, pixel_matrix, flip_vertical=True)
        np.testing.assert_array_equal(pixel_matrix.image(0), pixels[::-1])

    def test_grayscale_keeps_one_channel(self, image_loader, pixel_matrix, make_image):
        """Test grayscale files load with a single channel"""
        path, pixels = make_image("gray.png", channels=1)

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.channels == 1
        np.testing.assert_array_equal(pixel_matrix.image(0), pixels)

    def test_rgba_keeps_alpha(self, image_loader, pixel_matrix, make_image):
        """Test RGBA files load with four channels"""
        path, _ = make_image("alpha.png", channels=4)

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.channels == 4

    @pytest.mark.parametrize("channels", [1, 2, 3, 4])
    def test_requested_channels(self, pixel_matrix, sample_png, channels):
        """Test configured channel count converts the decoded image"""
        path, _ = sample_png
        loader = ImageLoader(channels=channels)

        assert loader.load(path, pixel_matrix)
        assert pixel_matrix.channels == channels
        assert pixel_matrix.data.shape == (4 * 3 * channels, 1)

    def test_palette_image_becomes_rgb(self, image_loader, pixel_matrix, tmp_path):
        """Test palette GIFs are expanded instead of returning indices"""
        path = tmp_path / "palette.gif"
        Image.new("RGB", (6, 2), color=(10, 200, 30)).quantize().save(path)

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.channels in (3, 4)
        assert pixel_matrix.image(0)[0, 0, 1] == 200

    def test_sixteen_bit_png_scaled_to_eight_bits(self, image_loader, pixel_matrix, tmp_path):
        """Test 16-bit grayscale keeps the high byte"""
        path = tmp_path / "deep.png"
        values = np.full((2, 3), 0xAB12, dtype=np.uint16)
        Image.fromarray(values).save(path)

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.channels == 1
        assert np.all(pixel_matrix.data == 0xAB)

    def test_plain_gif_loads_as_rgb(self, image_loader, pixel_matrix, tmp_path):
        """Test GIFs without transparency report three channels"""
        path = tmp_path / "plain.gif"
        Image.new("RGB", (3, 2), color=(10, 200, 30)).quantize().save(path)

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.channels == 3

    def test_transparent_gif_loads_as_rgba(self, image_loader, pixel_matrix, tmp_path):
        """Test GIFs with a transparent index keep an alpha channel"""
        path = tmp_path / "clear.gif"
        Image.new("RGB", (3, 2), color=(10, 200, 30)).quantize().save(path, transparency=0)

        assert image_loader.load(path, pixel_matrix)
        assert pixel_matrix.channels == 4
        assert np.all(pixel_matrix.image(0)[:, :, 3] == 0)

    def test_radiance_hdr_tone_mapped(self, image_loader, pixel_matrix, radiance_file):
        """Test Radiance files decode to gamma-mapped 8-bit RGB"""
        path, grey = radiance_file

        assert image_loader.load(path, pixel_matrix)
        assert (pixel_matrix.width, pixel_matrix.height, pixel_matrix.channels) == (2, 2, 3)
        image = pixel_matrix.image(0).astype(np.int16)
        for channel in range(3):
            np.testing.assert_allclose(image[:, :, channel], grey, atol=1)

    def test_radiance_pic_extension(self, pixel_matrix, radiance_file):
        """Test the .pic extension reaches the same decoder and honours channels"""
        path, grey = radiance_file
        pic = path.with_suffix(".pic")
        pic.write_bytes(path.read_bytes())

        assert ImageLoader(channels=1).load(pic, pixel_matrix, flip_vertical=True)
        np.testing.assert_allclose(pixel_matrix.image(0)[:, :, 0].astype(np.int16), grey[::-1], atol=1)

    def test_jpeg_dimensions(self, image_loader, pixel_matrix, tmp_path):
        """Test lossy files report exact dimensions"""
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (17, 9), color="blue").save(path)

        assert image_loader.load(path, pixel_matrix)
        assert (pixel_matrix.width, pixel_matrix.height, pixel_matrix.channels) == (17, 9, 3)

    def test_configured_size_match(self, pixel_matrix, sample_png):
        """Test images matching the configured size load"""
        path, _ = sample_png
        assert ImageLoader(width=4, height=3).load(path, pixel_matrix)

    def test_configured_size_mismatch(self, pixel_matrix, sample_png):
        """Test images of another size are rejected"""
        path, _ = sample_png
        assert not ImageLoader(width=8, height=3).load(path, pixel_matrix)
        assert pixel_matrix.is_empty()


class TestImageLoaderErrorHandling:
    """Test failures are reported as False without raising"""

    def test_nonexistent_file(self, image_loader, pixel_matrix):
        assert image_loader.load("non_existent_file.png", pixel_matrix) is False

    def test_unsupported_extension(self, image_loader, pixel_matrix, tmp_path):
        """Test unsupported files are rejected before being opened"""
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with patch("mlcore.core.data.image_loader.Path.read_bytes") as mock_read:
            assert image_loader.load(path, pixel_matrix) is False
            mock_read.assert_not_called()

    def test_corrupted_file(self, image_loader, pixel_matrix, tmp_path):
        path = tmp_path / "corrupted.jpg"
        path.write_bytes(b"not a valid image file")
        assert image_loader.load(path, pixel_matrix) is False

    def test_empty_file(self, image_loader, pixel_matrix, tmp_path):
        path = tmp_path / "empty.png"
        path.write_bytes(b"")
        assert image_loader.load(path, pixel_matrix) is False

    def test_truncated_file(self, image_loader, pixel_matrix, tmp_path):
        """Test a PNG cut in half fails to decode"""
        path = tmp_path / "big.png"
        Image.new("RGB", (64, 64), color="red").save(path)
        path.write_bytes(path.read_bytes()[:40])
        assert image_loader.load(path, pixel_matrix) is False

    def test_path_with_null_byte(self, image_loader, pixel_matrix, make_image):
        """Test paths the OS cannot open are reported, not raised"""
        first, _ = make_image("a.png")

        assert image_loader.load("bad\x00name.png", pixel_matrix) is False
        assert image_loader.load_many([first, "bad\x00name.png"], pixel_matrix) is False
        with pytest.raises(ImageProcessingError, match="Failed to read image file"):
            image_loader.read("bad\x00name.png")

    def test_truncated_radiance_file(self, image_loader, pixel_matrix, tmp_path):
        path = tmp_path / "broken.hdr"
        path.write_bytes(b"#?RADIANCE\nFORMAT=32-bit_rle_rgbe\n")
        assert image_loader.load(path, pixel_matrix) is False

    def test_failure_keeps_previous_contents(self, image_loader, pixel_matrix, sample_png):
        """Test the destination is untouched when a later load fails"""
        path, pixels = sample_png
        image_loader.load(path, pixel_matrix)

        assert not image_loader.load("missing.png", pixel_matrix)
        np.testing.assert_array_equal(pixel_matrix.image(0), pixels)

    def test_read_raises_typed_errors(self, image_loader, tmp_path, sample_png):
        """Test the raising primitive behind the boolean API"""
        with pytest.raises(UnsupportedFormatError):
            image_loader.read("doc.txt")

        with pytest.raises(ImageProcessingError, match="Failed to read image file"):
            image_loader.read(tmp_path / "missing.png")

        bad = tmp_path / "bad.png"
        bad.write_bytes(b"garbage")
        with pytest.raises(ImageProcessingError, match="Failed to decode image"):
            image_loader.read(bad)

        path, _ = sample_png
        with pytest.raises(DimensionMismatchError):
            ImageLoader(height=10).read(path)

    def test_failure_is_logged(self, image_loader, pixel_matrix, caplog):
        with caplog.at_level("WARNING", logger="mlcore"):
            image_loader.load("missing.png", pixel_matrix)
        assert "Image load failed" in caplog.text


class TestImageLoaderBatch:
    """Test multi-file and directory loading"""

    def test_load_many_one_column_per_image(self, image_loader, pixel_matrix, make_image):
        """Test columns follow input order"""
        files = [make_image(f"b{i}.png", offset=i * 50) for i in range(3)]
        paths = [path for path, _ in reversed(files)]

        assert image_loader.load_many(paths, pixel_matrix)
        assert pixel_matrix.data.shape == (4 * 3 * 3, 3)
        for column, (_, pixels) in enumerate(reversed(files)):
            np.testing.assert_array_equal(pixel_matrix.image(column), pixels)

    def test_load_many_empty_list(self, image_loader, sample_png):
        """Test an empty list gives an empty matrix"""
        path, _ = sample_png
        matrix = PixelMatrix()
        image_loader.load(path, matrix)

        assert image_loader.load_many([], matrix)
        assert matrix.is_empty()
        assert matrix.n_images == 0
        assert (matrix.width, matrix.height, matrix.channels) == (0, 0, 0)

    def test_load_many_rejects_mixed_sizes(self, image_loader, pixel_matrix, make_image):
        """Test a batch with differing dimensions is rejected"""
        first, _ = make_image("a.png", width=4, height=3)
        second, _ = make_image("b.png", width=5, height=3)

        assert image_loader.load_many([first, second], pixel_matrix) is False
        assert pixel_matrix.is_empty()

    def test_load_many_rejects_mixed_channels(self, image_loader, pixel_matrix, make_image):
        first, _ = make_image("a.png", channels=3)
        second, _ = make_image("b.png", channels=1)
        assert image_loader.load_many([first, second], pixel_matrix) is False

    def test_load_many_channels_override_unifies_batch(self, pixel_matrix, make_image):
        """Test a channel count request makes mixed-channel batches consistent"""
        first, _ = make_image("a.png", channels=3)
        second, _ = make_image("b.png", channels=1)
        assert ImageLoader(channels=3).load_many([first, second], pixel_matrix)
        assert pixel_matrix.n_images == 2

    def test_load_many_aborts_on_single_failure(self, image_loader, pixel_matrix, make_image):
        first, _ = make_image("a.png")
        assert image_loader.load_many([first, "missing.png"], pixel_matrix) is False
        assert pixel_matrix.is_empty()

    def test_load_directory(self, image_loader, pixel_matrix, image_dir):
        """Test only supported regular files are loaded"""
        assert image_loader.load_directory(image_dir, pixel_matrix)
        assert pixel_matrix.n_images == 3
        assert (pixel_matrix.width, pixel_matrix.height, pixel_matrix.channels) == (4, 3, 3)

    def test_load_directory_empty(self, image_loader, pixel_matrix, empty_dir):
        """Test an empty directory succeeds without decoding anything"""
        with patch.object(ImageLoader, "_decode") as mock_decode:
            assert image_loader.load_directory(empty_dir, pixel_matrix)
            mock_decode.assert_not_called()
        assert pixel_matrix.is_empty()

    def test_load_directory_missing(self, image_loader, pixel_matrix, tmp_path):
        assert image_loader.load_directory(tmp_path / "nope", pixel_matrix) is False

    def test_load_directory_with_corrupt_file(self, image_loader, pixel_matrix, image_dir):
        (image_dir / "broken.jpg").write_bytes(b"\xff\xd8garbage")
        assert image_loader.load_directory(image_dir, pixel_matrix) is False


class TestImageLoaderFromSettings:
    """Test settings integration"""

    def test_from_settings(self):
        from mlcore.config import LoaderConfig

        loader = ImageLoader.from_settings(LoaderConfig(width=32, height=16, channels=1, max_concurrent_loads=2))
        assert (loader.width, loader.height, loader.channels) == (32, 16, 1)
        assert loader.max_concurrent_loads == 2

    def test_from_global_settings(self):
        loader = ImageLoader.from_settings()
        assert isinstance(loader, ImageLoader)
