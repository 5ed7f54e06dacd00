"""
Tests for crop region extraction.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from regionocr.utils.region import CropRegion, extract_region, center_aspect_crop


@pytest.fixture
def native_image():
    """A 400x200 (width x height) image whose pixels encode their position."""
    return (np.arange(200 * 400) % 251).reshape(200, 400).astype(np.uint8)


class TestExtractRegion:
    """Tests for display-to-native crop mapping."""

    def test_scaled_display(self, native_image):
        """Crops drawn on a half-size preview are doubled."""
        crop = CropRegion(x=10, y=20, width=50, height=30)

        region = extract_region(native_image, crop, displayed_size=(200, 100))

        assert region.shape == (60, 100)
        np.testing.assert_array_equal(region, native_image[40:100, 20:120])

    def test_native_display(self, native_image):
        """Without a displayed size the crop is already in native pixels."""
        crop = CropRegion(x=5, y=5, width=10, height=20)

        region = extract_region(native_image, crop)

        np.testing.assert_array_equal(region, native_image[5:25, 5:15])

    def test_fractional_coordinates_truncate(self, native_image):
        """Scaled coordinates are truncated to whole pixels."""
        crop = CropRegion(x=1.7, y=0.4, width=10.9, height=5.2)

        region = extract_region(native_image, crop)

        assert region.shape == (5, 10)
        np.testing.assert_array_equal(region, native_image[0:5, 1:11])

    def test_percent_crop(self, native_image):
        """Percentage crops are resolved against the displayed size."""
        crop = CropRegion(x=25, y=25, width=50, height=50, unit="%")

        region = extract_region(native_image, crop, displayed_size=(200, 100))

        np.testing.assert_array_equal(region, native_image[50:150, 100:300])

    def test_no_crop(self, native_image):
        """A missing crop gives a zero-size region."""
        region = extract_region(native_image, None)

        assert region.size == 0

    def test_zero_size_crop(self, native_image):
        """A crop with no area gives a zero-size region."""
        crop = CropRegion(x=10, y=10, width=0, height=50)

        assert extract_region(native_image, crop).size == 0

    def test_negative_size_crop(self, native_image):
        """Negative dimensions give a zero-size region."""
        crop = CropRegion(x=10, y=10, width=-20, height=50)

        assert extract_region(native_image, crop).size == 0

    def test_crop_clipped_to_image(self, native_image):
        """Crops hanging off the edge are clipped."""
        crop = CropRegion(x=380, y=190, width=50, height=50)

        region = extract_region(native_image, crop)

        assert region.shape == (10, 20)

    def test_crop_outside_image(self, native_image):
        """Crops entirely outside the image give a zero-size region."""
        crop = CropRegion(x=500, y=500, width=50, height=50)

        assert extract_region(native_image, crop).size == 0

    def test_color_channels_kept(self):
        """Multi-channel images keep their channel axis."""
        img = np.zeros((50, 60, 4), dtype=np.uint8)

        region = extract_region(img, CropRegion(x=0, y=0, width=10, height=10))
        empty = extract_region(img, None)

        assert region.shape == (10, 10, 4)
        assert empty.shape == (0, 0, 4)

    def test_source_not_shared(self, native_image):
        """The returned region is a copy."""
        region = extract_region(native_image, CropRegion(x=0, y=0, width=10, height=10))
        before = native_image[0, 0]

        region[0, 0] = before + 1

        assert native_image[0, 0] == before


class TestCropRegion:
    """Tests for the CropRegion value object."""

    def test_invalid_unit(self):
        """Only px and % are accepted."""
        with pytest.raises(ValueError):
            CropRegion(x=0, y=0, width=1, height=1, unit="cm")

    def test_pixel_crop_to_pixels(self):
        """Pixel crops resolve to themselves."""
        crop = CropRegion(x=1, y=2, width=3, height=4)

        assert crop.to_pixels((100, 100)) is crop


class TestCenterAspectCrop:
    """Tests for the default centered selection."""

    def test_landscape(self):
        """Half the width at 16:9, centered."""
        crop = center_aspect_crop(800, 600)

        assert crop.unit == "%"
        assert crop.width == pytest.approx(50.0)
        assert crop.height == pytest.approx(37.5)
        assert crop.x == pytest.approx(25.0)
        assert crop.y == pytest.approx(31.25)

    def test_height_clamped(self):
        """Very wide images pin the height and shrink the width."""
        crop = center_aspect_crop(1600, 300)

        assert crop.height == pytest.approx(100.0)
        assert crop.width == pytest.approx(100.0 / 3.0)
        assert crop.y == pytest.approx(0.0)
        assert crop.x == pytest.approx((100.0 - 100.0 / 3.0) / 2.0)

    def test_invalid_size(self):
        """Zero-size displays have no default crop."""
        with pytest.raises(ValueError):
            center_aspect_crop(0, 100)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
