import json

import piexif
import pytest

from image_api.services.exceptions import MetadataExtractionError
from image_api.services.metadata import ExifMetadataExtractor, describe_value, metadata_to_json


@pytest.fixture()
def extractor() -> ExifMetadataExtractor:
	return ExifMetadataExtractor()


class TestExtractFileGroups:
	def test_jpeg_file_type(self, extractor: ExifMetadataExtractor, make_image) -> None:
		meta = extractor.extract(make_image(1200, 800))
		assert meta["File Type"]["Detected File Type Name"] == "JPEG"
		assert meta["File Type"]["Detected MIME Type"] == "image/jpeg"
		assert meta["File Type"]["Expected File Name Extension"] == "jpg"

	def test_image_dimensions(self, extractor: ExifMetadataExtractor, make_image) -> None:
		meta = extractor.extract(make_image(1200, 800))
		assert meta["JPEG"]["Image Width"] == "1200 pixels"
		assert meta["JPEG"]["Image Height"] == "800 pixels"

	def test_png_without_exif_has_no_exif_groups(self, extractor: ExifMetadataExtractor, make_image) -> None:
		meta = extractor.extract(make_image(10, 10, fmt="PNG"))
		assert set(meta) == {"File Type", "PNG"}

	def test_webp_file_type(self, extractor: ExifMetadataExtractor, make_image) -> None:
		meta = extractor.extract(make_image(10, 10, fmt="WEBP"))
		assert meta["File Type"]["Detected File Type Name"] == "WebP"


class TestExtractExif:
	def test_camera_tags(self, extractor: ExifMetadataExtractor, exif_jpeg_bytes: bytes) -> None:
		meta = extractor.extract(exif_jpeg_bytes)
		assert meta["Exif IFD0"]["Make"] == "TestCam"
		assert meta["Exif IFD0"]["Model"] == "TC-1"

	def test_exposure_tags(self, extractor: ExifMetadataExtractor, exif_jpeg_bytes: bytes) -> None:
		meta = extractor.extract(exif_jpeg_bytes)
		assert meta["Exif SubIFD"]["ExposureTime"] == "1/125"
		assert meta["Exif SubIFD"]["FNumber"] == "28/10"
		assert meta["Exif SubIFD"]["ISOSpeedRatings"] == "200"

	def test_all_values_are_text(self, extractor: ExifMetadataExtractor, exif_jpeg_bytes: bytes) -> None:
		meta = extractor.extract(exif_jpeg_bytes)
		for group in meta.values():
			assert all(isinstance(v, str) for v in group.values())


class TestExtractFailures:
	def test_unreadable_container_raises(self, extractor: ExifMetadataExtractor) -> None:
		with pytest.raises(MetadataExtractionError):
			extractor.extract(b"\x00\x01\x02 not an image")


class TestDescribeValue:
	def test_none_is_unknown(self) -> None:
		assert describe_value(None) == "Unknown"

	def test_whole_rational_is_integer(self) -> None:
		assert describe_value((8, 1), piexif.TYPES.Rational) == "8"

	def test_zero_denominator_is_unknown(self) -> None:
		assert describe_value((1, 0), piexif.TYPES.Rational) == "Unknown"

	def test_rational_sequence(self) -> None:
		value = ((51, 1), (30, 1), (1234, 100))
		assert describe_value(value, piexif.TYPES.Rational) == "51 30 1234/100"

	def test_short_pair_is_not_a_rational(self) -> None:
		assert describe_value((2, 1), piexif.TYPES.Short) == "2 1"

	def test_bytes_are_decoded_and_stripped(self) -> None:
		assert describe_value(b"Canon\x00") == "Canon"

	def test_long_binary_is_summarised(self) -> None:
		assert describe_value(b"\x01" * 500) == "[500 bytes]"


def test_metadata_json_is_pretty_printed() -> None:
	text = metadata_to_json({"File Type": {"Detected File Type Name": "PNG"}})
	assert text.startswith("{\n  ")
	assert json.loads(text) == {"File Type": {"Detected File Type Name": "PNG"}}
