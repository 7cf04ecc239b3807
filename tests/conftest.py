from io import BytesIO
from pathlib import Path
from typing import Callable

import piexif
import pytest
from PIL import Image

from image_api.config.settings import Settings
from image_api.services.codec import PillowCodec
from image_api.services.metadata import ExifMetadataExtractor
from image_api.services.retrieval import ImageRetrievalService
from image_api.services.storage import ArtifactStore
from image_api.services.upload_pipeline import ImageUploadPipeline

ImageFactory = Callable[..., bytes]


def _encode(img: Image.Image, fmt: str, **save_kwargs: object) -> bytes:
	buf = BytesIO()
	img.save(buf, format=fmt, **save_kwargs)
	return buf.getvalue()


@pytest.fixture()
def make_image() -> ImageFactory:
	"""Build encoded test images of a given size and format."""

	def _make(width: int = 1200, height: int = 800, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
		color = (200, 120, 40, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 128
		return _encode(Image.new(mode, (width, height), color), fmt)

	return _make


@pytest.fixture()
def exif_jpeg_bytes() -> bytes:
	"""A 1200x800 JPEG carrying camera and exposure tags."""
	exif = piexif.dump({
		"0th": {piexif.ImageIFD.Make: b"TestCam", piexif.ImageIFD.Model: b"TC-1"},
		"Exif": {
			piexif.ExifIFD.ExposureTime: (1, 125),
			piexif.ExifIFD.FNumber: (28, 10),
			piexif.ExifIFD.ISOSpeedRatings: 200,
		},
	})
	img = Image.new("RGB", (1200, 800), (30, 90, 160))
	return _encode(img, "JPEG", exif=exif)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
	return Settings(upload_root=tmp_path / "uploads")


@pytest.fixture()
def store(settings: Settings) -> ArtifactStore:
	return ArtifactStore(settings.upload_root)


@pytest.fixture()
def codec() -> PillowCodec:
	return PillowCodec()


@pytest.fixture()
def pipeline(settings: Settings, store: ArtifactStore, codec: PillowCodec) -> ImageUploadPipeline:
	return ImageUploadPipeline(settings, store, codec, ExifMetadataExtractor())


@pytest.fixture()
def retrieval(store: ArtifactStore) -> ImageRetrievalService:
	return ImageRetrievalService(store)


@pytest.fixture()
def truncated_png_bytes() -> bytes:
	"""A PNG whose header parses but whose pixel data is cut off."""
	img = Image.effect_noise((320, 240), 64).convert("RGB")
	data = _encode(img, "PNG")
	# noise compresses poorly, so the first IDAT chunk runs well past this cut
	return data[:1024]
