from __future__ import annotations

from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from image_api.services.exceptions import DecodeError


def proportional_size(src_w: int, src_h: int, width: int, height: int = 0) -> Tuple[int, int]:
	"""
	Resolve a target size where 0 means "follow the aspect ratio".
	Both 0 keeps the source size.
	"""
	if width < 0 or height < 0:
		raise ValueError("Target dimensions must not be negative")
	if width == 0 and height == 0:
		return src_w, src_h
	if height == 0:
		return width, max(1, int(src_h * width / float(src_w) + 0.5))
	if width == 0:
		return max(1, int(src_w * height / float(src_h) + 0.5)), height
	return width, height


class PillowCodec:
	"""Decode uploads and encode web copies with Pillow."""

	def __init__(self, quality: int = 75, lossless: bool = False) -> None:
		self.quality = quality
		self.lossless = lossless

	def decode(self, data: bytes) -> Image.Image:
		try:
			img = Image.open(BytesIO(data))
			img.load()
		except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
			raise DecodeError(f"Cannot decode image: {e}") from e
		return img

	def resize(self, img: Image.Image, width: int, height: int = 0) -> Image.Image:
		size = proportional_size(img.width, img.height, width, height)
		if size == img.size:
			return img.copy()
		return img.resize(size, Image.LANCZOS)

	def encode(self, img: Image.Image) -> bytes:
		buf = BytesIO()
		try:
			img = _web_compatible(img)
			img.save(buf, format="WEBP", quality=self.quality, lossless=self.lossless)
		except (OSError, ValueError) as e:
			raise DecodeError(f"Cannot encode image as WebP: {e}") from e
		return buf.getvalue()


def _web_compatible(img: Image.Image) -> Image.Image:
	if img.mode in ("RGB", "RGBA"):
		return img
	has_alpha = img.mode in ("LA", "PA", "La") or (img.mode == "P" and "transparency" in img.info)
	return img.convert("RGBA" if has_alpha else "RGB")
