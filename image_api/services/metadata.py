from __future__ import annotations

import json
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

import piexif
from PIL import Image, UnidentifiedImageError

from image_api.logging.logger import Log
from image_api.services.exceptions import MetadataExtractionError

Metadata = Dict[str, Dict[str, str]]

# piexif IFD key -> group name in the metadata document
_EXIF_GROUPS: List[Tuple[str, str]] = [
	("0th", "Exif IFD0"),
	("Exif", "Exif SubIFD"),
	("GPS", "GPS"),
	("Interop", "Interoperability"),
	("1st", "Exif Thumbnail"),
]

# Pillow format -> (short name, long name, expected extension)
_FILE_TYPES: Dict[str, Tuple[str, str, str]] = {
	"JPEG": ("JPEG", "Joint Photographic Experts Group", "jpg"),
	"MPO": ("JPEG", "Joint Photographic Experts Group", "jpg"),
	"PNG": ("PNG", "Portable Network Graphics", "png"),
	"WEBP": ("WebP", "WebP", "webp"),
}

_UNKNOWN = "Unknown"
_MAX_TEXT_BYTES = 64


def _rational_to_text(num: int, den: int) -> str:
	if not den:
		return _UNKNOWN
	if num % den == 0:
		return str(num // den)
	return f"{num}/{den}"


def _bytes_to_text(v: bytes) -> str:
	if len(v) > _MAX_TEXT_BYTES:
		return f"[{len(v)} bytes]"
	s = v.decode("utf-8", errors="ignore").strip("\x00").strip()
	if not s:
		return _UNKNOWN
	if not s.isprintable():
		return f"[{len(v)} bytes]"
	return s


def describe_value(value: Any, tag_type: Optional[int] = None) -> str:
	"""Render a raw piexif tag value as display text."""
	if value is None:
		return _UNKNOWN
	if isinstance(value, bytes):
		return _bytes_to_text(value)
	if tag_type in (piexif.TYPES.Rational, piexif.TYPES.SRational) and isinstance(value, tuple) and value:
		pairs = [value] if isinstance(value[0], int) else list(value)
		return " ".join(_rational_to_text(int(n), int(d)) for n, d in pairs)
	if isinstance(value, (tuple, list)):
		return " ".join(describe_value(v) for v in value)
	return str(value)


class ExifMetadataExtractor:
	"""
	Build a group -> tag -> text mapping from image bytes.

	The container itself is read with Pillow; EXIF blocks found in it are
	parsed with piexif.
	"""

	def extract(self, data: bytes) -> Metadata:
		try:
			img = Image.open(BytesIO(data))
		except (UnidentifiedImageError, OSError, ValueError) as e:
			raise MetadataExtractionError(f"Cannot read image container: {e}") from e

		fmt = (img.format or "").upper()
		short, long_name, ext = _FILE_TYPES.get(fmt, (fmt or _UNKNOWN, fmt or _UNKNOWN, fmt.lower()))
		metadata: Metadata = {
			"File Type": {
				"Detected File Type Name": short,
				"Detected File Type Long Name": long_name,
				"Detected MIME Type": Image.MIME.get(fmt, _UNKNOWN),
				"Expected File Name Extension": ext or _UNKNOWN,
			},
			short: {
				"Image Width": f"{img.width} pixels",
				"Image Height": f"{img.height} pixels",
				"Color Mode": img.mode,
			},
		}

		exif_bytes = img.info.get("exif")
		if exif_bytes:
			metadata.update(self._exif_groups(exif_bytes))
		return metadata

	def _exif_groups(self, exif_bytes: bytes) -> Metadata:
		# piexif treats anything it does not recognise as a file path
		if not exif_bytes.startswith((b"Exif", b"II", b"MM")):
			Log.warning("Skipping EXIF block with unknown header")
			return {}
		try:
			ex = piexif.load(exif_bytes)
		except Exception as e:
			Log.warning(f"Skipping unreadable EXIF block: {e}")
			return {}

		groups: Metadata = {}
		for ifd, group_name in _EXIF_GROUPS:
			tags = ex.get(ifd) or {}
			known = piexif.TAGS.get(ifd, {})
			group: Dict[str, str] = {}
			for tag_id, value in tags.items():
				info = known.get(tag_id)
				if info is None:
					name = f"Unknown tag (0x{tag_id:04X})"
					tag_type = None
				else:
					name = info["name"]
					tag_type = info["type"]
				group[name] = describe_value(value, tag_type)
			if group:
				groups[group_name] = group
		return groups


def metadata_to_json(metadata: Metadata) -> str:
	return json.dumps(metadata, indent=2, ensure_ascii=False)
