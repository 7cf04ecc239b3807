"""
Domain types shared by the upload pipeline, the artifact store and the
retrieval service.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import IO, Any, Dict, List, Optional


class ImageSize(IntEnum):
	"""Allowed resize targets. Values are widths in pixels; height follows the aspect ratio."""

	Thumbnail = 150
	Small = 320
	Medium = 640
	Large = 1024

	@classmethod
	def parse(cls, token: str) -> Optional["ImageSize"]:
		"""Case-insensitive lookup by name. Returns None for unknown tokens."""
		wanted = token.strip().lower()
		for size in cls:
			if size.name.lower() == wanted:
				return size
		return None


@dataclass(frozen=True)
class ArtifactClass:
	"""What is stored for an identifier. `directory` is the class folder under the upload root."""

	directory: str
	extension: str

	@classmethod
	def original(cls) -> "ArtifactClass":
		return cls("original", ".webp")

	@classmethod
	def metadata(cls) -> "ArtifactClass":
		return cls("metadata", ".json")

	@classmethod
	def resized(cls, size: ImageSize) -> "ArtifactClass":
		return cls(size.name.lower(), ".webp")

	def __str__(self) -> str:
		return self.directory


@dataclass(frozen=True)
class UploadedFile:
	filename: str
	content: bytes

	@property
	def length(self) -> int:
		return len(self.content)


@dataclass(frozen=True)
class UploadResult:
	"""Identifiers of the accepted files, in input order."""

	ids: List[str] = field(default_factory=list)

	def as_payload(self) -> List[Dict[str, str]]:
		return [{"id": image_id} for image_id in self.ids]


@dataclass(frozen=True)
class ImageStream:
	"""An open stored image. The caller owns `stream` and must close it."""

	image_id: str
	size: ImageSize
	stream: IO[bytes]
	media_type: str = "image/webp"


@dataclass(frozen=True)
class MetadataDocument:
	image_id: str
	data: Dict[str, Any]
