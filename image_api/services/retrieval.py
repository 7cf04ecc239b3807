from __future__ import annotations

import json

from image_api.models.images import ArtifactClass, ImageSize, ImageStream, MetadataDocument
from image_api.services.exceptions import ImageNotFoundError, InvalidSizeError
from image_api.services.storage import ArtifactStore


class ImageRetrievalService:
	"""Read-side lookups. Every call goes back to the store."""

	def __init__(self, store: ArtifactStore) -> None:
		self.store = store

	def get_resized(self, image_id: str, size_token: str) -> ImageStream:
		size = ImageSize.parse(size_token)
		if size is None:
			raise InvalidSizeError()
		stream = self.store.open(image_id, ArtifactClass.resized(size))
		return ImageStream(image_id=image_id, size=size, stream=stream)

	def get_metadata(self, image_id: str) -> MetadataDocument:
		try:
			raw = self.store.read(image_id, ArtifactClass.metadata())
		except ImageNotFoundError as e:
			raise ImageNotFoundError("Metadata not found.") from e
		return MetadataDocument(image_id=image_id, data=json.loads(raw.decode("utf-8")))
