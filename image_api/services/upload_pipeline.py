from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

from PIL import Image

from image_api.config.settings import Settings
from image_api.logging.logger import Log
from image_api.models.images import ArtifactClass, ImageSize, UploadedFile, UploadResult
from image_api.services.codec import PillowCodec
from image_api.services.exceptions import FileTooLargeError, UnsupportedFormatError
from image_api.services.metadata import ExifMetadataExtractor, metadata_to_json
from image_api.services.storage import ArtifactStore


def _new_image_id() -> str:
	return str(uuid.uuid4())


def file_extension(filename: str) -> str:
	"""Lower-cased text from the last dot of the base name, dot included. A bare ".jpg" counts."""
	base = filename.replace("\\", "/").rpartition("/")[2]
	_, dot, ext = base.rpartition(".")
	return f".{ext.lower()}" if dot else ""


class ImageUploadPipeline:
	"""
	Validate uploads, then for each accepted file store its metadata document,
	a WebP original and one WebP copy per ImageSize.

	A validation failure aborts the whole batch. With batch_mode
	"keep_completed" files finished before the failing one stay on disk;
	with "all_or_nothing" the batch is validated up front and any artifacts
	it wrote are removed if a later step fails.
	"""

	def __init__(
		self,
		settings: Settings,
		store: ArtifactStore,
		codec: PillowCodec,
		extractor: ExifMetadataExtractor,
		id_factory: Optional[Callable[[], str]] = None,
	) -> None:
		self.settings = settings
		self.store = store
		self.codec = codec
		self.extractor = extractor
		self.id_factory = id_factory or _new_image_id

	def validate(self, upload: UploadedFile) -> None:
		cap = self.settings.max_file_size_bytes
		if upload.length > cap:
			Log.warning(f"Rejected {upload.filename!r}: {upload.length} bytes exceeds {cap}")
			raise FileTooLargeError(f"File size exceeds {cap / (1024 * 1024):g}MB.")

		ext = file_extension(upload.filename)
		if ext not in self.settings.allowed_extensions:
			Log.warning(f"Rejected {upload.filename!r}: extension {ext!r} not allowed")
			raise UnsupportedFormatError()

	def process(self, files: List[UploadedFile]) -> UploadResult:
		atomic = self.settings.batch_mode == "all_or_nothing"
		if atomic:
			for upload in files:
				self.validate(upload)

		ids: List[str] = []
		try:
			for upload in files:
				if not atomic:
					self.validate(upload)
				image_id = self.id_factory()
				ids.append(image_id)
				self._process_one(image_id, upload)
		except Exception:
			if atomic:
				self._rollback(ids)
			raise

		Log.info(f"Accepted {len(ids)} image(s)", image_ids=ids)
		return UploadResult(ids=ids)

	def _process_one(self, image_id: str, upload: UploadedFile) -> None:
		# 1) Metadata document
		metadata = self.extractor.extract(upload.content)
		self.store.put(image_id, ArtifactClass.metadata(), metadata_to_json(metadata).encode("utf-8"))

		# 2) Original, re-encoded for the web
		img = self.codec.decode(upload.content)
		self.store.put(image_id, ArtifactClass.original(), self.codec.encode(img))

		# 3) Resized copies, each derived from the decoded original
		self._resize_all(image_id, img)
		Log.info(f"Stored {upload.filename!r} as {image_id} ({img.width}x{img.height})")

	def _store_resized(self, image_id: str, img: Image.Image, size: ImageSize) -> None:
		resized = self.codec.resize(img, int(size))
		self.store.put(image_id, ArtifactClass.resized(size), self.codec.encode(resized))

	def _resize_all(self, image_id: str, img: Image.Image) -> None:
		workers = self.settings.resize_workers
		if workers == 1:
			for size in ImageSize:
				self._store_resized(image_id, img, size)
			return

		with ThreadPoolExecutor(max_workers=workers) as executor:
			futures = [executor.submit(self._store_resized, image_id, img, size) for size in ImageSize]
			for future in as_completed(futures):
				future.result()

	def _rollback(self, ids: List[str]) -> None:
		classes = [ArtifactClass.metadata(), ArtifactClass.original()]
		classes.extend(ArtifactClass.resized(size) for size in ImageSize)
		for image_id in ids:
			for artifact_class in classes:
				self.store.delete(image_id, artifact_class)
		Log.warning(f"Rolled back {len(ids)} image(s) from failed batch")
