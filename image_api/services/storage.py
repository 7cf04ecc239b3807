from __future__ import annotations

import re
from pathlib import Path
from typing import BinaryIO

from image_api.logging.logger import Log
from image_api.models.images import ArtifactClass
from image_api.services.exceptions import ImageNotFoundError, StorageError

_IDENTIFIER_RE = re.compile(r"^[0-9A-Za-z-]{1,64}$")


class ArtifactStore:
	"""
	File-per-artifact store laid out class first:

		<root>/<class directory>/<identifier><extension>

	Artifacts are written once and never updated, so reads take no locks.
	"""

	def __init__(self, root: Path) -> None:
		self.root = Path(root)

	def path_for(self, identifier: str, artifact_class: ArtifactClass) -> Path:
		if not _IDENTIFIER_RE.match(identifier):
			raise ImageNotFoundError()
		return self.root / artifact_class.directory / f"{identifier}{artifact_class.extension}"

	def put(self, identifier: str, artifact_class: ArtifactClass, data: bytes) -> Path:
		path = self.path_for(identifier, artifact_class)
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			with path.open("wb") as f:
				f.write(data)
		except OSError as e:
			raise StorageError(f"Cannot write {artifact_class} artifact for {identifier}: {e}") from e
		Log.debug(f"Stored {artifact_class} artifact {path}")
		return path

	def exists(self, identifier: str, artifact_class: ArtifactClass) -> bool:
		try:
			return self.path_for(identifier, artifact_class).is_file()
		except ImageNotFoundError:
			return False

	def open(self, identifier: str, artifact_class: ArtifactClass) -> BinaryIO:
		path = self.path_for(identifier, artifact_class)
		try:
			return path.open("rb")
		except FileNotFoundError as e:
			raise ImageNotFoundError() from e

	def read(self, identifier: str, artifact_class: ArtifactClass) -> bytes:
		with self.open(identifier, artifact_class) as f:
			return f.read()

	def delete(self, identifier: str, artifact_class: ArtifactClass) -> None:
		path = self.path_for(identifier, artifact_class)
		try:
			path.unlink(missing_ok=True)
		except OSError as e:
			raise StorageError(f"Cannot remove {artifact_class} artifact for {identifier}: {e}") from e
