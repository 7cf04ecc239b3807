from typing import Optional

from image_api.models.envelope import StatusCode


class ImageServiceError(Exception):
	"""Base exception for all image service errors."""

	status_code: StatusCode = StatusCode.BadRequest
	error_code: Optional[StatusCode] = None
	default_message: str = "Bad request."

	def __init__(self, message: Optional[str] = None) -> None:
		self.message = message or self.default_message
		super().__init__(self.message)


class FileTooLargeError(ImageServiceError):
	"""Raised when an uploaded file exceeds the configured size cap."""

	error_code = StatusCode.InvalidFileExceed
	default_message = "File size exceeds 2MB."


class UnsupportedFormatError(ImageServiceError):
	"""Raised when an uploaded file has an extension outside the allowed set."""

	error_code = StatusCode.InvalidFileFormat
	default_message = "Invalid file format."


class InvalidSizeError(ImageServiceError):
	"""Raised when a download asks for a size that is not a known size class."""

	error_code = StatusCode.InvalidSize
	default_message = "Invalid size."


class ImageNotFoundError(ImageServiceError):
	"""Raised when no artifact is stored for an identifier and class."""

	status_code = StatusCode.NotFound
	default_message = "Image not found."


class ImageProcessingError(ImageServiceError):
	"""Base for internal failures. Never reported to clients with detail."""

	status_code = StatusCode.InternalServerError
	default_message = "An unexpected error occurred while processing the request."


class DecodeError(ImageProcessingError):
	"""Raised when image bytes cannot be decoded or encoded."""


class MetadataExtractionError(ImageProcessingError):
	"""Raised when the image container cannot be parsed for metadata."""


class StorageError(ImageProcessingError):
	"""Raised when an artifact cannot be written to or removed from disk."""
