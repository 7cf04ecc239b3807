"""
Uniform response envelope used by every JSON endpoint.

The wire shape is camelCase: isSuccess, message, responseData, errors, statusCode.
"""

from enum import IntEnum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class StatusCode(IntEnum):
	"""Domain codes carried in the envelope, independent of the HTTP status line."""

	Success = 200
	BadRequest = 400
	NotFound = 404
	InternalServerError = 500
	InvalidFileExceed = 1001
	InvalidFileFormat = 1002
	InvalidSize = 1003


class ErrorItem(BaseModel):
	key: int = Field(..., description="Domain status code of the error")
	value: str = Field(..., description="Human readable error message")


class CommandResponse(BaseModel, Generic[T]):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	is_success: bool
	message: str
	response_data: Optional[T] = None
	errors: Optional[List[ErrorItem]] = None
	status_code: int

	@classmethod
	def success(cls, data: T, message: str) -> "CommandResponse[T]":
		return cls(
			is_success=True,
			message=message,
			response_data=data,
			errors=None,
			status_code=int(StatusCode.Success),
		)

	@classmethod
	def failure(
		cls,
		message: str,
		status_code: StatusCode,
		error_code: Optional[StatusCode] = None,
	) -> "CommandResponse[T]":
		errors = None
		if error_code is not None:
			errors = [ErrorItem(key=int(error_code), value=message)]
		return cls(
			is_success=False,
			message=message,
			response_data=None,
			errors=errors,
			status_code=int(status_code),
		)

	def to_wire(self) -> dict:
		return self.model_dump(mode="json", by_alias=True)
