from __future__ import annotations

from typing import IO, Iterator, List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from image_api.logging.logger import Log
from image_api.models.envelope import CommandResponse, StatusCode
from image_api.models.images import UploadedFile
from image_api.services.exceptions import (
	FileTooLargeError,
	ImageNotFoundError,
	ImageServiceError,
	InvalidSizeError,
	UnsupportedFormatError,
)
from image_api.services.retrieval import ImageRetrievalService
from image_api.services.upload_pipeline import ImageUploadPipeline

router = APIRouter(prefix="/api/images", tags=["images"])

_CHUNK_SIZE = 64 * 1024


def get_upload_pipeline(request: Request) -> ImageUploadPipeline:
	return request.app.state.upload_pipeline


def get_retrieval_service(request: Request) -> ImageRetrievalService:
	return request.app.state.retrieval


def _envelope(envelope: CommandResponse, http_status: int = status.HTTP_200_OK) -> JSONResponse:
	return JSONResponse(status_code=http_status, content=envelope.to_wire())


def _failure(err: ImageServiceError) -> CommandResponse:
	return CommandResponse.failure(err.message, err.status_code, err.error_code)


def _iter_stream(stream: IO[bytes]) -> Iterator[bytes]:
	try:
		while True:
			chunk = stream.read(_CHUNK_SIZE)
			if not chunk:
				break
			yield chunk
	finally:
		stream.close()


@router.post("/upload", summary="Upload images and store resized WebP copies")
async def upload(
	files: Optional[List[UploadFile]] = File(None),
	pipeline: ImageUploadPipeline = Depends(get_upload_pipeline),
):
	if not files:
		return _envelope(
			CommandResponse.failure("No files uploaded.", StatusCode.BadRequest),
			status.HTTP_400_BAD_REQUEST,
		)

	uploads = []
	for f in files:
		data = await f.read()
		uploads.append(UploadedFile(filename=f.filename or "", content=data))

	try:
		result = await run_in_threadpool(pipeline.process, uploads)
	except (FileTooLargeError, UnsupportedFormatError) as e:
		# reported in the envelope, the transport status stays 200
		return _envelope(_failure(e))

	return _envelope(CommandResponse.success(result.as_payload(), "Images uploaded successfully."))


@router.get("/download/{image_id}/{size}", summary="Download a resized image")
def download(
	image_id: str,
	size: str,
	retrieval: ImageRetrievalService = Depends(get_retrieval_service),
):
	try:
		image = retrieval.get_resized(image_id, size)
	except (InvalidSizeError, ImageNotFoundError) as e:
		Log.debug(f"Download miss for {image_id}/{size}: {e.message}")
		return _envelope(_failure(e), status.HTTP_404_NOT_FOUND)

	return StreamingResponse(_iter_stream(image.stream), media_type=image.media_type)


@router.get("/metadata/{image_id}", summary="Get extracted image metadata")
def metadata(
	image_id: str,
	retrieval: ImageRetrievalService = Depends(get_retrieval_service),
):
	try:
		document = retrieval.get_metadata(image_id)
	except ImageNotFoundError as e:
		return _envelope(_failure(e), status.HTTP_404_NOT_FOUND)

	return _envelope(CommandResponse.success(document.data, "Metadata found."))
