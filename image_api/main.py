from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from image_api.config.settings import Settings
from image_api.logging.logger import Log
from image_api.models.envelope import CommandResponse, StatusCode
from image_api.routers.images import router as images_router
from image_api.services.codec import PillowCodec
from image_api.services.exceptions import ImageProcessingError, ImageServiceError
from image_api.services.metadata import ExifMetadataExtractor
from image_api.services.retrieval import ImageRetrievalService
from image_api.services.storage import ArtifactStore
from image_api.services.upload_pipeline import ImageUploadPipeline

_HTTP_STATUS = {
	StatusCode.NotFound: status.HTTP_404_NOT_FOUND,
	StatusCode.InternalServerError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _internal_error() -> JSONResponse:
	envelope = CommandResponse.failure(ImageProcessingError.default_message, StatusCode.InternalServerError)
	return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=envelope.to_wire())


async def _service_error_handler(request: Request, exc: ImageServiceError) -> JSONResponse:
	if isinstance(exc, ImageProcessingError):
		# detail goes to the log only
		Log.exception(f"{request.method} {request.url.path} failed: {exc.message}", exc=exc)
		return _internal_error()
	envelope = CommandResponse.failure(exc.message, exc.status_code, exc.error_code)
	http_status = _HTTP_STATUS.get(exc.status_code, status.HTTP_400_BAD_REQUEST)
	return JSONResponse(status_code=http_status, content=envelope.to_wire())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
	# ServerErrorMiddleware re-raises after this response, so the server logs the traceback
	return _internal_error()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or Settings()
	Log.configure(settings.log_level)

	app = FastAPI(title="Image API", version="0.1.0")

	# CORS (adjust origins in production)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	# Services
	store = ArtifactStore(settings.upload_root)
	codec = PillowCodec(quality=settings.webp_quality, lossless=settings.webp_lossless)
	app.state.settings = settings
	app.state.upload_pipeline = ImageUploadPipeline(settings, store, codec, ExifMetadataExtractor())
	app.state.retrieval = ImageRetrievalService(store)

	app.add_exception_handler(ImageServiceError, _service_error_handler)
	app.add_exception_handler(Exception, _unhandled_error_handler)

	# Routers
	app.include_router(images_router)

	@app.get("/health", summary="Health check")
	async def health():
		return {"status": "ok"}

	Log.info(f"Image API ready ({settings.app_env}), storing under {settings.upload_root}")
	return app


app = create_app()


if __name__ == "__main__":
	# Local dev server: uvicorn image_api.main:app --reload
	import uvicorn

	uvicorn.run("image_api.main:app", host="0.0.0.0", port=8000, reload=True)
