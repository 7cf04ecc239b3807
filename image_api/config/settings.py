from pathlib import Path
from typing import FrozenSet, List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	"""Application configuration loaded from environment variables."""

	model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

	app_env: str = "dev"
	log_level: str = "INFO"

	upload_root: Path = Path("uploads")
	max_file_size_bytes: int = Field(default=2 * 1024 * 1024, gt=0)
	allowed_extensions: FrozenSet[str] = frozenset({".jpg", ".jpeg", ".png", ".webp"})

	webp_quality: int = Field(default=75, ge=0, le=100)
	webp_lossless: bool = False

	# 1 keeps the resize fan-out on the request thread
	resize_workers: int = Field(default=1, ge=1)
	batch_mode: Literal["keep_completed", "all_or_nothing"] = "keep_completed"

	cors_origins: List[str] = ["*"]
