import logging
import sys
from typing import Optional


class Log:
	"""Centralized logging with structured format."""

	_logger: logging.Logger = logging.getLogger("image_api")

	@classmethod
	def configure(cls, log_level: str) -> None:
		cls._logger.setLevel(log_level.upper())
		if not cls._logger.handlers:
			handler = logging.StreamHandler(sys.stdout)
			handler.setFormatter(
				logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
			)
			cls._logger.addHandler(handler)

	@classmethod
	def info(cls, message: str, **kwargs: object) -> None:
		cls._logger.info(message, extra=kwargs)

	@classmethod
	def warning(cls, message: str, **kwargs: object) -> None:
		cls._logger.warning(message, extra=kwargs)

	@classmethod
	def exception(cls, message: str, exc: Optional[BaseException] = None, **kwargs: object) -> None:
		"""Log an error with a traceback, from `exc` or the exception being handled."""
		cls._logger.error(message, exc_info=exc or True, extra=kwargs)

	@classmethod
	def debug(cls, message: str, **kwargs: object) -> None:
		cls._logger.debug(message, extra=kwargs)
