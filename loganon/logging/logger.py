import logging
import sys
from typing import TextIO


class Log:
    """Diagnostics logging for the anonymizer.

    Output goes to stderr: stdout carries the anonymized line stream.
    Never pass original or substituted values into a message, only rule
    names, types and counts.
    """

    _logger: logging.Logger = logging.getLogger("loganon")
    _handler: logging.Handler | None = None

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and (re)attach a single stream handler."""
        cls._logger.setLevel(log_level.upper())
        cls._logger.propagate = False
        if cls._handler is not None:
            cls._logger.removeHandler(cls._handler)
        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] loganon: %(message)s")
        )
        cls._logger.addHandler(cls._handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
