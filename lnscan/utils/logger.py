import logging
import sys
from pathlib import Path

from loguru import logger

from lnscan.settings import settings

# stdlib loggers of the http and dns clients
INTERCEPTED_LOGGERS = ("httpx", "httpcore", "dns")


def configure_logger() -> None:
    """
    Replace loguru's default sink. Not called on import, applications
    embedding lnscan decide when to take over logging.
    """
    logger.remove()
    log_level: str = "DEBUG" if settings.debug else "INFO"
    formatter = Formatter(verbose=settings.debug)
    logger.add(sys.stdout, level=log_level, format=formatter.format)

    if settings.enable_log_to_file:
        for filename, level in (("lnscan.log", "INFO"), ("debug.log", "DEBUG")):
            logger.add(
                Path(settings.log_folder, filename),
                rotation=settings.log_rotation,
                retention=settings.log_retention,
                level=level,
                format=formatter.format,
            )

    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False


class Formatter:
    """Records forwarded from stdlib logging are tagged with their logger name."""

    def __init__(self, verbose: bool = False):
        self.intercepted_fmt = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> | <level>{level}</level> | "
            "<magenta>{extra[stdlib]}</magenta> | <level>{message}</level>\n"
        )
        if verbose:
            self.fmt = (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> | "
                "<level>{level: <4}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>\n"
            )
        else:
            self.fmt = (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> | "
                "<level>{level}</level> | <level>{message}</level>\n"
            )

    def format(self, record) -> str:
        if record["extra"].get("stdlib"):
            return self.intercepted_fmt
        return self.fmt


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord):
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(stdlib=record.name).opt(exception=record.exc_info).log(
            level, record.getMessage()
        )
