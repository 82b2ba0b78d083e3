import sys
from typing import TYPE_CHECKING, Optional

from loguru import logger

if TYPE_CHECKING:
    from mediascribe.config.settings import LoggingConfig

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DDTHH:mm:ss.SSSZ}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> | {extra}"
)


class LoggerManager:
    def __init__(self):
        self.console_sink_id = None
        self.file_sink_id = None

        # Always remove the default handler
        logger.remove()

    def enable_console(self, level: str = "INFO"):
        if self.console_sink_id is None:
            self.console_sink_id = logger.add(sys.stdout, level=level, colorize=True, format=LOG_FORMAT)

    def disable_console(self):
        if self.console_sink_id is not None:
            logger.remove(self.console_sink_id)
            self.console_sink_id = None

    def enable_file(self, path: str, level: str = "INFO", rotation: str = "10 MB", retention_days: int = 7, serialize: bool = False):
        if self.file_sink_id is None:
            self.file_sink_id = logger.add(
                path,
                level=level,
                rotation=rotation,
                retention=f"{retention_days} days",
                serialize=serialize,
                enqueue=True,
            )

    def disable_file(self):
        if self.file_sink_id is not None:
            logger.remove(self.file_sink_id)
            self.file_sink_id = None

    def get_logger(self, **context):
        """The shared loguru logger, bound to ``context`` when any is given."""
        return logger.bind(**context) if context else logger

    def configure(self, logging_config: Optional["LoggingConfig"] = None):
        """Apply a LoggingConfig: console sink always, file sink when enabled."""
        if logging_config is None:
            self.enable_console()
            return
        self.disable_console()
        self.enable_console(level=logging_config.level.upper())
        if logging_config.enable_file and logging_config.file:
            self.enable_file(
                logging_config.file,
                level=logging_config.level.upper(),
                rotation=logging_config.max_file_size,
                retention_days=logging_config.retention_days,
                serialize=logging_config.enable_json,
            )


log_manager = LoggerManager()
