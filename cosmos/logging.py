"""
Logging setup for cosmos tools.

Everything logs under the "cosmos" logger. Console output goes to stdout or
stderr and is colored on a terminal; an optional rotating log file receives
the same records without escape codes. Level names are the ones accepted by
the `level` directive of the configuration file's log block.
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path


ROOT_LOGGER = "cosmos"

RESET = "\033[0m"

# Level names accepted in configuration and on the command line
LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

LEVEL_STYLES = {
    logging.DEBUG: "\033[2;36m",  # dim cyan
    logging.INFO: "\033[32m",  # green
    logging.WARNING: "\033[33m",  # yellow
    logging.ERROR: "\033[31m",  # red
    logging.CRITICAL: "\033[1;91m",  # bold bright red
}

# Logger name fragment -> style of the name column
COMPONENT_STYLES = {
    "parser": "\033[35m",
    "loader": "\033[34m",
    "main": "\033[32m",
}


class PlainFormatter(logging.Formatter):
    """Formatter for log files: level names padded to one width."""

    def decorate(self, record: logging.LogRecord) -> None:
        record.levelname = f"{record.levelname:8}"

    def format(self, record: logging.LogRecord) -> str:
        # The record is shared with other handlers
        saved = record.levelname, record.name
        self.decorate(record)
        try:
            return super().format(record)
        finally:
            record.levelname, record.name = saved


class ColoredFormatter(PlainFormatter):
    """Console formatter coloring the level and component of each record."""

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def decorate(self, record: logging.LogRecord) -> None:
        if not self.use_colors:
            return

        style = LEVEL_STYLES.get(record.levelno, "")
        record.levelname = f"{style}{record.levelname:8}{RESET}"

        for fragment, style in COMPONENT_STYLES.items():
            if fragment in record.name:
                record.name = f"{style}{record.name}{RESET}"
                break


@dataclass
class LogConfig:
    """Where and how much to log."""

    level: str = "info"
    stream: str = "stdout"  # stdout or stderr
    colors: bool = True

    file: str | None = None  # Rotating log file, disabled when None
    file_level: str = "debug"
    max_bytes: int = 5 * 1024 * 1024
    backups: int = 3

    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    date_format: str = "%H:%M:%S"


def get_log_level(name: str) -> int:
    """Map a level name to a logging level; unknown names mean INFO."""
    return LEVELS.get(name.lower(), logging.INFO)


def _console_handler(config: LogConfig) -> logging.Handler:
    stream = sys.stderr if config.stream == "stderr" else sys.stdout
    handler = logging.StreamHandler(stream)
    handler.setLevel(get_log_level(config.level))

    colors = config.colors and hasattr(stream, "isatty") and stream.isatty()
    handler.setFormatter(ColoredFormatter(config.format, config.date_format, use_colors=colors))
    return handler


def _file_handler(config: LogConfig) -> logging.Handler:
    path = Path(config.file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(path, maxBytes=config.max_bytes, backupCount=config.backups)
    handler.setLevel(get_log_level(config.file_level))
    handler.setFormatter(PlainFormatter(config.format, config.date_format))
    return handler


def setup_logging(config: LogConfig | None = None) -> None:
    """
    Configure the cosmos logger.

    Handlers installed by a previous call are closed and replaced, so this
    can run again once the configuration file has been read.
    """
    config = config or LogConfig()

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.DEBUG)  # Handlers do the filtering

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.addHandler(_console_handler(config))
    if config.file:
        root.addHandler(_file_handler(config))


def setup_logging_from_args(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    colors: bool = True,
    log_file: str | None = None,
) -> LogConfig:
    """
    Configure logging from command line flags.

    Without flags only warnings and errors are shown. --debug wins over
    --verbose, which wins over --quiet.

    Returns:
        The applied LogConfig, for callers that refine it later
    """
    if debug:
        level = "debug"
    elif verbose:
        level = "info"
    elif quiet:
        level = "error"
    else:
        level = "warn"

    config = LogConfig(level=level, colors=colors, file=log_file)
    setup_logging(config)
    return config


def get_logger(name: str) -> logging.Logger:
    """Get the logger of a component, placed under the cosmos logger."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
