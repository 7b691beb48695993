"""
Turns configuration files into Settings and reports suspicious content.
"""

from pathlib import Path

from ..logging import get_logger
from .dispenser import DirectiveError
from .parser import Config, ParseError, parse, parse_file
from .schema import Settings


logger = get_logger("config.loader")


class ConfigError(Exception):
    """A configuration file could not be parsed or has invalid directives."""


class ConfigLoader:
    """
    Loads configuration from files or strings and builds Settings.

    Usage:
        loader = ConfigLoader()
        settings = loader.load_file(".env/cosmos.conf")
        # or
        settings = loader.load_string(config_text)

    Errors reading the file (OSError) are not wrapped.
    """

    # Top-level blocks the application reads
    KNOWN_BLOCKS = {"log", "http"}

    def __init__(self):
        self.last_document: Config | None = None

    def _build(self, document: Config) -> Settings:
        self.last_document = document
        try:
            return Settings.from_config(document)
        except DirectiveError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def load_file(self, path: str | Path) -> Settings:
        """
        Parse a configuration file and build Settings from it.

        Args:
            path: Configuration file to read

        Returns:
            Settings built from the file

        Raises:
            ConfigError: If the file cannot be parsed or has invalid directives
            OSError: If the file cannot be read
        """
        try:
            document = parse_file(path)
        except ParseError as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e

        settings = self._build(document)
        logger.info(f"Loaded configuration from {path}")
        return settings

    def load_string(self, source: str | bytes, filename: str = "<string>") -> Settings:
        """
        Parse configuration source held in memory.

        Args:
            source: Configuration text or raw bytes
            filename: Name reported in error messages

        Returns:
            Settings built from the source

        Raises:
            ConfigError: If the source cannot be parsed or has invalid directives
        """
        try:
            document = parse(filename, source)
        except ParseError as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e

        return self._build(document)

    def validate(self, settings: Settings) -> list[str]:
        """
        Validate settings and return list of warnings.

        Args:
            settings: Settings to validate

        Returns:
            Warning messages, empty when nothing looks wrong
        """
        warnings = []

        if self.last_document:
            for block in self.last_document:
                if not block.keys:
                    warnings.append(f"Block without keys (line {block.line})")
                elif not self.KNOWN_BLOCKS.intersection(block.keys):
                    warnings.append(f"Unknown block '{' '.join(block.keys)}' (line {block.line})")

        if not settings.server.listeners:
            warnings.append("No listeners configured in http block")

        seen: set[str] = set()
        for listener in settings.server.listeners:
            if listener.address in seen:
                warnings.append(f"Duplicate listen address '{listener.address}'")
            seen.add(listener.address)

        for warning in warnings:
            logger.warning(warning)

        return warnings


def load_config(path: str | Path) -> Settings:
    """
    Load Settings from a file with a fresh ConfigLoader.

    Args:
        path: Configuration file to read

    Returns:
        Settings built from the file
    """
    return ConfigLoader().load_file(path)
