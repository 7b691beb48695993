"""
Tests for configuration loading and validation.
"""

from pathlib import Path

import pytest

from cosmos.config.loader import ConfigError, ConfigLoader, load_config
from cosmos.config.parser import Config
from cosmos.config.schema import LogOutput, Settings


def test_load_example_config(example_config_path: Path) -> None:
    """Test that example config loads without errors."""
    loader = ConfigLoader()
    settings = loader.load_file(str(example_config_path))

    assert isinstance(settings, Settings)
    assert settings.logging.level == "debug"
    assert [l.address for l in settings.server.listeners] == [":8080", "127.0.0.1:8443"]
    assert isinstance(loader.last_document, Config)


def test_validate_example_config(example_config_path: Path) -> None:
    """Test that example config validates without warnings."""
    loader = ConfigLoader()
    settings = loader.load_file(example_config_path)

    assert loader.validate(settings) == []


def test_load_config_helper(example_config_path: Path) -> None:
    settings = load_config(example_config_path)
    assert settings.server.listeners[0].metrics == "/metrics"


def test_load_string() -> None:
    loader = ConfigLoader()
    settings = loader.load_string("log {\n\toutput stderr\n}\n")

    assert settings.logging.output is LogOutput.STDERR
    assert settings.server.listeners == []


def test_load_string_bytes() -> None:
    settings = ConfigLoader().load_string(b"\xef\xbb\xbfhttp {\n\tlisten :80\n}\n")
    assert settings.server.listeners[0].address == ":80"


def test_parse_error_is_wrapped() -> None:
    loader = ConfigLoader()
    with pytest.raises(ConfigError, match="Failed to parse configuration: bad.conf:3 - Unexpected '}'"):
        loader.load_string("log {\n}\n}\n", "bad.conf")


def test_directive_error_is_wrapped() -> None:
    loader = ConfigLoader()
    with pytest.raises(ConfigError, match='Invalid configuration: bad.conf:2 - unknown level: "loud"') as exc_info:
        loader.load_string("log {\n\tlevel loud\n}\n", "bad.conf")
    assert exc_info.value.__cause__ is not None


def test_missing_file_raises_os_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ConfigLoader().load_file(tmp_path / "missing.conf")


def test_validate_warnings() -> None:
    loader = ConfigLoader()
    settings = loader.load_string(
        "{\n\tstray\n}\n\nadmin {\n\tenabled\n}\n\nhttp {\n\tlisten :80\n\tlisten :80\n}\n"
    )

    warnings = loader.validate(settings)
    assert warnings == [
        "Block without keys (line 1)",
        "Unknown block 'admin' (line 5)",
        "Duplicate listen address ':80'",
    ]


def test_validate_no_listeners() -> None:
    loader = ConfigLoader()
    settings = loader.load_string("log {\n\tlevel info\n}\n")
    assert loader.validate(settings) == ["No listeners configured in http block"]


def test_validate_without_document() -> None:
    assert ConfigLoader().validate(Settings()) == ["No listeners configured in http block"]
