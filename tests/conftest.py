"""
Pytest configuration and fixtures.
"""

import logging
from pathlib import Path

import pytest

from cosmos.logging import ROOT_LOGGER


EXAMPLE_CONFIG = """\
# cosmos example configuration
log {
	level debug
}

http {
	listen :8080 {
		metrics
	}
	listen 127.0.0.1:8443
}
"""


@pytest.fixture
def example_config_path(tmp_path: Path) -> Path:
    """Path to an example config file."""
    path = tmp_path / "cosmos.conf"
    path.write_text(EXAMPLE_CONFIG)
    return path


@pytest.fixture
def write_config(tmp_path: Path):
    """Factory writing config text (or bytes) to a file and returning its path."""

    def _write(content: str | bytes, name: str = "cosmos.conf") -> Path:
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by a test so streams captured for it are not reused."""
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
