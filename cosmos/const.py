"""
Application constants and metadata.
"""

# Application info
APP_NAME = "Cosmos"
APP_VERSION = "0.1.0"
APP_URL = "https://github.com/matthewpi/cosmos"

# Default values
DEFAULT_CONFIG_PATH = ".env/cosmos.conf"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_METRICS_PATH = "/metrics"
