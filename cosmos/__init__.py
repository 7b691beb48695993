"""
Cosmos: block-structured configuration language engine.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
