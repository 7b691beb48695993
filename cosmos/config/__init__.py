"""
Configuration language engine: tokenizer, block parser, dispenser and formatter.
"""

from .dispenser import DirectiveError, Dispenser
from .formatter import format
from .lexer import Lexer, Token, tokenize
from .loader import ConfigError, ConfigLoader
from .parser import Block, Config, ConfigParser, ParseError, Segment, parse, parse_file
from .schema import Settings

__all__ = [
    "Lexer",
    "Token",
    "tokenize",
    "Block",
    "Config",
    "ConfigParser",
    "ParseError",
    "Segment",
    "parse",
    "parse_file",
    "Dispenser",
    "DirectiveError",
    "format",
    "ConfigLoader",
    "ConfigError",
    "Settings",
]
