"""
Typed settings built from parsed configuration blocks.

Each section reads one top-level block by key. Directive grammars live here,
not in the parser: the parser only knows about braces and lines.

Example:
    log {
        level debug
        output file /var/log/cosmos.log
    }

    http {
        listen :8080 {
            metrics
        }
        listen 127.0.0.1:8443
    }
"""

from dataclasses import dataclass, field
from enum import Enum

from ..const import DEFAULT_LOG_LEVEL, DEFAULT_METRICS_PATH
from ..logging import LEVELS, LogConfig
from .dispenser import DirectiveError
from .parser import Block, Config


class LogOutput(Enum):
    """Where log records are written."""
    STDOUT = "stdout"
    STDERR = "stderr"
    FILE = "file"


class Network(Enum):
    """Network a listener binds on."""
    TCP = "tcp"


@dataclass
class LoggingConfig:
    """Settings from the 'log' block."""
    level: str = DEFAULT_LOG_LEVEL
    output: LogOutput = LogOutput.STDOUT
    file: str | None = None

    @classmethod
    def from_block(cls, block: Block) -> "LoggingConfig":
        """
        Create LoggingConfig from the 'log' block (empty block gives defaults).

        Unknown directives and malformed output arguments raise DirectiveError
        instead of being ignored.
        """
        config = cls()

        for segment in block.segments:
            directive = segment.directive
            if directive == "level":
                if len(segment) < 2:
                    raise DirectiveError("missing level after level directive", segment[0].filename, segment.line)
                if len(segment) > 2:
                    raise DirectiveError("too many arguments after level directive", segment[0].filename, segment.line)
                level = segment[1].text.lower()
                if level not in LEVELS:
                    raise DirectiveError(f'unknown level: "{level}"', segment[0].filename, segment.line)
                config.level = level
            elif directive == "output":
                config.output, config.file = _parse_output(segment.args, segment[0].filename, segment.line)
            else:
                raise DirectiveError(f'unknown directive: "{directive}"', segment[0].filename, segment.line)

        return config

    def to_log_config(self, base: LogConfig | None = None) -> LogConfig:
        """Apply these settings on top of base (or defaults)."""
        log_config = base or LogConfig()
        log_config.level = self.level
        if self.output is LogOutput.STDERR:
            log_config.stream = "stderr"
        elif self.output is LogOutput.FILE and self.file:
            log_config.file = self.file
            log_config.file_level = self.level
        return log_config


def _parse_output(args: list[str], filename: str, line: int) -> tuple[LogOutput, str | None]:
    if not args:
        raise DirectiveError("missing argument after output directive", filename, line)
    try:
        output = LogOutput(args[0].lower())
    except ValueError:
        raise DirectiveError(f'unknown output: "{args[0]}"', filename, line) from None

    if output is LogOutput.FILE:
        if len(args) != 2:
            raise DirectiveError("output file expects exactly one path", filename, line)
        return output, args[1]
    if len(args) > 1:
        raise DirectiveError(f"too many arguments after output {output.value}", filename, line)
    return output, None


@dataclass
class ListenerConfig:
    """A single 'listen' directive."""
    address: str
    network: Network = Network.TCP
    metrics: str | None = None  # Path metrics are served on, if enabled


@dataclass
class ServerConfig:
    """Settings from the 'http' block."""
    listeners: list[ListenerConfig] = field(default_factory=list)

    @classmethod
    def from_block(cls, block: Block) -> "ServerConfig":
        """Create ServerConfig by walking the 'http' block with a Dispenser."""
        config = cls()
        d = block.dispenser()

        while d.next():
            directive = d.val()
            if directive != "listen":
                raise d.err(f'unknown directive: "{directive}"')

            listener = ListenerConfig(address="")
            while d.next_arg():
                if not d.val():
                    raise d.err("empty argument after listen directive")
                listener.address = d.val()
            if not listener.address:
                raise d.err('missing argument after "listen" directive')

            nesting = d.nesting()
            while d.next_block(nesting):
                subdirective = d.val()
                if d.token().is_open_brace:
                    raise d.err("unexpected start of block")
                if d.token().is_close_brace:
                    raise d.err("unexpected closing of block")
                if subdirective != "metrics":
                    raise d.err(f'unknown sub-directive: "{subdirective}"')
                listener.metrics = DEFAULT_METRICS_PATH
                if d.next_arg():
                    raise d.err("unexpected argument after metrics directive")

            config.listeners.append(listener)

        return config


@dataclass
class Settings:
    """Complete application settings."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_config(cls, config: Config) -> "Settings":
        """Create Settings from a parsed Config."""
        return cls(
            logging=LoggingConfig.from_block(config.key("log")),
            server=ServerConfig.from_block(config.key("http")),
        )
