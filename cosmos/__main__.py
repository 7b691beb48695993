"""
Entry point for Cosmos configuration tooling.

Usage:
    python -m cosmos fmt [--overwrite | --diff] [config]
    python -m cosmos validate [config]
    python -m cosmos tokens [config]
    python -m cosmos --help

A config of "-" reads from stdin (fmt and tokens only).
"""

import argparse
import difflib
import sys
from pathlib import Path

from . import __version__
from .config.formatter import format as format_config
from .config.lexer import tokenize
from .config.loader import ConfigError, ConfigLoader
from .const import APP_NAME, DEFAULT_CONFIG_PATH
from .logging import LogConfig, get_logger, setup_logging, setup_logging_from_args


logger = get_logger("main")


def _read_input(config: str) -> bytes:
    if config == "-":
        return sys.stdin.buffer.read()
    return Path(config).read_bytes()


def format_command(args: argparse.Namespace) -> int:
    """Print, diff or overwrite the canonical form of a config file."""
    if args.overwrite and args.config == "-":
        print("Cannot use --overwrite when reading from stdin", file=sys.stderr)
        return 1

    original = _read_input(args.config)
    formatted = format_config(original)

    if args.overwrite:
        if formatted == original:
            logger.info(f"{args.config} is already formatted")
            return 0
        Path(args.config).write_bytes(formatted)
        logger.info(f"Formatted {args.config}")
        return 0

    if args.diff:
        before = original.decode("utf-8", errors="replace").splitlines(keepends=True)
        after = formatted.decode("utf-8", errors="replace").splitlines(keepends=True)
        sys.stdout.writelines(
            difflib.unified_diff(before, after, fromfile=args.config, tofile=f"{args.config} (formatted)")
        )
        return 0

    sys.stdout.buffer.write(formatted)
    sys.stdout.flush()
    return 0


def tokens_command(args: argparse.Namespace) -> int:
    """Dump the token stream, one token per line."""
    name = "<stdin>" if args.config == "-" else args.config
    for token in tokenize(name, _read_input(args.config)):
        print(f"{token.filename}:{token.line}\t{token.text!r}")
    return 0


def validate_command(args: argparse.Namespace, log_config: LogConfig) -> int:
    """Load a config file, print its warnings and a short summary."""
    loader = ConfigLoader()
    settings = loader.load_file(args.config)

    # The log block only applies when the command line did not pick a level
    if not (args.debug or args.verbose or args.quiet):
        setup_logging(settings.logging.to_log_config(log_config))

    warnings = loader.validate(settings)

    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print("\nConfiguration summary:")
    print(f"  Blocks: {len(loader.last_document or ())}")
    print(f"  Logging level: {settings.logging.level} ({settings.logging.output.value})")
    if settings.logging.file:
        print(f"  Log file: {settings.logging.file}")
    print(f"  Listeners: {len(settings.server.listeners)}")
    for listener in settings.server.listeners:
        metrics = f" (metrics on {listener.metrics})" if listener.metrics else ""
        print(f"    {listener.network.value} {listener.address}{metrics}")

    print("\nConfiguration is valid!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cosmos",
        description=f"{APP_NAME} configuration tooling",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress messages (info level)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Log everything (debug level)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Log errors only",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write logs to a rotating file",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Never color console logs",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    fmt = commands.add_parser("fmt", help="Format a configuration file")
    fmt.add_argument("config", nargs="?", default=DEFAULT_CONFIG_PATH, help="Configuration file, or - for stdin")
    mode = fmt.add_mutually_exclusive_group()
    mode.add_argument("--overwrite", action="store_true", help="Write the formatted result back to the file")
    mode.add_argument("--diff", action="store_true", help="Print a unified diff instead of the result")

    validate = commands.add_parser("validate", help="Validate a configuration file")
    validate.add_argument("config", nargs="?", default=DEFAULT_CONFIG_PATH, help="Configuration file")

    tokens = commands.add_parser("tokens", help="Print the tokens of a configuration file")
    tokens.add_argument("config", nargs="?", default=DEFAULT_CONFIG_PATH, help="Configuration file, or - for stdin")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    args = build_parser().parse_args(argv)

    log_config = setup_logging_from_args(
        verbose=args.verbose,
        debug=args.debug,
        quiet=args.quiet,
        colors=not args.no_color,
        log_file=args.log_file,
    )

    try:
        if args.command == "fmt":
            return format_command(args)
        if args.command == "tokens":
            return tokens_command(args)
        return validate_command(args, log_config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"{args.config}: {e.strerror or e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
