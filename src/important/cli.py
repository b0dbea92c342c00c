"""Command-line front door for important.

Parses the ``mark``, ``unmark`` and ``find`` commands, loads configuration,
and dispatches into the Marker or the QueryEngine. The process exit code is
the combined StatusCode of the command.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config.parser import ConfigParser, ConfigurationError
from .models.config import ImportantConfig, LoggingConfig
from .models.find_query import FindQuery
from .models.status import StatusCode, OK, INVALID_SYNTAX
from .tools.marker import Marker
from .tools.query_engine import QueryEngine, QueryError


logger = logging.getLogger(__name__)

HELP_TEXT = """Usage: important [--config FILE] COMMAND [OPTIONS] [FILE...]

A tool to mark and find the files as IMPORTANT.

Commands:
\tmark FILE...     Marks the files as important
\tunmark FILE...   Unmarks the files as important
\tfind [OPTIONS]   Finds important files and prints absolute paths on new lines

Try 'important find --help' to get more information on the 'find' command.

Exit codes:
\t (0) - OK
\t (-1) - Invalid syntax
\t (has byte: 2) - Permission error, check stderr
\t (has byte: 4) - File not found, check stderr
\t (has byte: 8) - System I/O error happened, check stderr
\t (has byte: 16) - Uncertain, could be OK, double check manually
"""

FIND_USAGE = ("important find [--dir search_directory] [--ext extension] "
              "[--name-contains string] [-v|--verbose] [--use-regexp]")

FIND_HELP = f"""Usage: {FIND_USAGE}

Prints the absolute paths of marked files below the search directory.

Options:
\t--dir DIR              Directory to search (default: working directory)
\t--ext EXT              Only files whose name ends in .EXT
\t--name-contains TEXT   Only files whose name contains TEXT
\t-v, --verbose          Report the search directory and patterns on stderr
\t--use-regexp           Treat TEXT and EXT as regular expressions;
\t                       TEXT must then match the name up to its extension
"""


class UsageError(Exception):
    """Raised for malformed command lines."""
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting."""

    def error(self, message: str) -> None:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = _ArgumentParser(prog="important", add_help=False, allow_abbrev=False)
    parser.add_argument("--config", metavar="FILE", help="YAML configuration file")
    parser.add_argument("-h", "--help", action="store_true", dest="show_help")

    commands = parser.add_subparsers(dest="command", parser_class=_ArgumentParser)

    for name in ("mark", "unmark"):
        command = commands.add_parser(name, add_help=False, allow_abbrev=False)
        command.add_argument("files", nargs="*", metavar="FILE")

    find = commands.add_parser("find", add_help=False, allow_abbrev=False, usage=FIND_USAGE)
    find.add_argument("--dir", dest="directory", metavar="search_directory")
    find.add_argument("--ext", dest="extension", metavar="extension")
    find.add_argument("--name-contains", dest="name_contains", metavar="string")
    find.add_argument("-v", "--verbose", action="store_true")
    find.add_argument("--use-regexp", dest="use_regexp", action="store_true")
    find.add_argument("--help", action="store_true", dest="find_help")

    return parser


# Option names that end a find option's value; anything else is taken as the value.
FIND_OPTION_NAMES = ("--dir", "--ext", "--name-contains", "--verbose", "--use-regexp")
FIND_VALUE_OPTIONS = ("--dir", "--ext", "--name-contains")


def normalize_arguments(arguments: Sequence[str]) -> List[str]:
    """
    Rewrite a command line so argparse reads it the way the tool defines it.

    Every argument after ``mark`` or ``unmark`` is a file, even when it starts
    with a dash. A find option that takes a value takes the next argument
    unless that argument is itself a find option name, so ``--ext -bak``
    becomes ``--ext=-bak``.
    """
    arguments = list(arguments)
    index = 0
    while index < len(arguments):
        current = arguments[index]
        if current == "--config":
            index += 2
        elif current.startswith("--config=") or current in ("-h", "--help"):
            index += 1
        else:
            break

    if index >= len(arguments):
        return arguments

    head, command, rest = arguments[:index], arguments[index], arguments[index + 1:]
    if command in ("mark", "unmark"):
        return head + [command, "--"] + rest
    if command != "find":
        return arguments

    options: List[str] = []
    position = 0
    while position < len(rest):
        current = rest[position]
        following = rest[position + 1] if position + 1 < len(rest) else None
        if current in FIND_VALUE_OPTIONS and following is not None and following not in FIND_OPTION_NAMES:
            options.append(f"{current}={following}")
            position += 2
        else:
            options.append(current)
            position += 1
    return head + [command] + options


def configure_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Send diagnostics of the ``important`` loggers to standard error."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.format))

    package_logger = logging.getLogger("important")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)

    level = config.get_level()
    if verbose:
        level = min(level, logging.INFO)
    package_logger.setLevel(level)


def _load_config(config_path: Optional[str], working_directory: Path) -> ImportantConfig:
    result = ConfigParser(working_directory=working_directory).load_config(config_path)
    for warning in result.warnings:
        logger.info(warning)
    return result.config


def run_find(config: ImportantConfig, args: argparse.Namespace) -> StatusCode:
    """Run the find command, printing each match on its own line."""
    query = FindQuery(
        directory=args.directory,
        name_contains=args.name_contains,
        extension=args.extension,
        verbose=args.verbose,
        use_regexp=args.use_regexp,
    )
    engine = QueryEngine(config)
    try:
        for path in engine.find(query):
            print(path, flush=True)
    except QueryError as e:
        logger.error(f"on find: {e}")
        return e.status
    return OK


def main(argv: Optional[Sequence[str]] = None, working_directory: Optional[Path] = None) -> int:
    """
    Parse CLI arguments and run a command.

    Args:
        argv: Arguments without the program name (``sys.argv[1:]`` when None)
        working_directory: Directory holding the catalog and default search
            root (process cwd when None)

    Returns:
        Process exit code
    """
    arguments: List[str] = list(sys.argv[1:] if argv is None else argv)
    configure_logging(LoggingConfig())

    if not arguments or arguments == ["--help"]:
        print(HELP_TEXT)
        return OK.exit_code

    try:
        args = build_parser().parse_args(normalize_arguments(arguments))
    except UsageError as e:
        logger.error(f"Invalid syntax. {e}. See 'important --help'.")
        return INVALID_SYNTAX.exit_code

    if getattr(args, "find_help", False):
        print(FIND_HELP)
        return OK.exit_code
    if args.show_help or args.command is None:
        print(HELP_TEXT)
        return OK.exit_code

    try:
        config = _load_config(args.config, working_directory or Path.cwd())
    except ConfigurationError as e:
        logger.error(str(e))
        return INVALID_SYNTAX.exit_code

    configure_logging(config.logging, verbose=getattr(args, "verbose", False))

    if args.command == "find":
        status = run_find(config, args)
    elif args.command == "mark":
        status = Marker(config).mark(args.files)
    else:
        status = Marker(config).unmark(args.files)

    logger.debug(f"Finished {args.command}: {status}")
    return status.exit_code


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())
