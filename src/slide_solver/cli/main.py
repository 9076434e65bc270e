"""Main CLI entry point for the sliding puzzle solver."""

import sys
import argparse
import logging
from typing import List, Optional, Tuple

from slide_solver.config import load_config

from . import commands
from .utils import setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog='slide-solver',
        description='Sliding puzzle solver - A* search over boards with walls',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  slide-solver solve 4,3,123406785aC=            # Solve a single board
  slide-solver solve 3,3,123456708 --engine parallel --workers 4
  slide-solver batch slidepuzzle.txt --answers answers.txt
  slide-solver show 3,3,12346075= --distances     # Draw a board
  slide-solver config show                        # Show current configuration
        """
    )

    # Global options
    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Configuration overrides, space separated (e.g., "search.parallel.num_workers=8")'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='Increase verbosity (use -v or -vv)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress all output except results'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Output file for results (JSON format)'
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        dest='command',
        help='Available commands',
        metavar='COMMAND'
    )

    # Solve command
    solve_parser = subparsers.add_parser(
        'solve',
        help='Solve a single board',
        description='Solve a single board given as "<width>,<height>,<symbols>"'
    )

    solve_parser.add_argument(
        'board',
        type=str,
        help='Board text encoding, e.g. 3,3,123456708'
    )
    _add_search_arguments(solve_parser)

    # Batch command
    batch_parser = subparsers.add_parser(
        'batch',
        help='Solve every board of a batch file',
        description='Solve a batch file (one board per line after the header) and write an answers file'
    )

    batch_parser.add_argument(
        'input_path',
        type=str,
        help='Batch file with one board encoding per line'
    )

    batch_parser.add_argument(
        '--answers', '-a',
        type=str,
        help='Answers file to write (default: batch.answers_file)'
    )

    batch_parser.add_argument(
        '--threads', '-j',
        type=int,
        help='Number of boards solved concurrently (default: batch.threads)'
    )

    batch_parser.add_argument(
        '--header-lines',
        type=int,
        help='Number of header lines to skip (default: batch.header_lines)'
    )
    _add_search_arguments(batch_parser)

    # Show command
    show_parser = subparsers.add_parser(
        'show',
        help='Draw a board',
        description='Draw a board as a grid, optionally with per-tile heuristic distances'
    )

    show_parser.add_argument(
        'board',
        type=str,
        help='Board text encoding'
    )

    show_parser.add_argument(
        '--distances', '-d',
        action='store_true',
        help='Show each tile\'s heuristic distance instead of its symbol'
    )

    # Verify command
    verify_parser = subparsers.add_parser(
        'verify',
        help='Check an answers file against its batch',
        description='Replay every answer on its board and check that it reaches the solved layout'
    )

    verify_parser.add_argument('input_path', type=str, help='Batch file')
    verify_parser.add_argument('answers', type=str, help='Answers file')
    verify_parser.add_argument(
        '--header-lines',
        type=int,
        default=2,
        help='Number of header lines to skip (default: 2)'
    )

    # Config command
    config_parser = subparsers.add_parser(
        'config',
        help='Configuration management',
        description='Manage solver configuration'
    )

    config_subparsers = config_parser.add_subparsers(
        dest='config_action',
        help='Configuration actions'
    )

    config_subparsers.add_parser(
        'show',
        help='Show current configuration'
    )

    config_subparsers.add_parser(
        'validate',
        help='Validate configuration'
    )

    config_set_parser = config_subparsers.add_parser(
        'set',
        help='Set configuration parameter'
    )
    config_set_parser.add_argument('key', help='Parameter key (e.g., search.parallel.num_workers)')
    config_set_parser.add_argument('value', help='Parameter value')

    return parser


def _add_search_arguments(parser: argparse.ArgumentParser) -> None:
    """Search options shared by ``solve`` and ``batch``."""
    parser.add_argument(
        '--engine', '-e',
        choices=['sequential', 'parallel'],
        help='Search engine (default: solver.engine)'
    )

    parser.add_argument(
        '--workers', '-w',
        type=int,
        help='Lanes of the parallel engine (default: search.parallel.num_workers)'
    )

    parser.add_argument(
        '--threshold', '-t',
        type=float,
        help='Prune children whose f-value reaches this bound'
    )

    parser.add_argument(
        '--max-iterations',
        type=int,
        help='Frontier pops before giving up (per lane for the parallel engine)'
    )

    parser.add_argument(
        '--no-cache',
        action='store_true',
        help='Disable the memo cache'
    )


def resolve_logging(parsed_args: argparse.Namespace) -> Tuple[int, Optional[str]]:
    """Logging level and format: -q/-v flags first, then the ``logging`` config section."""
    if parsed_args.quiet:
        return logging.ERROR, None
    if parsed_args.verbose == 1:
        return logging.INFO, None
    if parsed_args.verbose >= 2:
        return logging.DEBUG, None

    try:
        config = load_config(overrides=commands._global_overrides(parsed_args), validate=False)
    except Exception:
        # Commands load the configuration again and report the error themselves
        return logging.WARNING, None

    logging_config = config.get('logging', {})
    level = logging.getLevelName(str(logging_config.get('level', 'WARNING')).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    return level, logging_config.get('format')


def main_cli(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    log_level, log_format = resolve_logging(parsed_args)
    setup_logging(log_level, log_format)
    logger = logging.getLogger(__name__)

    try:
        if not parsed_args.command:
            parser.print_help()
            return 1

        # Route to appropriate command handler
        if parsed_args.command == 'solve':
            return commands.solve_command(parsed_args)
        if parsed_args.command == 'batch':
            return commands.batch_command(parsed_args)
        if parsed_args.command == 'show':
            return commands.show_command(parsed_args)
        if parsed_args.command == 'verify':
            return commands.verify_command(parsed_args)
        if parsed_args.command == 'config':
            return commands.config_command(parsed_args)

        logger.error(f"Unknown command: {parsed_args.command}")
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1


def main() -> None:
    """Entry point for console script."""
    sys.exit(main_cli())


if __name__ == '__main__':
    main()
