"""CLI entry point for the schemagate pre-commit hook."""

import argparse
import os
import sys

from .config import load_config, settings_from_environ
from .errors import CheckerExecutionError, CheckerFailure, GateError
from .gate import run_gate
from .logging_config import configure_logging, get_logger, level_from_verbosity
from .models import ProcessResult


def _write_bytes(stream, data: bytes) -> None:
    stream.flush()
    stream.buffer.write(data)
    stream.buffer.flush()


def forward_output(result: ProcessResult | None) -> None:
    """Write a child's captured output to our own streams byte for byte."""
    if result is None:
        return
    if result.stdout:
        _write_bytes(sys.stdout, result.stdout)
    if result.stderr:
        _write_bytes(sys.stderr, result.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemagate",
        description="Block commits that break schema compatibility with mainline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration comes from the environment:
  buf_path     checker executable (symlinks are followed)
  buf_config   checker config file
  WORKSPACE    file at the repository root
  CI=true      fetch mainline from the remote before comparing

Examples:
  schemagate                    # run the check (as a pre-commit hook)
  schemagate -v                 # also show the baseline being compared against
  schemagate --print-baseline   # print the merge base and exit
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Show progress (-v) or debug output (-vv)",
    )
    parser.add_argument(
        "--print-baseline",
        action="store_true",
        help="Print the commit the check would compare against, without running the checker",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the gate and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_environ(os.environ)
    except GateError as e:
        configure_logging(level_from_verbosity(args.verbose))
        get_logger("cli").error(str(e))
        return e.exit_code

    configure_logging(
        level_from_verbosity(args.verbose, settings.log_level or "WARNING"),
        log_dir=settings.log_dir,
    )
    logger = get_logger("cli")

    try:
        config = load_config(os.environ, settings=settings)
        outcome = run_gate(config, check=not args.print_baseline)
    except CheckerFailure as e:
        forward_output(e.result)
        logger.info(str(e))
        return e.exit_code
    except CheckerExecutionError as e:
        forward_output(e.result)
        logger.error(str(e))
        return e.exit_code
    except GateError as e:
        logger.error(str(e))
        return e.exit_code

    if args.print_baseline:
        if outcome.baseline:
            print(outcome.baseline)
        return outcome.exit_code

    forward_output(outcome.checker_result)
    logger.info(f"Schema check {outcome.status}")
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
