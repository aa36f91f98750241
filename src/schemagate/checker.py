"""Invoke the external schema-compatibility checker.

The checker is treated as opaque: it receives a git reference for the
baseline and its config file, and its verdict is ours.
"""

import logging
import signal

from .errors import CheckerExecutionError, CheckerFailure
from .models import ProcessResult, ResolvedPaths
from .process import Runner, run_command

logger = logging.getLogger("schemagate.checker")

DEFAULT_COMMAND = "breaking"


def against_reference(baseline: str) -> str:
    """The whole repository as of ``baseline`` (buf input syntax)."""
    return f".git#ref={baseline}"


def build_command(paths: ResolvedPaths, baseline: str, command: str = DEFAULT_COMMAND) -> list[str]:
    """Argument vector comparing the working tree against ``baseline``."""
    return [
        str(paths.checker_path),
        command,
        "--against",
        against_reference(baseline),
        f"--config={paths.config_path}",
        ".",
    ]


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


def run_checker(
    paths: ResolvedPaths,
    baseline: str,
    runner: Runner = run_command,
    command: str = DEFAULT_COMMAND,
) -> ProcessResult:
    """Run the checker from the repository root.

    Returns:
        The checker's result when it exits 0.

    Raises:
        CheckerExecutionError: The checker could not be started or was
            killed by a signal.
        CheckerFailure: The checker ran and reported incompatibilities.
    """
    argv = build_command(paths, baseline, command)
    logger.info(f"Checking against {against_reference(baseline)}")

    try:
        result = runner(argv, paths.repo_root)
    except OSError as e:
        raise CheckerExecutionError(f"Cannot run checker {paths.checker_path}: {e}") from e

    if result.exit_code < 0:
        signum = -result.exit_code
        raise CheckerExecutionError(
            f"Checker killed by {_signal_name(signum)}",
            exit_code=128 + signum,
            result=result,
        )
    if not result.ok:
        raise CheckerFailure(result)
    return result
