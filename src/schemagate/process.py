"""Run external commands and capture their result."""

import logging
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from .models import ProcessResult

logger = logging.getLogger("schemagate.process")

# (args, cwd) -> ProcessResult; tests substitute a recording fake
Runner = Callable[[Sequence[str], Path], ProcessResult]


def run_command(args: Sequence[str], cwd: Path) -> ProcessResult:
    """Run ``args`` in ``cwd`` to completion, capturing output as bytes.

    Output is kept undecoded so it can be replayed byte for byte.

    No timeout is applied. OSError (missing or non-executable program)
    propagates to the caller, which knows what the command was for.
    """
    argv = [str(arg) for arg in args]
    logger.debug(f"Running {' '.join(argv)} (cwd={cwd})")
    proc = subprocess.run(
        argv,
        cwd=str(cwd),
        capture_output=True,
    )
    logger.debug(f"{argv[0]} exited with {proc.returncode}")
    return ProcessResult(
        args=argv,
        exit_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
    )
