"""The pre-commit schema gate pipeline.

Stages run strictly in order, each needing the previous one's output:

1. Resolve the checker, its config and the repository root.
2. Skip (successfully) if a merge is in progress.
3. In automated mode, fetch mainline; then compute the merge base of HEAD
   and mainline.
4. Run the checker against the merge base.

The merge base rather than the mainline tip is compared against, so only
the changes made on the current branch are checked regardless of how far
mainline has moved since.
"""

import logging

from .checker import run_checker
from .git import GitRepository
from .logging_config import NOTICE
from .models import GateConfig, GateOutcome, ResolvedPaths
from .paths import resolve_paths
from .process import Runner, run_command

logger = logging.getLogger("schemagate.gate")


def resolve_baseline(config: GateConfig, repo: GitRepository) -> str:
    """Merge base of HEAD and mainline, fetching mainline first in CI."""
    if config.automated:
        repo.fetch_branch(config.remote, config.mainline_branch)
    return repo.merge_base(config.mainline_branch)


def run_gate(config: GateConfig, runner: Runner = run_command, check: bool = True) -> GateOutcome:
    """Run the gate once.

    Args:
        config: Gate settings
        runner: Process runner for git and the checker
        check: When False, stop after computing the baseline

    Returns:
        GateOutcome with status "skipped", "passed" or "resolved".

    Raises:
        GateError: Any stage failed; CheckerFailure when the checker
            reported incompatibilities.
    """
    paths: ResolvedPaths = resolve_paths(config)
    repo = GitRepository(paths.repo_root, runner=runner)

    if repo.merge_in_progress():
        logger.info(f"Currently merging, skipping {paths.checker_path.name} checks", extra=NOTICE)
        return GateOutcome(status="skipped")

    baseline = resolve_baseline(config, repo)
    if not check:
        return GateOutcome(status="resolved", baseline=baseline)

    result = run_checker(paths, baseline, runner=runner, command=config.checker_command)
    return GateOutcome(status="passed", baseline=baseline, checker_result=result)
