"""Git queries used by the gate.

Only plumbing commands with stable exit codes are used:
    git rev-parse -q --verify <ref>   0 = exists, 1 = missing
    git merge-base HEAD <branch>      0 = found, 1 = no common ancestor
Anything else (128 for "not a git repository" and friends) is a failure.
"""

import logging
from pathlib import Path

from .errors import BaselineError, FetchError, GitStateError
from .models import ProcessResult
from .process import Runner, run_command

logger = logging.getLogger("schemagate.git")

GIT = "git"


class GitRepository:
    """Git operations against one working tree."""

    def __init__(self, root: Path, runner: Runner = run_command, git: str = GIT):
        self.root = Path(root)
        self._runner = runner
        self._git = git

    def _run(self, *args: str) -> ProcessResult:
        try:
            return self._runner([self._git, *args], self.root)
        except OSError as e:
            raise GitStateError(f"Cannot run {self._git}: {e}") from e

    def ref_exists(self, ref: str) -> bool:
        """Whether ``ref`` names an object.

        Raises:
            GitStateError: git failed for a reason other than a missing ref.
        """
        result = self._run("rev-parse", "-q", "--verify", ref)
        if result.exit_code == 0:
            return True
        if result.exit_code == 1:
            return False
        raise GitStateError(f"git rev-parse failed in {self.root}", result.diagnostics())

    def merge_in_progress(self) -> bool:
        """True while a merge is being resolved (MERGE_HEAD exists)."""
        merging = self.ref_exists("MERGE_HEAD")
        logger.debug(f"Merge in progress: {merging}")
        return merging

    def fetch_branch(self, remote: str, branch: str) -> None:
        """Update local ``branch`` from ``remote``'s branch of the same name.

        Raises:
            FetchError: The fetch failed; git's diagnostics are attached.
        """
        refspec = f"{branch}:{branch}"
        logger.info(f"Fetching {remote} {refspec}")
        try:
            result = self._runner([self._git, "fetch", remote, refspec], self.root)
        except OSError as e:
            raise FetchError(f"Cannot run {self._git}: {e}") from e
        if not result.ok:
            raise FetchError(f"Failed to fetch {branch} from {remote}", result.diagnostics())

    def merge_base(self, branch: str) -> str:
        """Nearest common ancestor of HEAD and local ``branch``.

        Raises:
            BaselineError: ``branch`` does not exist locally, HEAD and
                ``branch`` share no history, or git failed.
        """
        try:
            has_branch = self.ref_exists(f"refs/heads/{branch}^{{commit}}")
        except GitStateError as e:
            raise BaselineError(f"Cannot look up mainline branch {branch}", e.detail) from e
        if not has_branch:
            raise BaselineError(f"Mainline branch {branch} does not exist locally")

        result = self._run("merge-base", "HEAD", branch)
        commit = result.stdout.decode(errors="replace").strip()
        if result.exit_code == 1 and not commit:
            raise BaselineError(f"HEAD and {branch} have no common ancestor")
        if not result.ok or not commit:
            raise BaselineError(f"git merge-base HEAD {branch} failed", result.diagnostics())

        logger.info(f"Merge base of HEAD and {branch}: {commit}")
        return commit
