"""Error taxonomy for the schema gate.

Every failure aborts the run. Each error carries the exit code the hook
returns, so the CLI only has to log and exit.
"""

from .models import ProcessResult

EXIT_CONFIG = 2
EXIT_RESOLUTION = 3
EXIT_GIT_STATE = 4
EXIT_BASELINE = 5
EXIT_FETCH = 6
EXIT_CHECKER_NOT_RUNNABLE = 127


class GateError(Exception):
    """Base class for all gate failures."""

    exit_code = 1

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.message = message
        self.detail = detail.strip()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n{self.detail}"
        return self.message


class ConfigError(GateError):
    """A required setting is missing or malformed."""

    exit_code = EXIT_CONFIG


class ResolutionError(GateError):
    """A configured location does not exist."""

    exit_code = EXIT_RESOLUTION


class GitStateError(GateError):
    """Querying the repository failed (e.g. not a git repository)."""

    exit_code = EXIT_GIT_STATE


class BaselineError(GateError):
    """No common ancestor with mainline, or the mainline ref is missing."""

    exit_code = EXIT_BASELINE


class FetchError(GateError):
    """Synchronizing mainline from the remote failed."""

    exit_code = EXIT_FETCH


class CheckerExecutionError(GateError):
    """The checker could not be started or was killed."""

    def __init__(
        self,
        message: str,
        detail: str = "",
        exit_code: int = EXIT_CHECKER_NOT_RUNNABLE,
        result: ProcessResult | None = None,
    ):
        super().__init__(message, detail)
        self.exit_code = exit_code
        self.result = result


class CheckerFailure(GateError):
    """The checker ran and reported incompatibilities.

    The CLI replays the checker's own output; its exit code becomes ours.
    """

    def __init__(self, result: ProcessResult):
        super().__init__(f"{result.args[0]} exited with status {result.exit_code}")
        self.result = result
        self.exit_code = result.exit_code
