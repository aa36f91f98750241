"""Data models for the schema gate."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# "automated" means CI: mainline must be fetched before computing the baseline
ExecutionMode = Literal["interactive", "automated"]

GateStatus = Literal[
    "skipped",   # merge in progress, nothing checked
    "passed",    # checker found no incompatibilities
    "resolved",  # baseline computed, checker intentionally not run
]


class GateConfig(BaseModel):
    """Settings for one gate run, built once at startup."""

    model_config = ConfigDict(frozen=True)

    checker_ref: Path = Field(..., description="Reference to the checker executable (may be a symlink)")
    config_ref: Path = Field(..., description="Reference to the checker config file (may be a symlink)")
    workspace_ref: Path = Field(..., description="File or directory whose parent is the repository root")
    mode: ExecutionMode = "interactive"
    mainline_branch: str = Field(default="master", min_length=1)
    remote: str = Field(default="origin", min_length=1)
    checker_command: str = Field(default="breaking", min_length=1, description="Checker subcommand to run")

    @property
    def automated(self) -> bool:
        return self.mode == "automated"


class ResolvedPaths(BaseModel):
    """Concrete locations behind the configured references."""

    model_config = ConfigDict(frozen=True)

    checker_path: Path
    config_path: Path
    repo_root: Path


class ProcessResult(BaseModel):
    """Outcome of one external process invocation."""

    args: list[str]
    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def diagnostics(self) -> str:
        """Combined output, stderr first, decoded leniently for error messages."""
        parts = (part.decode(errors="replace").strip() for part in (self.stderr, self.stdout))
        return "\n".join(part for part in parts if part)


class GateOutcome(BaseModel):
    """Structured result of a gate run."""

    status: GateStatus
    exit_code: int = 0
    baseline: str | None = Field(None, description="Merge-base commit compared against")
    checker_result: ProcessResult | None = None
