"""Resolve the checker, its config and the repository root.

The hook wrapper hands us references that are usually symlinks (e.g. into a
build system's runfiles tree). They are followed to concrete paths before
any git command runs.
"""

import logging
from pathlib import Path

from .errors import ResolutionError
from .models import GateConfig, ResolvedPaths

logger = logging.getLogger("schemagate.paths")


def resolve_reference(reference: Path, what: str) -> Path:
    """Follow every symlink in ``reference`` to an existing entry.

    Raises:
        ResolutionError: The reference (or a link target) does not exist.
    """
    try:
        resolved = Path(reference).expanduser().resolve(strict=True)
    except FileNotFoundError as e:
        raise ResolutionError(f"{what} does not exist: {reference}") from e
    except (OSError, RuntimeError) as e:
        # Symlink loop, or a path component that is not a directory
        raise ResolutionError(f"{what} cannot be resolved: {reference}", str(e)) from e

    logger.debug(f"Resolved {what}: {reference} -> {resolved}")
    return resolved


def resolve_paths(config: GateConfig) -> ResolvedPaths:
    """Resolve all three references; the repo root is the workspace's parent."""
    checker_path = resolve_reference(config.checker_ref, "checker executable")
    config_path = resolve_reference(config.config_ref, "checker config")
    workspace = resolve_reference(config.workspace_ref, "workspace")

    return ResolvedPaths(
        checker_path=checker_path,
        config_path=config_path,
        repo_root=workspace.parent,
    )
