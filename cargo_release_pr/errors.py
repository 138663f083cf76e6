"""Error types raised by the release pipeline.

Every failure the CLI knows how to report derives from ReleasePRError.
Anything else escaping the pipeline is a bug.
"""

from __future__ import annotations


class ReleasePRError(Exception):
    """Base error for everything the release pipeline reports."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ReleasePRError):
    """Inputs are contradictory, missing, or point at an unsupported setup."""


class NotFoundError(ReleasePRError):
    """No crate matches the requested selection."""


class AmbiguousPackageError(NotFoundError):
    """Several crates could match and nothing says which one to use."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(
            f"Found {len(candidates)} crates in the workspace "
            f"({', '.join(candidates)}); set crate-name or crate-path to pick one"
        )


class ProcessError(ReleasePRError):
    """An external program exited non-zero (or could not be started)."""

    def __init__(self, program: str, exit_code: int) -> None:
        self.program = program
        self.exit_code = exit_code
        super().__init__(f"{program} exited with code {exit_code}")


class NoVersionChangeError(ReleasePRError):
    """cargo-release succeeded but the crate version did not move."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(
            f"New and old versions are identical ({version}), not proceeding"
        )


class TemplateRenderError(ReleasePRError):
    """A PR title or body template failed to compile or render."""


class GitHubError(ReleasePRError):
    """The GitHub API rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
