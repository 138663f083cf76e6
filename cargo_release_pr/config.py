"""Run configuration.

Inputs arrive as CLI options or INPUT_* environment variables (the way
GitHub Actions passes them) and are validated into a frozen Inputs model.
"""

from __future__ import annotations

from typing import Literal

import semver
from pydantic import (
    BaseModel,
    ConfigDict,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .actions import warning
from .errors import ConfigurationError
from .models import PackageRef, PRSettings

BUMP_KEYWORDS = ("major", "minor", "patch")
DEFAULT_PR_TITLE = "release: <%= crate.name %> v<%= version.actual %>"
DEFAULT_BRANCH_PREFIX = "release"
DEFAULT_BRANCH_SEPARATOR = "/"


class GitSettings(BaseModel):
    """Identity used for the release commit, and release branch naming."""

    model_config = ConfigDict(frozen=True)

    user_name: str = "github-actions"
    user_email: str = "github-actions@github.com"
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    branch_separator: str = DEFAULT_BRANCH_SEPARATOR

    def branch_name(self, version: str) -> str:
        """Name of the release branch, e.g. "release/1.2.0" or "release/patch"."""
        return self.branch_separator.join([self.branch_prefix, version])


class Inputs(BaseModel):
    """Validated inputs for one run.

    Attributes:
        github_token: Token for the GitHub API.
        repository: "owner/name" of the repository to open the PR on.
        api_url: GitHub REST API root.
        crate: Which crate to release.
        version: Literal version or one of major/minor/patch.
        pr: Pull request settings (also exposed to templates).
        git: Commit identity and branch naming.
        base_branch: PR base; the repository's default branch when None.
        check_semver: Reserved; accepted but not acted on yet.
        metadata_source: "cargo" (cargo metadata) or "manifest" (Cargo.toml).
    """

    model_config = ConfigDict(frozen=True)

    github_token: SecretStr
    repository: str
    api_url: str = "https://api.github.com"
    crate: PackageRef = PackageRef()
    version: str
    pr: PRSettings = PRSettings(title=DEFAULT_PR_TITLE)
    git: GitSettings = GitSettings()
    base_branch: str | None = None
    check_semver: bool = False
    metadata_source: Literal["cargo", "manifest"] = "cargo"

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        value = value.strip()
        if value in BUMP_KEYWORDS or semver.Version.is_valid(value):
            return value
        raise ValueError(
            f"must be a semver version or one of {', '.join(BUMP_KEYWORDS)}, got {value!r}"
        )

    @model_validator(mode="after")
    def _check_exclusive_templates(self) -> Inputs:
        if self.pr.template_file and self.pr.template and self.pr.template.strip():
            warning(
                "pr-template and pr-template-file are mutually exclusive; "
                "using pr-template-file"
            )
        return self


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def build_inputs(
    *,
    github_token: str | None,
    repository: str | None,
    version: str,
    crate_name: str | None = None,
    crate_path: str | None = None,
    pr_title: str = DEFAULT_PR_TITLE,
    pr_label: str | None = None,
    pr_draft: bool = False,
    pr_modifiable: bool = True,
    pr_template: str | None = None,
    pr_template_file: str | None = None,
    pr_merge_strategy: str = "squash",
    pr_release_notes: bool = False,
    git_user_name: str = "github-actions",
    git_user_email: str = "github-actions@github.com",
    check_semver: bool = False,
    base_branch: str | None = None,
    branch_prefix: str = DEFAULT_BRANCH_PREFIX,
    branch_separator: str = DEFAULT_BRANCH_SEPARATOR,
    metadata_source: str = "cargo",
    api_url: str = "https://api.github.com",
) -> Inputs:
    """Assemble Inputs from flat option values.

    Blank strings count as "not given", since Actions passes unset inputs
    as empty strings.

    Raises:
        ConfigurationError: If any value fails validation.
    """
    if not _blank_to_none(github_token):
        raise ConfigurationError("github-token is required")
    if not _blank_to_none(repository):
        raise ConfigurationError("repository is required (set GITHUB_REPOSITORY)")
    if check_semver:
        warning("check-semver is not supported yet and will be ignored")

    try:
        return Inputs(
            github_token=github_token,
            repository=repository,
            api_url=api_url,
            crate=PackageRef(name=_blank_to_none(crate_name), path=_blank_to_none(crate_path)),
            version=version,
            pr=PRSettings(
                title=pr_title,
                label=_blank_to_none(pr_label),
                draft=pr_draft,
                modifiable=pr_modifiable,
                template=_blank_to_none(pr_template),
                template_file=_blank_to_none(pr_template_file),
                merge_strategy=pr_merge_strategy,
                release_notes=pr_release_notes,
            ),
            git=GitSettings(
                user_name=git_user_name,
                user_email=git_user_email,
                branch_prefix=branch_prefix,
                branch_separator=branch_separator,
            ),
            base_branch=_blank_to_none(base_branch),
            check_semver=check_semver,
            metadata_source=metadata_source,
        )
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'inputs'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid inputs: {problems}") from exc
