"""CLI entry point for cargo-release-pr."""

from __future__ import annotations

import sys
from importlib.metadata import version as pkg_version
from typing import NoReturn

import click

from .actions import set_failed
from .config import (
    DEFAULT_BRANCH_PREFIX,
    DEFAULT_BRANCH_SEPARATOR,
    DEFAULT_PR_TITLE,
    build_inputs,
)
from .errors import ReleasePRError
from .metadata import get_provider
from .models import CrateVars, PackageRef, PRSettings, TemplateVars, VersionInfo
from .pipeline import run_release
from .resolver import find_crate
from .templates import render_pr

__version__ = pkg_version("cargo-release-pr")


def _env(name: str) -> str:
    """Environment variable GitHub Actions uses for an input."""
    return "INPUT_" + name.replace("-", "_").upper()


def _fail(exc: Exception) -> NoReturn:
    set_failed(exc.message if isinstance(exc, ReleasePRError) else str(exc))
    sys.exit(1)


crate_name_option = click.option(
    "--crate-name", envvar=_env("crate-name"), help="Crate to release, if the repo has more than one."
)
crate_path_option = click.option(
    "--crate-path", envvar=_env("crate-path"), help="Path to the crate; resolved from the workspace by default."
)
metadata_source_option = click.option(
    "--metadata-source",
    envvar=_env("metadata-source"),
    type=click.Choice(["cargo", "manifest"]),
    default="cargo",
    show_default=True,
    help="List workspace members with cargo metadata or by reading Cargo.toml files.",
)
pr_title_option = click.option(
    "--pr-title",
    envvar=_env("pr-title"),
    default=DEFAULT_PR_TITLE,
    show_default=True,
    help="Literal or template for the title of the PR.",
)
pr_template_option = click.option(
    "--pr-template", envvar=_env("pr-template"), help="Template for the body of the PR."
)
pr_template_file_option = click.option(
    "--pr-template-file",
    envvar=_env("pr-template-file"),
    help="Template file for the body of the PR (takes precedence over --pr-template).",
)
pr_merge_strategy_option = click.option(
    "--pr-merge-strategy",
    envvar=_env("pr-merge-strategy"),
    type=click.Choice(["squash", "merge", "rebase", "bors"]),
    default="squash",
    show_default=True,
    help="Merge strategy the PR should use.",
)
pr_release_notes_option = click.option(
    "--pr-release-notes",
    envvar=_env("pr-release-notes"),
    type=click.BOOL,
    default=False,
    show_default=True,
    help="Include a release notes section in the PR body.",
)


@click.group()
@click.version_option(__version__, prog_name="cargo-release-pr")
def cli() -> None:
    """Open a release PR for a Cargo crate, bumped with cargo-release."""


@cli.command()
@click.option(
    "--github-token",
    envvar=[_env("github-token"), "GITHUB_TOKEN"],
    required=True,
    help="GitHub token to interact with the API.",
)
@click.option(
    "--repository",
    envvar="GITHUB_REPOSITORY",
    required=True,
    help="Repository to open the PR on, as owner/name.",
)
@click.option(
    "--api-url",
    envvar="GITHUB_API_URL",
    default="https://api.github.com",
    show_default=True,
    help="GitHub REST API root.",
)
@crate_name_option
@crate_path_option
@click.option(
    "--version",
    "version",
    envvar=_env("version"),
    required=True,
    help="Version to release, or one of major, minor, patch.",
)
@pr_title_option
@click.option("--pr-label", envvar=_env("pr-label"), help="Label to apply to the PR.")
@click.option(
    "--pr-draft", envvar=_env("pr-draft"), type=click.BOOL, default=False, show_default=True,
    help="Create the PR as a draft.",
)
@click.option(
    "--pr-modifiable", envvar=_env("pr-modifiable"), type=click.BOOL, default=True, show_default=True,
    help="Allow maintainers to modify the PR.",
)
@pr_template_option
@pr_template_file_option
@pr_merge_strategy_option
@pr_release_notes_option
@click.option(
    "--git-user-name", envvar=_env("git-user-name"), default="github-actions", show_default=True,
    help="Name of the git user that commits the release.",
)
@click.option(
    "--git-user-email", envvar=_env("git-user-email"), default="github-actions@github.com",
    show_default=True, help="Email of the git user that commits the release.",
)
@click.option(
    "--check-semver", envvar=_env("check-semver"), type=click.BOOL, default=False,
    help="Reserved; not acted on yet.",
)
@click.option(
    "--base-branch", envvar=_env("base-branch"),
    help="Branch the PR merges into. Defaults to the repo's default branch.",
)
@click.option(
    "--branch-prefix", envvar=_env("branch-prefix"), default=DEFAULT_BRANCH_PREFIX,
    show_default=True, help="Prefix of the release branch.",
)
@click.option(
    "--branch-separator", envvar=_env("branch-separator"), default=DEFAULT_BRANCH_SEPARATOR,
    show_default=True, help="Separator between branch prefix and version.",
)
@metadata_source_option
def run(**options: object) -> None:
    """Bump the crate, push a release branch and open the PR."""
    try:
        inputs = build_inputs(**options)
        run_release(inputs)
    except Exception as exc:
        _fail(exc)


@cli.command()
@crate_name_option
@crate_path_option
@metadata_source_option
def resolve(crate_name: str | None, crate_path: str | None, metadata_source: str) -> None:
    """Print the crate that would be released: name, version and path."""
    try:
        crate = find_crate(
            PackageRef(name=crate_name or None, path=crate_path or None),
            provider=get_provider(metadata_source),
        )
    except Exception as exc:
        _fail(exc)
    click.echo(f"{crate.name} {crate.version} {crate.path}")


@cli.command()
@crate_name_option
@crate_path_option
@metadata_source_option
@click.option("--new-version", required=True, help="Version to show as the released one.")
@click.option("--desired", default=None, help="Requested version; defaults to --new-version.")
@click.option("--branch", "branch_name", default=None, help="Release branch name to show.")
@pr_title_option
@pr_template_option
@pr_template_file_option
@pr_merge_strategy_option
@pr_release_notes_option
def render(
    crate_name: str | None,
    crate_path: str | None,
    metadata_source: str,
    new_version: str,
    desired: str | None,
    branch_name: str | None,
    pr_title: str,
    pr_template: str | None,
    pr_template_file: str | None,
    pr_merge_strategy: str,
    pr_release_notes: bool,
) -> None:
    """Preview the PR title and body without touching git or GitHub."""
    try:
        crate = find_crate(
            PackageRef(name=crate_name or None, path=crate_path or None),
            provider=get_provider(metadata_source),
        )
        pr = PRSettings(
            title=pr_title,
            template=pr_template,
            template_file=pr_template_file,
            merge_strategy=pr_merge_strategy,
            release_notes=pr_release_notes,
        )
        variables = TemplateVars(
            pr=pr,
            crate=CrateVars(name=crate.name, path=crate.path),
            version=VersionInfo(
                previous=crate.version, actual=new_version, desired=desired or new_version
            ),
            branch_name=branch_name
            or f"{DEFAULT_BRANCH_PREFIX}{DEFAULT_BRANCH_SEPARATOR}{desired or new_version}",
        )
        rendered = render_pr(pr, variables)
    except Exception as exc:
        _fail(exc)
    click.echo(rendered.title)
    click.echo()
    click.echo(rendered.body, nl=False)
