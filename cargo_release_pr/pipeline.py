"""Release pipeline: git user → base branch → branch → crate → bump → push → PR.

Each stage takes the ReleaseContext built so far and returns a new one;
nothing mutates a context in place. Stages run strictly in order and the
first failure aborts the run. Nothing already done (branch created,
commit made, branch pushed) is rolled back.

Stages:
1. Configure the git user that cargo-release commits as
2. Resolve the PR base branch (input, or the repo's default branch)
3. Create and switch to the release branch
4. Resolve the crate to release
5. Bump its version with cargo-release
6. Push the release branch
7. Render the PR title and body
8. Open the pull request (and label it)
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Any

from pydantic import BaseModel, ConfigDict

from .actions import debug, info, set_output
from .config import Inputs
from .github import GitHubClient
from .metadata import MetadataProvider, get_provider
from .models import (
    CrateVars,
    PackageDetails,
    PullRequest,
    RenderedPR,
    TemplateVars,
    VersionInfo,
)
from .release import run_cargo_release
from .resolver import find_crate
from .shell import git, step
from .templates import render_pr


class ReleaseContext(BaseModel):
    """Everything known about the run so far."""

    model_config = ConfigDict(frozen=True)

    inputs: Inputs
    base_branch: str | None = None
    branch_name: str | None = None
    crate: PackageDetails | None = None
    new_version: str | None = None
    rendered: RenderedPR | None = None
    pull_request: PullRequest | None = None

    def require(self, field: str) -> Any:
        """Get a field an earlier stage must have filled in."""
        value = getattr(self, field)
        if value is None:
            raise RuntimeError(f"pipeline stage ran before {field} was set")
        return value

    def template_vars(self) -> TemplateVars:
        crate: PackageDetails = self.require("crate")
        return TemplateVars(
            pr=self.inputs.pr,
            crate=CrateVars(name=crate.name, path=crate.path),
            version=VersionInfo(
                previous=crate.version,
                actual=self.require("new_version"),
                desired=self.inputs.version,
            ),
            branch_name=self.require("branch_name"),
        )


Stage = Callable[[ReleaseContext], ReleaseContext]


def configure_git(ctx: ReleaseContext) -> ReleaseContext:
    """Set the git identity the release commit is made with."""
    name, email = ctx.inputs.git.user_name, ctx.inputs.git.user_email
    info(f"Setting git user details: {name} <{email}>")
    git("config", "user.name", name)
    git("config", "user.email", email)
    return ctx


def resolve_base_branch(ctx: ReleaseContext, *, github: GitHubClient) -> ReleaseContext:
    base = ctx.inputs.base_branch or github.get_default_branch()
    info(f"PR base branch: {base}")
    return ctx.model_copy(update={"base_branch": base})


def make_branch(ctx: ReleaseContext) -> ReleaseContext:
    """Create and switch to the release branch."""
    branch_name = ctx.inputs.git.branch_name(ctx.inputs.version)
    info(f"Creating branch {branch_name}")
    git("switch", "-c", branch_name)
    set_output("pr-branch", branch_name)
    return ctx.model_copy(update={"branch_name": branch_name})


def find_release_crate(
    ctx: ReleaseContext, *, provider: MetadataProvider
) -> ReleaseContext:
    crate = find_crate(ctx.inputs.crate, provider=provider)
    info(f"  {crate.name} {crate.version} ({crate.path})")
    return ctx.model_copy(update={"crate": crate})


def bump_version(ctx: ReleaseContext, *, provider: MetadataProvider) -> ReleaseContext:
    """Run cargo-release and record the version it produced."""
    new_version = run_cargo_release(
        ctx.require("crate"),
        ctx.inputs.version,
        ctx.require("branch_name"),
        provider=provider,
    )
    set_output("version", new_version)
    return ctx.model_copy(update={"new_version": new_version})


def push_branch(ctx: ReleaseContext) -> ReleaseContext:
    git("push", "origin", ctx.require("branch_name"))
    return ctx


def render_pull_request(ctx: ReleaseContext) -> ReleaseContext:
    variables = ctx.template_vars()
    debug(f"template variables: {variables.model_dump_json(by_alias=True)}")
    rendered = render_pr(ctx.inputs.pr, variables)
    return ctx.model_copy(update={"rendered": rendered})


def open_pull_request(ctx: ReleaseContext, *, github: GitHubClient) -> ReleaseContext:
    """Create the PR, label it if asked, and publish its URL."""
    rendered: RenderedPR = ctx.require("rendered")
    pr = ctx.inputs.pr

    debug("making request to github to create PR")
    pull_request = github.create_pull_request(
        title=rendered.title,
        body=rendered.body,
        head=ctx.require("branch_name"),
        base=ctx.require("base_branch"),
        maintainer_can_modify=pr.modifiable,
        draft=pr.draft,
    )
    if pr.label:
        debug(f"labelling PR #{pull_request.number} with {pr.label}")
        github.add_labels(pull_request.number, [pr.label])

    info(f"PR opened: {pull_request.html_url}")
    set_output("pr-url", pull_request.html_url)
    return ctx.model_copy(update={"pull_request": pull_request})


def build_stages(github: GitHubClient, provider: MetadataProvider) -> list[tuple[str, Stage]]:
    """The pipeline, in execution order, with a header for each stage."""
    return [
        ("Configuring git user", configure_git),
        ("Resolving base branch", partial(resolve_base_branch, github=github)),
        ("Creating release branch", make_branch),
        ("Resolving crate", partial(find_release_crate, provider=provider)),
        ("Bumping version with cargo-release", partial(bump_version, provider=provider)),
        ("Pushing release branch", push_branch),
        ("Rendering pull request", render_pull_request),
        ("Opening pull request", partial(open_pull_request, github=github)),
    ]


def run_release(
    inputs: Inputs,
    *,
    github: GitHubClient | None = None,
    provider: MetadataProvider | None = None,
) -> ReleaseContext:
    """Execute the full release pipeline.

    Args:
        inputs: Validated run configuration.
        github: API client; built from the inputs when None.
        provider: Workspace metadata source; from inputs.metadata_source when None.

    Returns:
        The final context, holding the branch, new version and PR.
    """
    owns_client = github is None
    if github is None:
        github = GitHubClient(
            inputs.github_token.get_secret_value(), inputs.repository, inputs.api_url
        )
    provider = provider or get_provider(inputs.metadata_source)

    ctx = ReleaseContext(inputs=inputs)
    try:
        for header, stage in build_stages(github, provider):
            step(header)
            ctx = stage(ctx)
    finally:
        if owns_client:
            github.close()

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return ctx
