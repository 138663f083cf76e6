"""Data models for cargo-release-pr.

These Pydantic models are the records passed between the resolver, the
release driver and the template renderer. All of them are frozen: a
version bump produces a new PackageDetails, never an edited one.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MANIFEST_NAME = "Cargo.toml"

MergeStrategy = Literal["squash", "merge", "rebase", "bors"]


class PackageRef(BaseModel):
    """Caller's hint for which crate to release.

    Both fields empty means "infer"; both set means "must agree".
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    path: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.path


class PackageDetails(BaseModel):
    """A resolved workspace member.

    Attributes:
        name: Crate name as cargo reports it.
        path: Normalized absolute path to the crate directory.
        version: Current version string from the crate manifest.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    version: str = Field(min_length=1)

    @property
    def manifest_path(self) -> Path:
        return Path(self.path) / MANIFEST_NAME

    @property
    def has_manifest(self) -> bool:
        return self.manifest_path.is_file()


class PRSettings(BaseModel):
    """Pull request inputs, exposed to templates as ``pr``.

    Field names are camelCase inside templates (``pr.mergeStrategy``).
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str
    label: str | None = None
    draft: bool = False
    modifiable: bool = True
    template: str | None = None
    template_file: str | None = None
    merge_strategy: MergeStrategy = "squash"
    release_notes: bool = False


class CrateVars(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str


class VersionInfo(BaseModel):
    """Version triple exposed to templates as ``version``.

    Attributes:
        previous: Version before the bump.
        actual: Version cargo-release produced.
        desired: What was asked for; a literal or a bump keyword.
    """

    model_config = ConfigDict(frozen=True)

    previous: str
    actual: str
    desired: str


class TemplateVars(BaseModel):
    """Everything a PR title or body template can reference."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    pr: PRSettings
    crate: CrateVars
    version: VersionInfo
    branch_name: str
    title: str | None = None

    def with_title(self, title: str) -> TemplateVars:
        """Return a copy carrying the rendered title."""
        return self.model_copy(update={"title": title})

    def namespace(self) -> dict[str, Any]:
        """Plain dict handed to the template engine, keyed as templates spell it."""
        data = self.model_dump(by_alias=True)
        if self.title is None:
            data.pop("title")
        return data


class RenderedPR(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    body: str


class PullRequest(BaseModel):
    """The parts of GitHub's pull request response we use."""

    number: int
    url: str
    html_url: str
