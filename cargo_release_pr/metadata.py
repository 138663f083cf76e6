"""Workspace metadata providers.

A provider lists the crates of the workspace as PackageDetails. The
resolver only talks to the MetadataProvider protocol, so the text format
cargo uses for package ids stays in this module.

Two providers exist:
- CargoMetadataProvider asks ``cargo metadata`` (the default; it sees the
  workspace exactly as cargo-release will).
- ManifestMetadataProvider reads Cargo.toml files directly, for
  environments where running cargo just to list members is unwanted.
"""

from __future__ import annotations

import glob
import json
import os
import re
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

from .actions import debug, warning
from .errors import ConfigurationError
from .models import MANIFEST_NAME, PackageDetails
from .shell import capture
from .toml import (
    get_package_name,
    get_package_version,
    get_workspace_excludes,
    get_workspace_member_globs,
    has_package,
    load_manifest,
)

# "name version (path+file:///abs/path)", as printed by cargo before 1.77.
_LEGACY_MEMBER = re.compile(r"^(\S+) (\S+) \(path\+([a-z][a-z0-9+.-]*:.+)\)$")
# "path+file:///abs/path#name@version" or "path+file:///abs/name#version".
_PKGID_MEMBER = re.compile(r"^path\+([a-z][a-z0-9+.-]*:[^#\s]+)#(?:([^@#\s]+)@)?(\S+)$")


class MetadataProvider(Protocol):
    """Source of workspace members.

    Implementations must not cache: a call made after a version bump has
    to see the new versions.
    """

    def members(self) -> list[PackageDetails]: ...


def normalize_path(path: str) -> str:
    """Collapse ``.``/``..`` segments and duplicate separators."""
    return os.path.normpath(path)


def _local_path(url: str) -> str:
    """Turn a member's file URL into a normalized filesystem path.

    Raises:
        ConfigurationError: If the URL is not a local file URL.
    """
    parsed = urlparse(url)
    if parsed.scheme != "file":
        raise ConfigurationError(
            f"cargo metadata reported a non-local crate ({url}); "
            "only local workspace members are supported"
        )
    path = normalize_path(unquote(parsed.path))
    debug(f"got crate path: {path}")
    return path


def parse_workspace_member(text: str) -> PackageDetails | None:
    """Parse one ``workspace_members`` entry.

    Returns None (after a warning) when the text matches neither known
    format; such entries are skipped rather than failing the run.

    Examples:
        "foo 0.1.0 (path+file:///repo/foo)" → foo 0.1.0 at /repo/foo
        "path+file:///repo/crates/bar#bar-cli@2.0.0" → bar-cli 2.0.0
        "path+file:///repo/baz#1.2.3" → baz 1.2.3 at /repo/baz
    """
    debug(f'parsing workspace package: "{text}"')

    legacy = _LEGACY_MEMBER.match(text)
    pkgid = _PKGID_MEMBER.match(text)
    if legacy:
        name, version, url = legacy.groups()
        path = _local_path(url)
    elif pkgid:
        url, name, version = pkgid.groups()
        path = _local_path(url)
        name = name or os.path.basename(path)
    else:
        warning(f'could not parse package format: "{text}", skipping')
        return None

    debug(f"got crate name: {name}")
    debug(f"got crate version: {version}")
    return PackageDetails(name=name, path=path, version=version)


class CargoMetadataProvider:
    """Lists workspace members via ``cargo metadata``.

    ``cargo metadata`` works without a Cargo.lock and equally well for
    single crates and workspaces.
    """

    def __init__(self, cwd: str | Path | None = None) -> None:
        self.cwd = cwd

    def raw_members(self) -> list[str]:
        output = capture("cargo", "metadata", "--format-version=1", cwd=self.cwd)
        try:
            metadata = json.loads(output)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"cargo metadata returned invalid JSON: {exc}") from exc

        members = metadata.get("workspace_members") if isinstance(metadata, dict) else None
        if not isinstance(members, list):
            raise ConfigurationError("cargo metadata output has no workspace_members list")
        debug(f"got workspace members: {json.dumps(members)}")
        return [str(m) for m in members]

    def members(self) -> list[PackageDetails]:
        parsed = (parse_workspace_member(m) for m in self.raw_members())
        return [pkg for pkg in parsed if pkg is not None]


class ManifestMetadataProvider:
    """Lists workspace members by reading Cargo.toml files.

    Reads the root manifest's [workspace].members globs (minus
    [workspace].exclude) and each member's [package] table. A root
    manifest that is itself a package counts as a member, listed first.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = root

    def members(self) -> list[PackageDetails]:
        root = Path(self.root) if self.root is not None else Path.cwd()
        root_doc = load_manifest(root / MANIFEST_NAME)

        member_dirs: list[Path] = []
        if has_package(root_doc):
            member_dirs.append(root)

        excluded = {
            normalize_path(os.path.abspath(root / pattern))
            for pattern in get_workspace_excludes(root_doc)
        }
        # Expand globs to find all crate directories
        for pattern in get_workspace_member_globs(root_doc):
            for match in sorted(glob.glob(str(root / pattern))):
                p = Path(match)
                if normalize_path(os.path.abspath(p)) in excluded:
                    continue
                if (p / MANIFEST_NAME).exists() and p not in member_dirs:
                    member_dirs.append(p)

        packages: list[PackageDetails] = []
        for d in member_dirs:
            doc = root_doc if d == root else load_manifest(d / MANIFEST_NAME)
            packages.append(
                PackageDetails(
                    name=get_package_name(doc, d.name),
                    path=normalize_path(os.path.abspath(d)),
                    version=get_package_version(doc, root_doc),
                )
            )
        debug(f"got workspace members: {[p.name for p in packages]}")
        return packages


def get_provider(source: str, cwd: str | Path | None = None) -> MetadataProvider:
    """Build the provider named by the ``metadata-source`` input."""
    if source == "cargo":
        return CargoMetadataProvider(cwd)
    if source == "manifest":
        return ManifestMetadataProvider(cwd)
    raise ConfigurationError(f"Unknown metadata source: {source!r} (expected cargo or manifest)")
