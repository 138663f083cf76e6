"""Crate resolution: pick the one workspace member to release."""

from __future__ import annotations

import os

from .actions import debug, error, info
from .errors import AmbiguousPackageError, ConfigurationError, NotFoundError
from .metadata import CargoMetadataProvider, MetadataProvider, normalize_path
from .models import PackageDetails, PackageRef


def normalize_hint_path(path: str) -> str:
    """Make a crate-path hint comparable with member paths.

    Relative hints are taken from the current directory, so "./pkg/../pkg",
    "pkg" and "/repo/pkg" all name the same crate when run from /repo.
    """
    return normalize_path(os.path.abspath(path))


def select_crate(members: list[PackageDetails], ref: PackageRef) -> PackageDetails:
    """Apply the selection policy to an already listed workspace.

    - No hints: the workspace must have exactly one member.
    - One hint: the first member matching it.
    - Both hints: the member matching both; name and path picking
      different members is a conflict.

    Raises:
        NotFoundError: Nothing matches.
        AmbiguousPackageError: No hints and several members.
        ConfigurationError: The name and path hints disagree.
    """
    path = normalize_hint_path(ref.path) if ref.path else None
    debug(f"normalize of crate.path: {path}")

    if ref.is_empty:
        if len(members) == 1:
            info("only one crate in workspace, assuming that is it")
            return members[0]
        if not members:
            error("No crate found at the root, try specifying crate-name or crate-path.")
            raise NotFoundError("No crate found in the workspace")
        raise AmbiguousPackageError([m.name for m in members])

    by_name = next((m for m in members if m.name == ref.name), None) if ref.name else None
    by_path = next((m for m in members if m.path == path), None) if path else None

    if ref.name and path:
        if by_name is not None and by_name == by_path:
            return by_name
        if by_name is not None or by_path is not None:
            error("crate-name and crate-path conflict; prefer only specifying one or fix the mismatch.")
            raise ConfigurationError(
                f"crate-name {ref.name!r} and crate-path {ref.path!r} do not refer to the same crate"
            )
        raise NotFoundError(f"No crate named {ref.name!r} at {path}")

    found = by_name or by_path
    if found is None:
        wanted = f"named {ref.name!r}" if ref.name else f"at {path}"
        raise NotFoundError(f"No crate {wanted} found in the workspace")
    return found


def find_crate(
    ref: PackageRef | None = None, *, provider: MetadataProvider | None = None
) -> PackageDetails:
    """Resolve a crate from the workspace.

    Queries the provider on every call, so calling this again after
    cargo-release has run returns the bumped version.

    Args:
        ref: Optional name/path hints.
        provider: Where to list members from; ``cargo metadata`` by default.
    """
    ref = ref or PackageRef()
    provider = provider or CargoMetadataProvider()
    debug(f"checking and parsing metadata to find name={ref.name} path={ref.path}")

    crate = select_crate(provider.members(), ref)
    debug(f"resolved crate {crate.name} {crate.version} ({crate.path})")
    return crate
