"""Version bumping with cargo-release.

cargo-release does the actual edit (manifest, lockfile, dependents); this
module makes sure it is installed, runs it with the flags that leave git
pushing, tagging and publishing to us, and checks the version moved.
"""

from __future__ import annotations

import semver

from .actions import debug, info, warning
from .errors import ConfigurationError, NoVersionChangeError
from .metadata import MetadataProvider
from .models import PackageDetails, PackageRef
from .resolver import find_crate
from .shell import probe, run


def ensure_cargo_release() -> None:
    """Install cargo-release if it cannot be run.

    Prefers cargo-binstall (prebuilt binaries) and falls back to building
    from source with cargo install. An installer failure is fatal.
    """
    debug("checking for presence of cargo-release")
    availability = probe("cargo-release")
    if availability.ok:
        return

    warning(f"cargo-release is {availability.value}, attempting to install it")
    if probe("cargo-binstall").ok:
        info("trying to install cargo-release with cargo-binstall")
        run("cargo", "binstall", "--no-confirm", "cargo-release")
    else:
        info("trying to install cargo-release with cargo-install")
        run("cargo", "install", "cargo-release")


def cargo_release_args(version: str, branch_name: str) -> list[str]:
    """Build the ``cargo release`` command line.

    Changes are executed (not a dry run) but push, tag, publish and the
    confirmation prompt are all disabled. Dependent crates in the workspace
    get their requirement on this crate upgraded. The requested version
    (literal or bump keyword) goes last.
    """
    return [
        "release",
        "--execute",
        "--no-push",
        "--no-tag",
        "--no-publish",
        "--no-confirm",
        "--verbose",
        "--allow-branch",
        branch_name,
        "--dependent-version",
        "upgrade",
        version,
    ]


def describe_bump(old: str, new: str) -> str | None:
    """Name the kind of change between two versions, if both are semver.

    Examples:
        "1.2.3", "2.0.0" → "major"
        "1.2.3", "1.2.4" → "patch"
        "1.2.3", "1.3.0-rc.1" → "minor"
    """
    try:
        before = semver.Version.parse(old)
        after = semver.Version.parse(new)
    except ValueError:
        return None
    if after.major != before.major:
        return "major"
    if after.minor != before.minor:
        return "minor"
    if after.patch != before.patch:
        return "patch"
    if after.prerelease != before.prerelease:
        return "prerelease"
    return None


def run_cargo_release(
    crate: PackageDetails,
    version: str,
    branch_name: str,
    *,
    provider: MetadataProvider | None = None,
) -> str:
    """Bump a crate's version in place and return the new version.

    The returned version comes from re-resolving the crate afterwards, not
    from the requested version, since a bump keyword only becomes a
    version once cargo-release has applied it.

    Args:
        crate: The crate as resolved before the bump.
        version: Literal version or bump keyword (major, minor, patch).
        branch_name: Release branch cargo-release is allowed to run on.
        provider: Metadata provider used for re-resolution.

    Raises:
        ConfigurationError: The crate directory has no Cargo.toml.
        ProcessError: cargo-release (or its installation) failed.
        NoVersionChangeError: cargo-release succeeded but changed nothing.
    """
    if not crate.has_manifest:
        raise ConfigurationError(f"No Cargo.toml found in crate directory {crate.path}")

    ensure_cargo_release()

    debug("running cargo release")
    run("cargo", *cargo_release_args(version, branch_name), cwd=crate.path)

    debug("checking version after releasing")
    bumped = find_crate(PackageRef(name=crate.name, path=crate.path), provider=provider)
    info(f"new version: {bumped.version}")

    if bumped.version == crate.version:
        raise NoVersionChangeError(crate.version)

    kind = describe_bump(crate.version, bumped.version)
    if kind:
        debug(f"{crate.name}: {kind} release {crate.version} → {bumped.version}")
    return bumped.version
