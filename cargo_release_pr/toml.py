"""Cargo.toml reading utilities.

Uses tomlkit so the documents we read are the same objects cargo-release
later edits in place; nothing here writes manifests.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import tomlkit
from tomlkit.exceptions import ParseError as TOMLParseError

from .errors import ConfigurationError


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a Cargo.toml file.

    Raises:
        ConfigurationError: If the file is missing or is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc
    except TOMLParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def is_workspace_root(doc: tomlkit.TOMLDocument) -> bool:
    return "workspace" in doc


def has_package(doc: tomlkit.TOMLDocument) -> bool:
    return "package" in doc


def get_package_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract [package].name, or fallback when it is not set."""
    return str(doc.get("package", {}).get("name", fallback))


def get_package_version(
    doc: tomlkit.TOMLDocument, workspace_doc: tomlkit.TOMLDocument | None = None
) -> str:
    """Extract [package].version.

    Handles ``version.workspace = true`` by reading
    [workspace.package].version from the workspace root manifest. Cargo
    treats a missing version as "0.0.0".
    """
    version = doc.get("package", {}).get("version", "0.0.0")
    if isinstance(version, Mapping):
        if not version.get("workspace"):
            raise ConfigurationError("Unsupported [package].version table")
        if workspace_doc is None:
            raise ConfigurationError(
                "Crate inherits its version from a workspace that was not found"
            )
        inherited = workspace_doc.get("workspace", {}).get("package", {}).get("version")
        if inherited is None:
            raise ConfigurationError("[workspace.package].version is not set")
        return str(inherited)
    return str(version)


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract member glob patterns from [workspace].members.

    Returns an empty list for a single-crate repository.
    """
    return [str(m) for m in doc.get("workspace", {}).get("members", [])]


def get_workspace_excludes(doc: tomlkit.TOMLDocument) -> list[str]:
    return [str(m) for m in doc.get("workspace", {}).get("exclude", [])]
