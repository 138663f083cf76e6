"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargo_release_pr.models import PackageDetails


class FakeProvider:
    """Metadata provider returning canned member lists, one per call."""

    def __init__(self, *listings: list[PackageDetails]) -> None:
        self.listings = list(listings)
        self.calls = 0

    def members(self) -> list[PackageDetails]:
        listing = self.listings[min(self.calls, len(self.listings) - 1)]
        self.calls += 1
        return listing


@pytest.fixture
def fake_provider() -> type[FakeProvider]:
    """The FakeProvider class, for building providers with canned listings."""
    return FakeProvider


@pytest.fixture(autouse=True)
def no_github_output(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep step outputs out of any real GITHUB_OUTPUT file."""
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)


@pytest.fixture
def cargo_workspace(tmp_path: Path) -> Path:
    """Create a two-crate Cargo workspace on disk."""
    (tmp_path / "Cargo.toml").write_text(
        """\
[workspace]
members = ["crates/*"]
exclude = ["crates/scratch"]

[workspace.package]
version = "0.4.0"
"""
    )
    for name, version in [("alpha", '"1.0.0"'), ("beta", None)]:
        crate_dir = tmp_path / "crates" / name
        crate_dir.mkdir(parents=True)
        version_line = f"version = {version}" if version else "version.workspace = true"
        (crate_dir / "Cargo.toml").write_text(
            f'[package]\nname = "{name}"\n{version_line}\nedition = "2021"\n'
        )
    scratch = tmp_path / "crates" / "scratch"
    scratch.mkdir()
    (scratch / "Cargo.toml").write_text('[package]\nname = "scratch"\nversion = "0.0.1"\n')
    return tmp_path


@pytest.fixture
def single_crate(tmp_path: Path) -> Path:
    """Create a single-crate repository on disk."""
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "solo"\nversion = "0.2.3"\n')
    return tmp_path
