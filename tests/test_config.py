"""Tests for cargo_release_pr.config."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from cargo_release_pr.config import DEFAULT_PR_TITLE, GitSettings, build_inputs
from cargo_release_pr.errors import ConfigurationError
from cargo_release_pr.models import PackageRef


def _inputs(**overrides):
    options = {"github_token": "ghs_token", "repository": "octo/widgets", "version": "patch"}
    options.update(overrides)
    return build_inputs(**options)


class TestBuildInputs:
    """Tests for build_inputs()."""

    def test_defaults(self) -> None:
        inputs = _inputs()

        assert inputs.github_token.get_secret_value() == "ghs_token"
        assert inputs.crate == PackageRef()
        assert inputs.pr.title == DEFAULT_PR_TITLE
        assert inputs.pr.merge_strategy == "squash"
        assert inputs.pr.modifiable is True
        assert inputs.pr.draft is False
        assert inputs.git.user_name == "github-actions"
        assert inputs.base_branch is None
        assert inputs.metadata_source == "cargo"

    def test_token_is_not_printed(self) -> None:
        assert "ghs_token" not in repr(_inputs())

    @pytest.mark.parametrize("version", ["major", "minor", "patch", "1.2.3", "2.0.0-rc.1"])
    def test_accepts_versions(self, version: str) -> None:
        assert _inputs(version=version).version == version

    @pytest.mark.parametrize("version", ["", "huge", "1.2", "v1.2.3"])
    def test_rejects_versions(self, version: str) -> None:
        with pytest.raises(ConfigurationError, match="version"):
            _inputs(version=version)

    def test_blank_strings_are_absent(self) -> None:
        inputs = _inputs(crate_name="", crate_path=" ", pr_label="", base_branch="")

        assert inputs.crate == PackageRef()
        assert inputs.pr.label is None
        assert inputs.base_branch is None

    def test_crate_hints(self) -> None:
        inputs = _inputs(crate_name="foo", crate_path="crates/foo")

        assert inputs.crate == PackageRef(name="foo", path="crates/foo")

    def test_rejects_unknown_merge_strategy(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid inputs"):
            _inputs(pr_merge_strategy="octopus")

    def test_rejects_unknown_metadata_source(self) -> None:
        with pytest.raises(ConfigurationError):
            _inputs(metadata_source="npm")

    def test_requires_token(self) -> None:
        with pytest.raises(ConfigurationError, match="github-token"):
            _inputs(github_token="")

    def test_requires_repository(self) -> None:
        with pytest.raises(ConfigurationError, match="repository"):
            _inputs(repository=None)

    @patch("cargo_release_pr.config.warning")
    def test_both_templates_warns_and_keeps_both(self, mock_warning: MagicMock) -> None:
        inputs = _inputs(pr_template="inline", pr_template_file="body.md")

        assert inputs.pr.template == "inline"
        assert inputs.pr.template_file == "body.md"
        mock_warning.assert_called_once()
        assert "mutually exclusive" in mock_warning.call_args[0][0]

    @patch("cargo_release_pr.config.warning")
    def test_check_semver_is_reserved(self, mock_warning: MagicMock) -> None:
        assert _inputs(check_semver=True).check_semver is True
        mock_warning.assert_called_once()


class TestGitSettings:
    def test_branch_name(self) -> None:
        assert GitSettings().branch_name("1.2.0") == "release/1.2.0"

    def test_custom_prefix_and_separator(self) -> None:
        git = GitSettings(branch_prefix="bump", branch_separator="-")
        assert git.branch_name("patch") == "bump-patch"
