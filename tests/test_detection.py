# tests/test_detection.py
"""Tests for the project root detection backends."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import create_tree
from projfinder.config.settings import DetectorKind
from projfinder.core.detection import (
    ChainRootDetector,
    DetectionResult,
    DetectionStatus,
    GitRootDetector,
    ManifestRootDetector,
    MarkerRootDetector,
    build_detector,
)
from projfinder.exceptions import ConfigError


class TestMarkerRootDetector:

    def test_directory_with_vcs_marker_is_root(self, tmp_path):
        create_tree(tmp_path, ["app/.git"])
        result = MarkerRootDetector().detect(tmp_path / "app")
        assert result.status is DetectionStatus.ROOT
        assert result.root == tmp_path / "app"

    def test_subdirectory_of_project_is_not_root(self, tmp_path):
        """The enclosing project is found, but it is not the directory itself."""
        create_tree(tmp_path, ["app/.git", "app/src"])
        detector = MarkerRootDetector()
        assert detector.find_root(tmp_path / "app" / "src") == tmp_path / "app"
        assert detector.detect(tmp_path / "app" / "src").status is DetectionStatus.NOT_ROOT

    def test_nested_repository_is_its_own_root(self, tmp_path):
        create_tree(tmp_path, ["app/.git", "app/vendor/lib/.hg"])
        assert MarkerRootDetector().detect(tmp_path / "app" / "vendor" / "lib").is_root

    def test_marker_file_counts(self, tmp_path):
        create_tree(tmp_path, ["notes"])
        (tmp_path / "notes" / ".projfinder").write_text("")
        assert MarkerRootDetector().detect(tmp_path / "notes").is_root

    def test_trailing_separator_is_normalized(self, tmp_path):
        create_tree(tmp_path, ["app/.git"])
        result = MarkerRootDetector().detect(str(tmp_path / "app") + "/")
        assert result.root == tmp_path / "app"

    def test_custom_markers(self, tmp_path):
        create_tree(tmp_path, ["app/.git", "other"])
        (tmp_path / "other" / "WORKSPACE").write_text("")
        detector = MarkerRootDetector(["WORKSPACE"])
        assert detector.detect(tmp_path / "other").is_root
        assert not detector.detect(tmp_path / "app").is_root

    def test_top_down_recurring_picks_topmost_of_chain(self, tmp_path):
        create_tree(tmp_path, ["proj/sub/deeper"])
        for d in ("proj", "proj/sub", "proj/sub/deeper"):
            (tmp_path / d / "Makefile").write_text("all:\n")
        detector = MarkerRootDetector(["Makefile"], strategy="top_down_recurring")
        assert detector.find_root(tmp_path / "proj" / "sub" / "deeper") == tmp_path / "proj"
        assert detector.detect(tmp_path / "proj").is_root
        assert not detector.detect(tmp_path / "proj" / "sub").is_root

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ConfigError):
            MarkerRootDetector(strategy="sideways")

    def test_unreadable_directory_fails(self, tmp_path, deny_access):
        create_tree(tmp_path, ["app/.git"])
        deny_access(tmp_path / "app")
        result = MarkerRootDetector().detect(tmp_path / "app")
        assert result.status is DetectionStatus.FAILED
        assert "not readable" in result.error

    def test_backend_error_becomes_failed_result(self, tmp_path):
        detector = MarkerRootDetector()
        with patch.object(MarkerRootDetector, "find_root", side_effect=OSError("bad metadata")):
            result = detector.detect(tmp_path)
        assert result.status is DetectionStatus.FAILED
        assert "bad metadata" in result.error


def test_manifest_detector(tmp_path):
    create_tree(tmp_path, ["service/src"])
    (tmp_path / "service" / "pyproject.toml").write_text("[project]\nname = 'service'\n")
    detector = ManifestRootDetector()
    assert detector.detect(tmp_path / "service").is_root
    assert not detector.detect(tmp_path / "service" / "src").is_root


class TestGitRootDetector:

    @patch("projfinder.core.detection.subprocess.run")
    def test_toplevel_equal_to_directory_is_root(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout=f"{tmp_path}\n", stderr="")
        result = GitRootDetector().detect(tmp_path)
        assert result.is_root
        call_args = mock_run.call_args[0][0]
        assert call_args == ["git", "rev-parse", "--show-toplevel"]
        assert mock_run.call_args[1]["cwd"] == tmp_path

    @patch("projfinder.core.detection.subprocess.run")
    def test_toplevel_elsewhere_is_not_root(self, mock_run, tmp_path):
        create_tree(tmp_path, ["sub"])
        mock_run.return_value = MagicMock(returncode=0, stdout=f"{tmp_path}\n", stderr="")
        assert GitRootDetector().detect(tmp_path / "sub").status is DetectionStatus.NOT_ROOT

    @patch("projfinder.core.detection.subprocess.run")
    def test_outside_work_tree_is_not_root(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal: not a git repository")
        assert GitRootDetector().detect(tmp_path).status is DetectionStatus.NOT_ROOT

    @patch("projfinder.core.detection.subprocess.run")
    def test_missing_git_is_failure(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError()
        result = GitRootDetector().detect(tmp_path)
        assert result.status is DetectionStatus.FAILED
        assert "git executable not found" in result.error

    @patch("projfinder.core.detection.subprocess.run")
    def test_timeout_is_failure(self, mock_run, tmp_path):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=10)
        assert GitRootDetector().detect(tmp_path).status is DetectionStatus.FAILED


class _Fixed:
    def __init__(self, result: DetectionResult):
        self.result = result
        self.calls = 0

    def detect(self, directory: Path) -> DetectionResult:
        self.calls += 1
        return self.result


class TestChainRootDetector:

    def test_first_root_wins(self, tmp_path):
        first = _Fixed(DetectionResult.not_root())
        second = _Fixed(DetectionResult.found(tmp_path))
        third = _Fixed(DetectionResult.found(tmp_path))
        result = ChainRootDetector([first, second, third]).detect(tmp_path)
        assert result.is_root
        assert third.calls == 0

    def test_failure_reported_when_nothing_found(self, tmp_path):
        chain = ChainRootDetector([_Fixed(DetectionResult.failed("boom")), _Fixed(DetectionResult.not_root())])
        result = chain.detect(tmp_path)
        assert result.status is DetectionStatus.FAILED
        assert result.error == "boom"

    def test_root_beats_earlier_failure(self, tmp_path):
        chain = ChainRootDetector([_Fixed(DetectionResult.failed("boom")), _Fixed(DetectionResult.found(tmp_path))])
        assert chain.detect(tmp_path).is_root


def test_build_detector_single_and_chain():
    assert isinstance(build_detector([DetectorKind.MARKERS]), MarkerRootDetector)
    chain = build_detector([DetectorKind.MARKERS, DetectorKind.MANIFESTS, DetectorKind.GIT])
    assert isinstance(chain, ChainRootDetector)
    assert [type(d) for d in chain.detectors] == [MarkerRootDetector, ManifestRootDetector, GitRootDetector]


def test_build_detector_passes_custom_markers():
    detector = build_detector([DetectorKind.MARKERS], markers=[".root"])
    assert detector.markers == [".root"]


def test_build_detector_requires_a_kind():
    with pytest.raises(ConfigError):
        build_detector([])
