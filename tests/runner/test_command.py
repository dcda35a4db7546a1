"""Tests for runner/command.py and the WorkItem model."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from overalls.config.models import RunConfiguration
from overalls.runner.command import build_test_command, split_test_args
from overalls.runner.models import CoverageFragment, WorkItem


class TestWorkItem:
    """Tests for WorkItem model."""

    def test_package_for_nested_directory(self, tmp_path: Path) -> None:
        item = WorkItem(path=tmp_path / "a" / "b", rel_path="a/b")
        assert item.package == "./a/b"

    def test_package_for_root(self, tmp_path: Path) -> None:
        assert WorkItem(path=tmp_path, rel_path=".").package == "."

    def test_fragment_length_is_byte_count(self) -> None:
        assert len(CoverageFragment(rel_path="a", data=b"mode: set\n")) == 10


class TestSplitTestArgs:
    """Tests for split_test_args function."""

    def test_no_separator_everything_trails(self) -> None:
        assert split_test_args(["-v", "-race"]) == ([], ["-v", "-race"])

    def test_empty(self) -> None:
        assert split_test_args([]) == ([], [])

    def test_splits_at_separator(self) -> None:
        runner, trailing = split_test_args(["-v", "-race", "-args", "-flag=1"])

        assert runner == ["-v", "-race"]
        assert trailing == ["-args", "-flag=1"]

    def test_separator_first(self) -> None:
        assert split_test_args(["-args", "x"]) == ([], ["-args", "x"])

    def test_only_first_separator_splits(self) -> None:
        runner, trailing = split_test_args(["-v", "-args", "a", "-args", "b"])

        assert runner == ["-v"]
        assert trailing == ["-args", "a", "-args", "b"]

    def test_custom_separator(self) -> None:
        assert split_test_args(["-v", "--", "x"], separator="--") == (["-v"], ["--", "x"])


class TestBuildTestCommand:
    """Tests for build_test_command function."""

    @pytest.fixture
    def item(self, tmp_path: Path) -> WorkItem:
        return WorkItem(path=tmp_path / "pkg" / "sub", rel_path="pkg/sub")

    def test_layout(self, tmp_path: Path, item: WorkItem) -> None:
        config = RunConfiguration(project_root=tmp_path, cover_mode="atomic")

        assert build_test_command(item, config) == [
            "go",
            "test",
            "-covermode=atomic",
            "-coverprofile=profile.coverprofile",
            f"-outputdir={tmp_path / 'pkg' / 'sub'}{os.sep}",
            "./pkg/sub",
        ]

    def test_pass_through_without_separator_follows_package(
        self, tmp_path: Path, item: WorkItem
    ) -> None:
        config = RunConfiguration(project_root=tmp_path, test_args=("-v", "-short"))

        cmd = build_test_command(item, config)

        assert cmd[-3:] == ["./pkg/sub", "-v", "-short"]

    def test_pass_through_with_separator(self, tmp_path: Path, item: WorkItem) -> None:
        config = RunConfiguration(
            project_root=tmp_path,
            test_args=("-race", "-timeout=30s", "-args", "-update"),
        )

        cmd = build_test_command(item, config)

        assert cmd[:4] == ["go", "test", "-race", "-timeout=30s"]
        assert cmd[4] == "-covermode=count"
        assert cmd[-3:] == ["./pkg/sub", "-args", "-update"]

    def test_alternate_runner(self, tmp_path: Path, item: WorkItem) -> None:
        config = RunConfiguration(project_root=tmp_path, go_binary="richgo")
        assert build_test_command(item, config)[:2] == ["richgo", "test"]

    def test_root_package(self, tmp_path: Path) -> None:
        config = RunConfiguration(project_root=tmp_path)
        cmd = build_test_command(WorkItem(path=tmp_path, rel_path="."), config)

        assert cmd[-2:] == [f"-outputdir={tmp_path}{os.sep}", "."]

    def test_repeatable_and_config_untouched(self, tmp_path: Path, item: WorkItem) -> None:
        config = RunConfiguration(project_root=tmp_path, test_args=("-v", "-args", "x"))

        first = build_test_command(item, config)
        first.append("mutated")
        second = build_test_command(item, config)

        assert "mutated" not in second
        assert config.test_args == ("-v", "-args", "x")
