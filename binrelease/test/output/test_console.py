"""Tests for binrelease.output.console module."""

from __future__ import annotations

import pytest

from binrelease.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()
        console.print("git checkout main", Style.DIM)
        console.success("done")
        console.error("failed")
        console.warning("stale")
        console.info("releasing 0.2.2")

        assert console.messages == [
            "git checkout main",
            "OK done",
            "error: failed",
            "warning: stale",
            "info: releasing 0.2.2",
        ]
        assert console.has_error()
        assert console.has_warning()
        assert console.has_success()
        assert console.count(Style.DIM) == 1

    def test_group_records_header(self) -> None:
        console = MockConsole()
        console.group("Catalog artifacts")
        console.endgroup()
        assert console.outputs[0].style == Style.HEADER
        assert len(console.outputs) == 1

    def test_find_and_clear(self) -> None:
        console = MockConsole()
        console.print("gh release create v0.2.2")
        assert len(console.find("release create")) == 1
        console.clear()
        assert console.outputs == []

    def test_implements_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.newline()


class TestRichConsole:
    def test_plain_output_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("manifest has no [package] table")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "error:" in captured.err
        assert "[package]" in captured.err

    def test_actions_annotations(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(github_actions=True)
        console.error("hash file missing\nsecond line")
        console.warning("stale 100%")
        console.group("Publish release")
        console.endgroup()

        lines = capsys.readouterr().err.splitlines()
        assert lines == [
            "::error::hash file missing%0Asecond line",
            "::warning::stale 100%25",
            "::group::Publish release",
            "::endgroup::",
        ]

    def test_group_outside_actions_is_a_header(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole()
        console.group("Publish release")
        console.endgroup()
        err = capsys.readouterr().err
        assert "Publish release" in err
        assert "::" not in err
