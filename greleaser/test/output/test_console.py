"""Tests for output/console.py."""

from __future__ import annotations

import pytest

from greleaser.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str(self) -> None:
        assert str(Style.WARNING) == "warning"


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()

        console.header("Building project...")
        console.success("done")
        console.warning(".release.env not found")
        console.error("build failed")
        console.info("release: https://example.com")
        console.print("plain")
        console.newline()

        assert console.messages == [
            "Building project...",
            "OK done",
            "warning: .release.env not found",
            "error: build failed",
            "info: release: https://example.com",
            "plain",
            "",
        ]
        assert console.has_success()
        assert console.has_warning()
        assert console.has_error()

    def test_text_and_find(self) -> None:
        console = MockConsole()
        console.print("first")
        console.print("second", Style.DIM)

        assert console.text == "first\nsecond"
        assert [o.style for o in console.find("sec")] == [Style.DIM]

    def test_empty(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        assert console.text == ""

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("ok")


class TestRichConsole:
    def test_stdout_and_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()

        console.success("Successfully created release v1.0.0")
        console.error("failed to create release: [bad request]")
        console.print("- Initial")

        captured = capsys.readouterr()
        assert "Successfully created release v1.0.0" in captured.out
        assert "- Initial" in captured.out
        assert "[bad request]" in captured.err
        assert "failed to create release" not in captured.out
