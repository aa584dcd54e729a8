"""Tests for the output system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- JSON highlighting decision for print_data
- Global instance management
- Convenience functions
"""

from __future__ import annotations

import pytest

from swagger_reader import output as output_module
from swagger_reader.output import (
    OutputManager,
    _looks_like_json,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("swagger_reader.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("swagger_reader.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "yes")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False

    def test_no_env_vars_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Test that data goes to stdout and diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert captured.out == "hello world\n"
        assert captured.err == ""

    def test_info_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.info("some info")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "some info" in captured.err

    def test_error_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.error("something broke")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: something broke\n"

    def test_warning_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.warning("be careful")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "Warning: be careful\n"

    def test_success_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.success("done")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "done" in captured.err

    def test_progress_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.progress("Dereferencing ...")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "Dereferencing ..." in captured.err

    def test_debug_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, verbose=True)
        mgr.debug("debug info")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "[debug] debug info" in captured.err

    def test_markup_in_message_not_interpreted(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager()
        mgr.error("bad [bold]tag[/bold]")
        captured = capfd.readouterr()
        assert "[bold]tag[/bold]" in captured.err


# ------------------------------------------------------------------ #
# Quiet mode
# ------------------------------------------------------------------ #


class TestQuietMode:
    """Quiet suppresses chatter but never warnings, errors or data."""

    def test_quiet_suppresses_info(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).info("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_suppresses_success(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).success("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_suppresses_progress(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).progress("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warning(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).warning("shown")
        assert "shown" in capfd.readouterr().err

    def test_quiet_keeps_error(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).error("shown")
        assert "shown" in capfd.readouterr().err

    def test_quiet_keeps_data(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).print_data("payload")
        assert capfd.readouterr().out == "payload\n"


# ------------------------------------------------------------------ #
# Verbose mode
# ------------------------------------------------------------------ #


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capfd, non_tty):
        OutputManager(no_color=True, verbose=True).debug("details")
        assert "details" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# print_data highlighting
# ------------------------------------------------------------------ #


class TestPrintData:
    def test_looks_like_json(self):
        assert _looks_like_json('{"a": 1}') is True
        assert _looks_like_json("[1, 2]") is True

    def test_typedef_suffix_is_not_json(self):
        assert _looks_like_json('{"a": 1}\n\n# ----- Generated type definitions -----') is False

    def test_plain_text_is_not_json(self):
        assert _looks_like_json("Document parsed successfully.") is False

    def test_verbatim_when_not_tty(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        text = '{\n  "a": 1\n}'
        OutputManager().print_data(text)
        assert capfd.readouterr().out == text + "\n"

    def test_verbatim_when_no_color(self, capfd, tty):
        text = '{\n  "a": 1\n}'
        OutputManager(no_color=True).print_data(text)
        assert capfd.readouterr().out == text + "\n"


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        mgr = get_output()
        assert isinstance(mgr, OutputManager)
        assert get_output() is mgr

    def test_set_output_replaces_instance(self):
        custom = OutputManager(quiet=True)
        set_output(custom)
        assert get_output() is custom

    def test_reset_output_clears_instance(self):
        set_output(OutputManager(quiet=True))
        reset_output()
        assert output_module._output is None
        assert isinstance(get_output(), OutputManager)


# ------------------------------------------------------------------ #
# Convenience functions
# ------------------------------------------------------------------ #


class TestConvenienceFunctions:
    """Module-level helpers delegate to the global manager."""

    def test_info_delegates(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.info("via module")
        assert "via module" in capfd.readouterr().err

    def test_error_delegates(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.error("via module")
        assert capfd.readouterr().err == "Error: via module\n"

    def test_warning_delegates(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.warning("via module")
        assert capfd.readouterr().err == "Warning: via module\n"

    def test_print_data_delegates(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.print_data("payload")
        assert capfd.readouterr().out == "payload\n"

    def test_debug_respects_global_verbose(self, capfd, non_tty):
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.debug("details")
        assert "details" in capfd.readouterr().err

    def test_success_and_progress_respect_global_quiet(self, capfd, non_tty):
        set_output(OutputManager(no_color=True, quiet=True))
        output_module.success("hidden")
        output_module.progress("hidden")
        assert capfd.readouterr().err == ""
