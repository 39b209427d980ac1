"""Tests for the global flag / command splitter."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from bbl.application.command_line_parser import (
    DUPLICATE_STATE_DIR_MESSAGE,
    CommandLineParser,
)
from bbl.commands import COMMAND_NAMES
from bbl.errors import UsageError


def _parser(getwd=lambda: "/some/cwd"):
    usage = MagicMock()
    return CommandLineParser(usage=usage, commands=COMMAND_NAMES, getwd=getwd), usage


# ---------------------------------------------------------------------------
# Command selection
# ---------------------------------------------------------------------------


class TestCommandSelection:
    def test_command_and_flags(self):
        parser, usage = _parser()
        cfg = parser.parse(["up", "--aws-region", "us-east-1"])
        assert cfg.command == "up"
        assert cfg.subcommand_flags == ["--aws-region", "us-east-1"]
        usage.assert_not_called()

    def test_no_args_is_help(self):
        parser, _ = _parser()
        cfg = parser.parse([])
        assert cfg.command == "help"
        assert cfg.subcommand_flags == []

    def test_only_global_flags_is_help(self):
        parser, _ = _parser()
        cfg = parser.parse(["--state-dir", "/tmp/env"])
        assert cfg.command == "help"
        assert cfg.state_dir == "/tmp/env"

    @pytest.mark.parametrize("token", ["help", "--help", "-help", "--h", "-h"])
    def test_help_tokens(self, token):
        parser, _ = _parser()
        cfg = parser.parse([token])
        assert cfg.command == "help"

    def test_help_passes_remaining_tokens_through(self):
        parser, _ = _parser()
        cfg = parser.parse(["help", "destroy"])
        assert cfg.command == "help"
        assert cfg.subcommand_flags == ["destroy"]

    def test_help_after_global_flag(self):
        parser, _ = _parser()
        cfg = parser.parse(["--state-dir", "/x", "--help", "up"])
        assert cfg.command == "help"
        assert cfg.state_dir == "/x"
        assert cfg.subcommand_flags == ["up"]

    def test_help_with_flag_topic_is_accepted(self):
        parser, _ = _parser()
        cfg = parser.parse(["help", "--verbose"])
        assert cfg.subcommand_flags == ["--verbose"]

    def test_help_flag_passes_command_and_its_flags_through(self):
        parser, usage = _parser()
        cfg = parser.parse(["--help", "up", "--aws-stuff"])
        assert cfg.command == "help"
        assert cfg.subcommand_flags == ["up", "--aws-stuff"]
        usage.assert_not_called()

    def test_subcommand_flags_are_verbatim(self):
        parser, _ = _parser()
        cfg = parser.parse(["destroy", "--state-dir", "/ignored", "-n"])
        assert cfg.command == "destroy"
        assert cfg.subcommand_flags == ["--state-dir", "/ignored", "-n"]
        assert cfg.state_dir == "/some/cwd"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_unknown_command(self):
        parser, usage = _parser()
        with pytest.raises(UsageError, match="Unrecognized command 'frobnicate'"):
            parser.parse(["frobnicate"])
        usage.assert_called_once()

    def test_unknown_help_topic(self):
        parser, usage = _parser()
        with pytest.raises(UsageError, match="Unrecognized command 'nope'"):
            parser.parse(["help", "nope"])
        usage.assert_called_once()

    def test_bad_command_reported_before_bad_flag(self):
        parser, usage = _parser()
        with pytest.raises(UsageError, match="Unrecognized command 'bogus'"):
            parser.parse(["--bad-flag", "bogus"])
        usage.assert_called_once()

    def test_unknown_global_flag(self):
        parser, usage = _parser()
        with pytest.raises(UsageError, match="No such option"):
            parser.parse(["--bad-flag", "up"])
        usage.assert_called_once()

    @pytest.mark.parametrize(
        "args",
        [
            ["--state-dir", "/a", "--state-dir", "/b", "up"],
            ["--state-dir=/a", "--state-dir=/b", "up"],
            ["-state-dir", "/a", "-state-dir", "/b", "up"],
            ["-state-dir=/a", "-state-dir=/b", "up"],
            ["--state-dir", "/a", "-state-dir", "/b", "up"],
            ["--state-dir=/a", "-state-dir", "/b", "up"],
            ["-state-dir=/a", "--state-dir", "/b", "up"],
        ],
    )
    def test_duplicate_state_dir(self, args):
        parser, usage = _parser()
        with pytest.raises(UsageError) as excinfo:
            parser.parse(args)
        assert str(excinfo.value) == DUPLICATE_STATE_DIR_MESSAGE
        usage.assert_called_once()

    def test_bad_command_before_help_and_bad_flags(self):
        parser, usage = _parser()
        with pytest.raises(UsageError, match="Unrecognized command 'x'"):
            parser.parse(["--badflag", "x", "help", "delete-lbs", "--other-flag"])
        usage.assert_called_once()

    def test_getwd_error_propagates(self):
        def boom():
            raise OSError("cwd is gone")

        parser, usage = _parser(getwd=boom)
        with pytest.raises(OSError, match="cwd is gone"):
            parser.parse(["up"])
        usage.assert_not_called()


# ---------------------------------------------------------------------------
# Global flags
# ---------------------------------------------------------------------------


class TestGlobalFlags:
    @pytest.mark.parametrize(
        "args",
        [
            ["--state-dir", "/env", "up"],
            ["-state-dir", "/env", "up"],
            ["--state-dir=/env", "up"],
            ["-state-dir=/env", "up"],
        ],
    )
    def test_state_dir_spellings(self, args):
        parser, _ = _parser()
        assert parser.parse(args).state_dir == "/env"

    def test_state_dir_defaults_to_getwd(self):
        parser, _ = _parser(getwd=lambda: "/here")
        assert parser.parse(["version"]).state_dir == "/here"

    def test_getwd_not_called_when_state_dir_given(self):
        getwd = MagicMock(return_value="/here")
        parser, _ = _parser(getwd=getwd)
        parser.parse(["--state-dir", "/env", "version"])
        getwd.assert_not_called()

    def test_endpoint_override(self):
        parser, _ = _parser()
        cfg = parser.parse(["--endpoint-override", "http://localhost:4566", "up"])
        assert cfg.endpoint_override == "http://localhost:4566"
        assert cfg.command == "up"

    def test_both_global_flags(self):
        parser, _ = _parser()
        cfg = parser.parse(
            ["-endpoint-override=http://fake", "--state-dir", "/env", "ssh-key"]
        )
        assert cfg.endpoint_override == "http://fake"
        assert cfg.state_dir == "/env"
        assert cfg.command == "ssh-key"
